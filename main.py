"""
FastAPI Application Entry Point

Integrates:
  - WhatsApp webhook + send routes
  - Health check
  - Middleware for CORS, logging & error handling

Run: uvicorn main:app --reload --host 0.0.0.0 --port 8080
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Config, configure_logging
from transport.whatsapp.schemas import ErrorResponse
from transport.whatsapp.webhook import router as whatsapp_router

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan: startup and shutdown handlers.
    """
    # Startup
    logger.info("=" * 60)
    logger.info("WhatsApp relay starting up...")
    logger.info(f"Environment: {Config.ENVIRONMENT}")
    logger.info(f"LLM Backend: {Config.LLM_BACKEND} ({Config.LLM_URL})")
    logger.info(f"WhatsApp API: {Config.WHATSAPP_BASE_URL}")
    Config.validate()
    logger.info("=" * 60)

    yield

    # Shutdown
    logger.info("WhatsApp relay shutting down...")


# Create FastAPI app
app = FastAPI(
    title="WhatsApp Relay API",
    description="Relays WhatsApp messages to a language model and sends back its replies",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=".*",
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
    allow_headers=["Origin", "Content-Length", "Content-Type", "Authorization", "X-Phone-Number-ID"],
    expose_headers=["Content-Length"],
    max_age=12 * 60 * 60,
)


# Middleware for logging
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    logger.debug(f"{request.method} {request.url.path}")
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"Request error: {str(e)}", exc_info=True)
        body = ErrorResponse(
            error="internal_server_error",
            message="An unexpected error occurred",
            code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
        return JSONResponse(status_code=500, content=body.model_dump())
    logger.info(f"{request.method} {request.url.path} -> {response.status_code}")
    return response


@app.exception_handler(RequestValidationError)
async def invalid_request_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies answer 400 with the relay's error shape."""
    body = ErrorResponse(
        error="invalid_request",
        message=str(exc),
        code=status.HTTP_400_BAD_REQUEST,
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump())


# Include routers
app.include_router(whatsapp_router)


# Health check endpoint
@app.get("/health")
async def health():
    """Liveness check."""
    return {"status": "ok", "message": "WhatsApp relay API is running"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=Config.SERVER_PORT,
        reload=False,
    )
