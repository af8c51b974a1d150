"""
WhatsApp HTTP Routes

FastAPI router for webhook verification, webhook deliveries and direct sends.
All business logic lives in the relay; this module only maps HTTP to it.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

from config import Config
from infra.bootstrap import bootstrap_infrastructure
from relay import MessageSendError, RelayError, ValidationFailedError, WhatsAppRelay

from .schemas import ErrorResponse, OutboundMessageRequest, WebhookEnvelope
from .security import verify_signature, verify_webhook_challenge

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/whatsapp", tags=["WhatsApp"])


def get_relay() -> WhatsAppRelay:
    """Dependency returning the process-wide relay."""
    return bootstrap_infrastructure().get_relay()


def error_response(status_code: int, error: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, code=status_code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


# ============================================================================
# DIRECT SEND
# ============================================================================

@router.post("/send")
async def send_message(
    message: OutboundMessageRequest,
    relay: WhatsAppRelay = Depends(get_relay),
):
    """
    Send a message on behalf of the caller.

    Returns:
        SendResult on success
        400 invalid_request when a required field is empty
        500 send_failed when WhatsApp rejects or cannot be reached
    """

    if not message.message_type:
        message.message_type = "text"

    try:
        result = await relay.send_message(message)
    except ValidationFailedError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, "invalid_request", str(e))
    except MessageSendError as e:
        logger.error(
            f"Send failed: {e}",
            extra={"to": message.to, "api_message": e.result.message if e.result else None},
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "send_failed", str(e))

    return result.model_dump(exclude_none=True)


# ============================================================================
# WEBHOOK CHALLENGE (Setup only)
# ============================================================================

@router.get("/webhook")
async def verify_webhook(
    hub_mode: Optional[str] = Query(None, alias="hub.mode"),
    hub_challenge: Optional[str] = Query(None, alias="hub.challenge"),
    hub_verify_token: Optional[str] = Query(None, alias="hub.verify_token"),
):
    """Echo the challenge back when Meta subscribes with the right token."""

    challenge = verify_webhook_challenge(
        hub_mode, hub_challenge, hub_verify_token, Config.WEBHOOK_VERIFY_TOKEN
    )
    if challenge is None:
        logger.warning("Webhook verification failed", extra={"hub_mode": hub_mode})
        return error_response(
            status.HTTP_403_FORBIDDEN, "verification_failed", "Webhook verification failed"
        )

    return PlainTextResponse(challenge)


# ============================================================================
# WEBHOOK RECEIVER (Message processing)
# ============================================================================

@router.post("/webhook")
async def receive_webhook(request: Request, relay: WhatsAppRelay = Depends(get_relay)):
    """
    Receive a WhatsApp webhook delivery.

    Flow:
    1. Read raw body
    2. Verify signature (when WHATSAPP_APP_SECRET is set)
    3. Parse into WebhookEnvelope (400 invalid_webhook if malformed)
    4. Hand it to the relay

    Processing failures are logged, and the delivery is still acknowledged
    with 200 since WhatsApp redelivers anything else.
    """

    body = await request.body()
    verify_signature(request, body, Config.WHATSAPP_APP_SECRET)

    try:
        envelope = WebhookEnvelope.model_validate_json(body)
    except ValidationError as e:
        logger.warning(f"Invalid webhook payload: {e}")
        return error_response(status.HTTP_400_BAD_REQUEST, "invalid_webhook", str(e))

    try:
        await relay.process_incoming_webhook(envelope)
    except RelayError as e:
        logger.error(f"Webhook processing failed: {e}", exc_info=True)

    return {"status": "ok"}
