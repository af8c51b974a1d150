"""
Configuration management for the WhatsApp relay.

Loads environment variables from .env file and provides typed access to configuration.
"""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "panic": logging.CRITICAL,
}


class Config:
    """Configuration class for the WhatsApp relay."""

    # Server
    SERVER_PORT = int(os.getenv("SERVER_PORT", "8080"))
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "info")

    # WhatsApp Cloud API
    WHATSAPP_API_KEY = os.getenv("WHATSAPP_API_KEY", "")
    WHATSAPP_BASE_URL = os.getenv("WHATSAPP_BASE_URL", "https://graph.facebook.com/v20.0")
    WEBHOOK_VERIFY_TOKEN = os.getenv("WEBHOOK_VERIFY_TOKEN", "")
    WHATSAPP_APP_SECRET = os.getenv("WHATSAPP_APP_SECRET", "")
    RECIPIENT_NORMALIZER = os.getenv("RECIPIENT_NORMALIZER", "ar_mobile")

    # LLM Backend Configuration
    LLM_BACKEND = os.getenv("LLM_BACKEND", "http")
    LLM_URL = os.getenv("LLM_URL", "http://localhost:8081/api/v1/chat/ask")
    LLM_BEARER_TOKEN = os.getenv("LLM_BEARER_TOKEN", "")
    LLM_TIMEOUT_S = int(os.getenv("LLM_TIMEOUT_S", "30"))

    @classmethod
    def validate(cls) -> bool:
        """Validate that required configuration is set."""
        required = ["WHATSAPP_API_KEY", "WEBHOOK_VERIFY_TOKEN"]
        missing = [key for key in required if not getattr(cls, key)]

        if missing:
            logging.getLogger(__name__).warning(
                f"Missing required environment variables: {', '.join(missing)}"
            )
            return False

        return True


def resolve_log_level(name: str) -> int:
    """Map a LOG_LEVEL name to a logging level, INFO when unknown."""
    return _LOG_LEVELS.get(name.strip().lower(), logging.INFO)


def configure_logging(level_name: str | None = None) -> None:
    """Setup root logging from LOG_LEVEL."""
    logging.basicConfig(
        level=resolve_log_level(level_name or Config.LOG_LEVEL),
        format=LOG_FORMAT,
    )
