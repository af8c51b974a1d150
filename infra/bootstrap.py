"""
Infrastructure initialization and bootstrap.

Singleton pattern for wiring the relay and its collaborators from configuration.
"""

import logging
from typing import Optional

from config import Config
from inference import HttpModelBackend, ModelBackend, StubModelBackend
from relay import WhatsAppRelay
from transport.whatsapp.normalize import get_recipient_normalizer
from transport.whatsapp.sender import WhatsAppClient

logger = logging.getLogger(__name__)


def create_llm_backend(config: type[Config] = Config) -> ModelBackend:
    """Create LLM backend instance based on LLM_BACKEND."""
    if config.LLM_BACKEND == "stub":
        return StubModelBackend()
    if config.LLM_BACKEND != "http":
        logger.warning(f"Unknown LLM_BACKEND '{config.LLM_BACKEND}', using http")
    return HttpModelBackend(url=config.LLM_URL, bearer_token=config.LLM_BEARER_TOKEN)


class InfraBootstrap:
    """
    Bootstrap infrastructure based on configuration.

    Singleton pattern - single instance per process.
    """

    _instance: Optional["InfraBootstrap"] = None

    def __init__(self, config: type[Config] = Config):
        """Initialize bootstrap with configuration."""
        self.config = config
        self.llm_backend = create_llm_backend(config)
        self.whatsapp_client = WhatsAppClient(
            api_key=config.WHATSAPP_API_KEY,
            base_url=config.WHATSAPP_BASE_URL,
        )
        self.relay = WhatsAppRelay(
            whatsapp_client=self.whatsapp_client,
            model_backend=self.llm_backend,
            recipient_normalizer=get_recipient_normalizer(config.RECIPIENT_NORMALIZER),
            model_timeout_s=config.LLM_TIMEOUT_S,
        )

    @classmethod
    def get_instance(cls, config: type[Config] = Config) -> "InfraBootstrap":
        """
        Get singleton instance.

        Args:
            config: Optional custom configuration (only used first time)

        Returns:
            Singleton InfraBootstrap instance
        """
        if cls._instance is None:
            cls._instance = cls(config)
        return cls._instance

    @classmethod
    def reset(cls):
        """Reset singleton (for testing)."""
        cls._instance = None

    def get_relay(self) -> WhatsAppRelay:
        """Get the wired relay."""
        return self.relay

    def __repr__(self) -> str:
        return (
            f"InfraBootstrap(llm={self.llm_backend.name}, "
            f"whatsapp={self.config.WHATSAPP_BASE_URL}, "
            f"normalizer={self.config.RECIPIENT_NORMALIZER})"
        )


def bootstrap_infrastructure(config: type[Config] = Config) -> InfraBootstrap:
    """
    Bootstrap all infrastructure backends.

    Returns:
        InfraBootstrap instance with all backends initialized
    """
    return InfraBootstrap.get_instance(config)
