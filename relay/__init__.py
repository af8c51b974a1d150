"""
Relay core - webhook processing and outbound dispatch.
"""

from .errors import (
    CollaboratorTransportError,
    InvalidInputError,
    MessageSendError,
    ModelBackendError,
    RelayError,
    ReplyGenerationFailedError,
    ReplySendFailedError,
    ValidationFailedError,
    WebhookProcessingError,
)
from .orchestrator import WhatsAppRelay

__all__ = [
    "WhatsAppRelay",
    "RelayError",
    "InvalidInputError",
    "ValidationFailedError",
    "CollaboratorTransportError",
    "ModelBackendError",
    "MessageSendError",
    "WebhookProcessingError",
    "ReplyGenerationFailedError",
    "ReplySendFailedError",
]
