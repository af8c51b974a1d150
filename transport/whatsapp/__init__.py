"""WhatsApp Transport Layer - Module Exports"""

from .schemas import (
    AudioMessage,
    DocumentMessage,
    ErrorResponse,
    ImageMessage,
    InboundMessage,
    OutboundMessageRequest,
    SendResult,
    TextMessage,
    UnsupportedMessage,
    WebhookEnvelope,
)
from .normalize import (
    RecipientNormalizer,
    extract_content,
    get_recipient_normalizer,
    strip_mobile_prefix_nine,
)
from .security import verify_signature, verify_webhook_challenge
from .sender import WhatsAppClient, WhatsAppSenderError

__all__ = [
    # Schemas
    "WebhookEnvelope",
    "InboundMessage",
    "TextMessage",
    "ImageMessage",
    "AudioMessage",
    "DocumentMessage",
    "UnsupportedMessage",
    "OutboundMessageRequest",
    "SendResult",
    "ErrorResponse",
    # Normalization
    "extract_content",
    "strip_mobile_prefix_nine",
    "get_recipient_normalizer",
    "RecipientNormalizer",
    # Security
    "verify_signature",
    "verify_webhook_challenge",
    # Client
    "WhatsAppClient",
    "WhatsAppSenderError",
]
