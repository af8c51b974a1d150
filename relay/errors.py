"""
Relay error hierarchy.

Only mark-as-read failures are swallowed by the relay. Everything else
surfaces as one of these, chained to the collaborator error that caused it.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from transport.whatsapp.schemas import SendResult


class RelayError(Exception):
    """Base class for relay failures."""
    pass


class InvalidInputError(RelayError):
    """The relay was handed no webhook at all."""
    pass


class ValidationFailedError(RelayError):
    """A required field of an outbound request is missing."""
    pass


class CollaboratorTransportError(RelayError):
    """Network or API failure talking to WhatsApp or the model backend."""
    pass


class ModelBackendError(CollaboratorTransportError):
    """The model backend did not produce a reply."""

    def __init__(self, message: str, error_type: Optional[str] = None):
        super().__init__(message)
        self.error_type = error_type


class MessageSendError(RelayError):
    """
    Sending failed.

    `result` holds whatever the platform answered (status "failed" plus the
    API error text), or None when the platform could not be reached.
    """

    def __init__(self, message: str, result: Optional["SendResult"] = None):
        super().__init__(message)
        self.result = result


class WebhookProcessingError(RelayError):
    """A webhook delivery aborted on its first fatal error."""

    prefix = "failed to process messages"

    def __init__(self, message: str):
        super().__init__(f"{self.prefix}: {message}")


class ReplyGenerationFailedError(WebhookProcessingError):
    """The model backend failed while generating an auto-reply."""
    pass


class ReplySendFailedError(WebhookProcessingError):
    """The auto-reply could not be delivered."""
    pass
