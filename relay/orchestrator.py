"""
WhatsApp Relay Orchestrator

Turns inbound WhatsApp messages into model-generated replies.

Per inbound message:
  mark as read (best effort) → ask model → normalize recipient → send reply

Error policy is deliberately asymmetric: read receipts are logged and
forgotten, while a model or send failure aborts the whole webhook delivery
(later messages in the same batch are not attempted).
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Optional

from inference import ModelBackend, ModelRequest
from transport.whatsapp.normalize import (
    RecipientNormalizer,
    extract_content,
    strip_mobile_prefix_nine,
)
from transport.whatsapp.schemas import (
    InboundMessage,
    OutboundMessageRequest,
    SendResult,
    WebhookEnvelope,
)

from .errors import (
    CollaboratorTransportError,
    InvalidInputError,
    MessageSendError,
    ModelBackendError,
    ReplyGenerationFailedError,
    ReplySendFailedError,
    ValidationFailedError,
)

if TYPE_CHECKING:
    from transport.whatsapp.sender import WhatsAppClient

logger = logging.getLogger(__name__)


class WhatsAppRelay:
    """
    Stateless relay between WhatsApp and a model backend.

    Every call works on its own arguments only, so one instance can serve
    concurrent requests.
    """

    def __init__(
        self,
        whatsapp_client: "WhatsAppClient",
        model_backend: ModelBackend,
        recipient_normalizer: RecipientNormalizer = strip_mobile_prefix_nine,
        model_timeout_s: Optional[int] = 30,
    ):
        """
        Args:
            whatsapp_client: Sends messages and read receipts
            model_backend: Generates reply text
            recipient_normalizer: Maps a webhook `from` number to a send `to` number
            model_timeout_s: Per-request timeout handed to the model backend
        """
        self.whatsapp_client = whatsapp_client
        self.model_backend = model_backend
        self.recipient_normalizer = recipient_normalizer
        self.model_timeout_s = model_timeout_s

    async def send_message(self, request: OutboundMessageRequest) -> SendResult:
        """
        Validate and send one message. Exactly one attempt.

        Raises:
            ValidationFailedError: a required field is empty (nothing sent)
            MessageSendError: WhatsApp failed; `.result` holds the API's
                failure report, or None if WhatsApp was unreachable
        """
        if not request.phone_number_id:
            raise ValidationFailedError("phone number ID is required")
        if not request.to:
            raise ValidationFailedError("recipient phone number is required")
        if not request.content:
            raise ValidationFailedError("message content is required")

        try:
            return await self.whatsapp_client.send_message(request)
        except CollaboratorTransportError as e:
            raise MessageSendError(
                f"failed to send message: {e}", result=getattr(e, "result", None)
            ) from e

    async def process_incoming_webhook(self, envelope: Optional[WebhookEnvelope]) -> None:
        """
        Answer every inbound text message of a webhook delivery.

        Raises:
            InvalidInputError: envelope is None
            ReplyGenerationFailedError: the model failed; processing stopped
            ReplySendFailedError: the reply could not be sent; processing stopped
        """
        if envelope is None:
            raise InvalidInputError("webhook data cannot be None")

        for entry in envelope.entry:
            for change in entry.changes:
                phone_number_id = change.value.metadata.phone_number_id
                logger.debug(
                    f"{len(change.value.messages)} message(s) received",
                    extra={"phone_number_id": phone_number_id, "field": change.field},
                )
                for message in change.value.messages:
                    await self._process_message(message, phone_number_id)

    async def _process_message(self, message: InboundMessage, phone_number_id: str) -> None:
        content = extract_content(message)

        await self._mark_as_read(phone_number_id, message.id)

        if not content or message.type != "text":
            logger.debug(
                f"Skipping message {message.id}",
                extra={"message_type": message.type},
            )
            return

        try:
            reply = await self._generate_reply(content, message.id)
        except ModelBackendError as e:
            logger.error(f"Failed to generate reply: {e}", extra={"message_id": message.id})
            raise ReplyGenerationFailedError(f"failed to generate reply: {e}") from e

        try:
            await self.send_message(
                OutboundMessageRequest(
                    phone_number_id=phone_number_id,
                    to=self.recipient_normalizer(message.from_),
                    content=reply,
                    message_type="text",
                )
            )
        except (ValidationFailedError, MessageSendError) as e:
            logger.error(f"Failed to send auto-reply: {e}", extra={"message_id": message.id})
            raise ReplySendFailedError(f"failed to send auto-reply: {e}") from e

        logger.info(
            f"Auto-reply sent for message {message.id}",
            extra={"message_id": message.id, "reply_length": len(reply)},
        )

    async def _mark_as_read(self, phone_number_id: str, message_id: str) -> None:
        try:
            await self.whatsapp_client.mark_as_read(phone_number_id, message_id)
        except Exception as e:
            # Read receipts never block the reply
            logger.warning(f"Failed to mark message as read: {e}", extra={"message_id": message_id})

    async def _generate_reply(self, prompt: str, message_id: str) -> str:
        request = ModelRequest(prompt=prompt, timeout_s=self.model_timeout_s, message_id=message_id)
        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(None, self.model_backend.generate, request)

        if not response.ok:
            raise ModelBackendError(
                f"model backend returned {response.status} ({response.error_type})",
                error_type=response.error_type,
            )
        return response.output or ""
