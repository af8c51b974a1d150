"""
WhatsApp Relay Flow Tests

End-to-end flow through the relay: webhook → read receipt → model → reply.
Collaborators are in-memory fakes; no network.
"""

import pytest

from conftest import FakeWhatsAppClient, make_webhook, text_message
from inference import StubModelBackend
from relay import (
    InvalidInputError,
    MessageSendError,
    ReplyGenerationFailedError,
    ReplySendFailedError,
    ValidationFailedError,
    WebhookProcessingError,
    WhatsAppRelay,
)
from relay.errors import CollaboratorTransportError, ModelBackendError
from transport.whatsapp.normalize import identity
from transport.whatsapp.schemas import OutboundMessageRequest, WebhookEnvelope
from transport.whatsapp.sender import WhatsAppSenderError


def _envelope(*messages):
    return WebhookEnvelope.model_validate(make_webhook(*messages))


class TestProcessIncomingWebhook:

    @pytest.mark.asyncio
    async def test_empty_entry_list_succeeds(self, fake_client):
        relay = WhatsAppRelay(fake_client, StubModelBackend())

        await relay.process_incoming_webhook(
            WebhookEnvelope(object="whatsapp_business_account", entry=[])
        )

        assert fake_client.sent == []
        assert fake_client.read == []

    @pytest.mark.asyncio
    async def test_none_envelope_is_invalid_input(self, fake_client):
        relay = WhatsAppRelay(fake_client, StubModelBackend())

        with pytest.raises(InvalidInputError):
            await relay.process_incoming_webhook(None)

    @pytest.mark.asyncio
    async def test_text_message_gets_normalized_reply(self, fake_client):
        model = StubModelBackend(reply="Hi there")
        relay = WhatsAppRelay(fake_client, model)

        await relay.process_incoming_webhook(
            _envelope(text_message("Hello", sender="5491112345678"))
        )

        assert model.prompts == ["Hello"]
        assert fake_client.sent == [
            OutboundMessageRequest(
                phone_number_id="106540352242922",
                to="541112345678",
                content="Hi there",
                message_type="text",
            )
        ]

    @pytest.mark.asyncio
    async def test_read_receipt_uses_business_number_and_message_id(self, fake_client):
        relay = WhatsAppRelay(fake_client, StubModelBackend())

        await relay.process_incoming_webhook(_envelope(text_message("Hello", message_id="wamid.abc")))

        assert fake_client.read == [("106540352242922", "wamid.abc")]

    @pytest.mark.asyncio
    async def test_twelve_digit_sender_unchanged(self, fake_client):
        relay = WhatsAppRelay(fake_client, StubModelBackend())

        await relay.process_incoming_webhook(_envelope(text_message("Hello", sender="541112345678")))

        assert fake_client.sent[0].to == "541112345678"

    @pytest.mark.asyncio
    async def test_other_country_sender_unchanged(self, fake_client):
        relay = WhatsAppRelay(fake_client, StubModelBackend())

        await relay.process_incoming_webhook(_envelope(text_message("Hello", sender="1234567890123")))

        assert fake_client.sent[0].to == "1234567890123"

    @pytest.mark.asyncio
    async def test_custom_normalizer_is_used(self, fake_client):
        relay = WhatsAppRelay(fake_client, StubModelBackend(), recipient_normalizer=identity)

        await relay.process_incoming_webhook(_envelope(text_message("Hello", sender="5491112345678")))

        assert fake_client.sent[0].to == "5491112345678"

    @pytest.mark.asyncio
    async def test_read_receipt_failure_does_not_block_reply(self, transport_error):
        client = FakeWhatsAppClient(read_error=transport_error)
        relay = WhatsAppRelay(client, StubModelBackend(reply="Hi there"))

        await relay.process_incoming_webhook(_envelope(text_message("Hello")))

        assert len(client.read) == 1
        assert client.sent[0].content == "Hi there"

    @pytest.mark.asyncio
    async def test_model_failure_aborts_without_sending(self, fake_client):
        relay = WhatsAppRelay(fake_client, StubModelBackend(error_type="backend_unavailable"))

        with pytest.raises(ReplyGenerationFailedError) as exc_info:
            await relay.process_incoming_webhook(_envelope(text_message("Hello")))

        assert fake_client.sent == []
        assert isinstance(exc_info.value, WebhookProcessingError)
        assert isinstance(exc_info.value.__cause__, ModelBackendError)
        assert str(exc_info.value).startswith("failed to process messages")

    @pytest.mark.asyncio
    async def test_send_failure_is_reply_send_failed(self, sender_error):
        client = FakeWhatsAppClient(send_error=sender_error)
        relay = WhatsAppRelay(client, StubModelBackend())

        with pytest.raises(ReplySendFailedError) as exc_info:
            await relay.process_incoming_webhook(_envelope(text_message("Hello")))

        assert isinstance(exc_info.value.__cause__, MessageSendError)
        assert "failed to process messages" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_empty_model_reply_is_reply_send_failed(self, fake_client):
        relay = WhatsAppRelay(fake_client, StubModelBackend(reply=""))

        with pytest.raises(ReplySendFailedError) as exc_info:
            await relay.process_incoming_webhook(_envelope(text_message("Hello")))

        assert isinstance(exc_info.value.__cause__, ValidationFailedError)
        assert fake_client.sent == []

    @pytest.mark.asyncio
    async def test_first_failure_stops_the_batch(self, fake_client):
        relay = WhatsAppRelay(fake_client, StubModelBackend(error_type="timeout"))

        with pytest.raises(ReplyGenerationFailedError):
            await relay.process_incoming_webhook(_envelope(
                text_message("first", message_id="m1"),
                text_message("second", message_id="m2"),
            ))

        assert fake_client.read == [("106540352242922", "m1")]

    @pytest.mark.asyncio
    async def test_every_message_in_batch_is_answered(self, fake_client):
        model = StubModelBackend()
        relay = WhatsAppRelay(fake_client, model)

        await relay.process_incoming_webhook(_envelope(
            text_message("first", message_id="m1"),
            text_message("second", message_id="m2"),
        ))

        assert model.prompts == ["first", "second"]
        assert len(fake_client.sent) == 2

    @pytest.mark.asyncio
    async def test_image_message_is_read_but_not_answered(self, fake_client):
        model = StubModelBackend()
        relay = WhatsAppRelay(fake_client, model)

        await relay.process_incoming_webhook(_envelope({
            "from": "5491112345678",
            "id": "wamid.img_1",
            "timestamp": "1707500000",
            "type": "image",
            "image": {"id": "img_file", "mime_type": "image/jpeg"},
        }))

        assert fake_client.read == [("106540352242922", "wamid.img_1")]
        assert fake_client.sent == []
        assert model.prompts == []

    @pytest.mark.asyncio
    async def test_empty_text_body_is_skipped(self, fake_client):
        model = StubModelBackend()
        relay = WhatsAppRelay(fake_client, model)

        await relay.process_incoming_webhook(_envelope(text_message("")))

        assert len(fake_client.read) == 1
        assert model.prompts == []
        assert fake_client.sent == []


class TestSendMessage:

    @pytest.mark.asyncio
    async def test_missing_phone_number_id(self, fake_client):
        relay = WhatsAppRelay(fake_client, StubModelBackend())

        with pytest.raises(ValidationFailedError) as exc_info:
            await relay.send_message(
                OutboundMessageRequest(phone_number_id="", to="541112345678", content="Hi")
            )

        assert "phone number ID" in str(exc_info.value)
        assert fake_client.sent == []

    @pytest.mark.asyncio
    async def test_missing_recipient(self, fake_client):
        relay = WhatsAppRelay(fake_client, StubModelBackend())

        with pytest.raises(ValidationFailedError, match="recipient phone number is required"):
            await relay.send_message(OutboundMessageRequest(phone_number_id="1", to="", content="Hi"))

        assert fake_client.sent == []

    @pytest.mark.asyncio
    async def test_missing_content(self, fake_client):
        relay = WhatsAppRelay(fake_client, StubModelBackend())

        with pytest.raises(ValidationFailedError, match="message content is required"):
            await relay.send_message(OutboundMessageRequest(phone_number_id="1", to="2", content=""))

    @pytest.mark.asyncio
    async def test_validation_order(self, fake_client):
        relay = WhatsAppRelay(fake_client, StubModelBackend())

        with pytest.raises(ValidationFailedError, match="phone number ID"):
            await relay.send_message(OutboundMessageRequest(phone_number_id="", to="", content=""))

    @pytest.mark.asyncio
    async def test_success(self, fake_client):
        relay = WhatsAppRelay(fake_client, StubModelBackend())

        result = await relay.send_message(
            OutboundMessageRequest(phone_number_id="1", to="2", content="Hi")
        )

        assert result.status == "sent"
        assert result.message_id == "wamid.reply_1"
        assert len(fake_client.sent) == 1

    @pytest.mark.asyncio
    async def test_api_failure_surfaces_result_and_error(self, sender_error):
        client = FakeWhatsAppClient(send_error=sender_error)
        relay = WhatsAppRelay(client, StubModelBackend())

        with pytest.raises(MessageSendError) as exc_info:
            await relay.send_message(OutboundMessageRequest(phone_number_id="1", to="2", content="Hi"))

        assert str(exc_info.value).startswith("failed to send message")
        assert exc_info.value.result is not None
        assert exc_info.value.result.status == "failed"
        assert exc_info.value.result.message == "Invalid phone number"
        assert isinstance(exc_info.value.__cause__, WhatsAppSenderError)
        assert len(client.sent) == 1

    @pytest.mark.asyncio
    async def test_transport_failure_has_no_result(self, transport_error):
        client = FakeWhatsAppClient(send_error=transport_error)
        relay = WhatsAppRelay(client, StubModelBackend())

        with pytest.raises(MessageSendError) as exc_info:
            await relay.send_message(OutboundMessageRequest(phone_number_id="1", to="2", content="Hi"))

        assert exc_info.value.result is None
        assert isinstance(exc_info.value.__cause__, CollaboratorTransportError)
