"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from infra.bootstrap import InfraBootstrap  # noqa: E402
from relay.errors import CollaboratorTransportError  # noqa: E402
from transport.whatsapp.schemas import SendResult  # noqa: E402
from transport.whatsapp.sender import WhatsAppSenderError  # noqa: E402


class FakeWhatsAppClient:
    """In-memory stand-in for WhatsAppClient that records every call."""

    def __init__(self, send_error=None, read_error=None, message_id="wamid.reply_1"):
        self.send_error = send_error
        self.read_error = read_error
        self.message_id = message_id
        self.sent = []
        self.read = []

    async def send_message(self, request):
        self.sent.append(request)
        if self.send_error is not None:
            raise self.send_error
        return SendResult(message_id=self.message_id, status="sent")

    async def mark_as_read(self, phone_number_id, message_id):
        self.read.append((phone_number_id, message_id))
        if self.read_error is not None:
            raise self.read_error


def make_webhook(*messages, phone_number_id="106540352242922"):
    """Wrap inbound message dicts into a single-entry webhook payload."""
    return {
        "object": "whatsapp_business_account",
        "entry": [{
            "id": "102290129340398",
            "changes": [{
                "field": "messages",
                "value": {
                    "messaging_product": "whatsapp",
                    "metadata": {
                        "display_phone_number": "15550783881",
                        "phone_number_id": phone_number_id,
                    },
                    "messages": list(messages),
                },
            }],
        }],
    }


def text_message(body, sender="5491112345678", message_id="wamid.msg_123"):
    return {
        "from": sender,
        "id": message_id,
        "timestamp": "1707500000",
        "type": "text",
        "text": {"body": body},
    }


@pytest.fixture
def fake_client():
    return FakeWhatsAppClient()


@pytest.fixture
def sender_error():
    """An API-reported send failure, as WhatsAppClient raises it."""
    return WhatsAppSenderError(
        "API error: Invalid phone number (code: 100)",
        result=SendResult(status="failed", message="Invalid phone number"),
    )


@pytest.fixture
def transport_error():
    return CollaboratorTransportError("failed to execute request: connection refused")


@pytest.fixture(autouse=True)
def reset_bootstrap():
    InfraBootstrap.reset()
    yield
    InfraBootstrap.reset()
