"""
WhatsApp Input Normalization

PURE CONVERSION - NO LOGIC, NO MODEL CALLS

- Content extraction per message kind:
  TEXT yields its body, IMAGE/AUDIO/DOCUMENT/other yield nothing for now.
- Recipient normalization: turns a webhook `from` number into a valid
  send-API `to` number.
"""

from typing import Callable

from .schemas import (
    AudioMessage,
    DocumentMessage,
    ImageMessage,
    InboundMessage,
    TextMessage,
)

RecipientNormalizer = Callable[[str], str]


def extract_content(message: InboundMessage) -> str:
    """
    Return the text the relay should answer, or "" when there is none.

    Media kinds are matched explicitly so each can grow its own extraction
    (captions, transcripts) without touching the others.
    """

    if isinstance(message, TextMessage):
        return _extract_text(message)

    if isinstance(message, (ImageMessage, AudioMessage, DocumentMessage)):
        return ""

    return ""


def _extract_text(message: TextMessage) -> str:
    if message.text is None:
        return ""
    return message.text.body


def strip_mobile_prefix_nine(phone_number: str) -> str:
    """
    Drop the mobile '9' that follows Argentina's country code.

    Webhooks report Argentine mobiles as 54 9 XXXXXXXXXX (13 digits), but the
    send API only accepts 54 XXXXXXXXXX (12 digits).

        "5491112345678" -> "541112345678"

    Anything else (other lengths, other prefixes, no '9' at index 2, empty)
    is returned unchanged.
    """

    if len(phone_number) == 13 and phone_number[:2] == "54" and phone_number[2] == "9":
        return phone_number[:2] + phone_number[3:]
    return phone_number


def identity(phone_number: str) -> str:
    """Normalizer for numbering plans that need no rewrite."""
    return phone_number


RECIPIENT_NORMALIZERS: dict[str, RecipientNormalizer] = {
    "ar_mobile": strip_mobile_prefix_nine,
    "none": identity,
}


def get_recipient_normalizer(name: str) -> RecipientNormalizer:
    """Look up a normalizer by name, e.g. from RECIPIENT_NORMALIZER."""
    try:
        return RECIPIENT_NORMALIZERS[name]
    except KeyError:
        raise ValueError(f"Unknown recipient normalizer: {name}")
