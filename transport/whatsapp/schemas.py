"""
WhatsApp Transport Layer - Pydantic Schemas

PURE DATA MODELS - NO LOGIC
Defines the contract between the WhatsApp Cloud API and the relay.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Discriminator, Field, Tag, field_validator


# ============================================================================
# WHATSAPP WEBHOOK PAYLOAD SCHEMAS (INPUT)
# ============================================================================

class TextBody(BaseModel):
    """Text content of a message."""
    body: str = ""


class MediaObject(BaseModel):
    """Media reference carried by image/audio/document messages."""
    id: Optional[str] = None
    mime_type: Optional[str] = None
    caption: Optional[str] = None
    filename: Optional[str] = None


class BaseInboundMessage(BaseModel):
    """Fields shared by every inbound message kind."""
    from_: str = Field("", alias="from")
    id: str = ""
    timestamp: str = ""

    class Config:
        populate_by_name = True


class TextMessage(BaseInboundMessage):
    """Text message. The only kind that triggers an auto-reply."""
    type: Literal["text"] = "text"
    text: Optional[TextBody] = None


class ImageMessage(BaseInboundMessage):
    type: Literal["image"] = "image"
    image: Optional[MediaObject] = None


class AudioMessage(BaseInboundMessage):
    type: Literal["audio"] = "audio"
    audio: Optional[MediaObject] = None


class DocumentMessage(BaseInboundMessage):
    type: Literal["document"] = "document"
    document: Optional[MediaObject] = None


class UnsupportedMessage(BaseInboundMessage):
    """Any message kind the relay has no model for (sticker, location, ...)."""
    type: str = "unsupported"

    class Config:
        extra = "allow"


_KNOWN_KINDS = frozenset({"text", "image", "audio", "document"})


def _message_kind(value: Any) -> str:
    if isinstance(value, dict):
        kind = value.get("type")
    else:
        kind = getattr(value, "type", None)
    return kind if kind in _KNOWN_KINDS else "unsupported"


InboundMessage = Annotated[
    Union[
        Annotated[TextMessage, Tag("text")],
        Annotated[ImageMessage, Tag("image")],
        Annotated[AudioMessage, Tag("audio")],
        Annotated[DocumentMessage, Tag("document")],
        Annotated[UnsupportedMessage, Tag("unsupported")],
    ],
    Discriminator(_message_kind),
]


class Profile(BaseModel):
    name: str = ""


class Contact(BaseModel):
    """Contact info."""
    wa_id: str = ""
    profile: Profile = Field(default_factory=Profile)


class ConversationOrigin(BaseModel):
    type: str = ""


class Conversation(BaseModel):
    id: str = ""
    origin: ConversationOrigin = Field(default_factory=ConversationOrigin)


class Pricing(BaseModel):
    billable: bool = False
    pricing_model: str = ""
    category: str = ""


class StatusUpdate(BaseModel):
    """Message status update (delivery, read, etc). Parsed, never acted on."""
    id: str = ""
    status: str = ""
    timestamp: str = ""
    recipient_id: str = ""
    conversation: Optional[Conversation] = None
    pricing: Optional[Pricing] = None


class Metadata(BaseModel):
    """Identifies the business number that received the message."""
    display_phone_number: str = ""
    phone_number_id: str = ""


class Value(BaseModel):
    messaging_product: str = ""
    metadata: Metadata = Field(default_factory=Metadata)
    contacts: list[Contact] = Field(default_factory=list)
    messages: list[InboundMessage] = Field(default_factory=list)
    statuses: list[StatusUpdate] = Field(default_factory=list)

    @field_validator("contacts", "messages", "statuses", mode="before")
    @classmethod
    def null_list_is_empty(cls, v):
        return [] if v is None else v

    @field_validator("metadata", mode="before")
    @classmethod
    def null_metadata_is_empty(cls, v):
        return {} if v is None else v


class Change(BaseModel):
    field: str = ""
    value: Value = Field(default_factory=Value)

    @field_validator("value", mode="before")
    @classmethod
    def null_value_is_empty(cls, v):
        return {} if v is None else v


class Entry(BaseModel):
    """One business account's batch of changes."""
    id: str = ""
    changes: list[Change] = Field(default_factory=list)

    @field_validator("changes", mode="before")
    @classmethod
    def null_changes_is_empty(cls, v):
        return [] if v is None else v


class WebhookEnvelope(BaseModel):
    """
    Full WhatsApp webhook payload.

    ref: https://developers.facebook.com/docs/whatsapp/cloud-api/webhooks/payload-example
    """

    object: str = Field("", description="Always 'whatsapp_business_account'")
    entry: list[Entry] = Field(default_factory=list, description="Webhook entries")

    @field_validator("entry", mode="before")
    @classmethod
    def null_entry_is_empty(cls, v):
        return [] if v is None else v

    class Config:
        extra = "allow"  # WhatsApp may add fields


# ============================================================================
# RELAY API (INPUT / OUTPUT)
# ============================================================================

class OutboundMessageRequest(BaseModel):
    """Request to send one message. Empty message_type means "text"."""

    phone_number_id: str = Field(..., description="Sending business number ID")
    to: str = Field(..., description="Recipient phone number")
    content: str = Field(..., description="Message body")
    message_type: str = Field("", description="Defaults to 'text'")


class SendResult(BaseModel):
    """Outcome of a send, returned on success and on API-reported failure."""

    message_id: str = ""
    status: Literal["sent", "failed"]
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    """HTTP error body."""

    error: str
    message: str
    code: int


# ============================================================================
# WHATSAPP CLOUD API REQUESTS (OUTPUT)
# ============================================================================

class OutboundText(BaseModel):
    preview_url: bool = False
    body: str


class SendMessagePayload(BaseModel):
    """Body of POST /{phone_number_id}/messages."""

    messaging_product: Literal["whatsapp"] = "whatsapp"
    recipient_type: Literal["individual"] = "individual"
    to: str
    type: str
    text: Optional[OutboundText] = None


class MarkAsReadPayload(BaseModel):
    """Body of the read receipt call."""

    messaging_product: Literal["whatsapp"] = "whatsapp"
    status: Literal["read"] = "read"
    message_id: str
