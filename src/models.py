"""Shared Pydantic data models for the WhatsApp webhook forwarder."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

# --- Enums ---


class ReceiptType(str, Enum):
    DELIVERED = "delivered"
    READ = "read"
    READ_SELF = "read-self"
    PLAYED = "played"
    PLAYED_SELF = "played-self"
    SENDER = "sender"
    RETRY = "retry"
    SERVER_ERROR = "server-error"
    INACTIVE = "inactive"


class MediaKind(str, Enum):
    """Content kinds a message can carry, in payload priority order."""

    AUDIO = "audio"
    CONTACT = "contact"
    DOCUMENT = "document"
    IMAGE = "image"
    LIST = "list"
    LIVE_LOCATION = "live_location"
    LOCATION = "location"
    ORDER = "order"
    STICKER = "sticker"
    VIDEO = "video"

    @property
    def is_binary(self) -> bool:
        return self in _BINARY_KINDS


_BINARY_KINDS = frozenset({
    MediaKind.AUDIO,
    MediaKind.DOCUMENT,
    MediaKind.IMAGE,
    MediaKind.STICKER,
    MediaKind.VIDEO,
})


# --- Message content ---


class MediaAttachment(BaseModel):
    """Binary media reference; persisted by a media extractor, never inlined."""

    model_config = ConfigDict(frozen=True)

    url: str | None = None
    mimetype: str | None = None
    caption: str | None = None
    file_name: str | None = None
    file_length: int | None = Field(default=None, ge=0)
    file_sha256: str | None = None
    data: bytes | None = None


class ContactContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    display_name: str | None = None
    vcard: str | None = None


class ListRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str | None = None
    description: str | None = None
    row_id: str | None = None


class ListSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str | None = None
    rows: list[ListRow] = Field(default_factory=list)


class ListContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str | None = None
    description: str | None = None
    button_text: str | None = None
    footer_text: str | None = None
    sections: list[ListSection] = Field(default_factory=list)


class LocationContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    degrees_latitude: float | None = None
    degrees_longitude: float | None = None
    name: str | None = None
    address: str | None = None
    url: str | None = None


class LiveLocationContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    degrees_latitude: float | None = None
    degrees_longitude: float | None = None
    accuracy_in_meters: int | None = None
    speed_in_mps: float | None = None
    caption: str | None = None
    sequence_number: int | None = None


class OrderContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: str | None = None
    item_count: int | None = None
    status: str | None = None
    message: str | None = None
    order_title: str | None = None
    seller_jid: str | None = None
    total_amount_1000: int | None = None
    total_currency_code: str | None = None


class Reaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = ""
    message_id: str = ""


# --- Events ---


class MessageEvent(BaseModel):
    """An incoming chat message as reported by the messaging client."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["message"] = "message"
    source: str = ""  # "<sender jid>" or "<sender jid> in <chat jid>"
    pushname: str = ""
    timestamp: datetime | None = None
    id: str = ""
    text: str = ""
    replied_id: str = ""
    quoted_message: str = ""
    reaction: Reaction | None = None
    view_once: bool = False
    forwarded: bool = False

    audio: MediaAttachment | None = None
    contact: ContactContent | None = None
    document: MediaAttachment | None = None
    image: MediaAttachment | None = None
    list: ListContent | None = None
    live_location: LiveLocationContent | None = None
    location: LocationContent | None = None
    order: OrderContent | None = None
    sticker: MediaAttachment | None = None
    video: MediaAttachment | None = None

    def first_content(self) -> tuple[MediaKind, Any] | None:
        """Return the highest-priority populated content kind, if any."""
        for kind in MediaKind:
            value = getattr(self, kind.value)
            if value is not None:
                return kind, value
        return None


class ReceiptEvent(BaseModel):
    """A delivered/read acknowledgment for one or more messages."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["receipt"] = "receipt"
    message_ids: tuple[str, ...] = ()
    source: str = ""
    timestamp: datetime | None = None
    type: str = ReceiptType.DELIVERED.value


Event = Annotated[MessageEvent | ReceiptEvent, Field(discriminator="kind")]

_event_adapter: TypeAdapter[MessageEvent | ReceiptEvent] = TypeAdapter(Event)


def parse_event(raw: str | bytes | dict[str, Any]) -> MessageEvent | ReceiptEvent:
    """Validate a JSON document or mapping into a concrete event."""
    if isinstance(raw, (str, bytes)):
        return _event_adapter.validate_json(raw)
    return _event_adapter.validate_python(raw)
