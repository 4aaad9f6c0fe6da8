"""Event-to-payload normalization.

Turns message and receipt events into flat JSON-ready mappings. A key is
only emitted when its source value is non-empty; absent values are never
sent as null, "" or false.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from src.models import MediaKind, MessageEvent, ReceiptEvent, ReceiptType
from src.webhook.errors import BuildError
from src.webhook.media import MediaExtractor

logger = logging.getLogger(__name__)

Payload = dict[str, Any]

_READ_TYPES = frozenset({ReceiptType.READ.value, ReceiptType.READ_SELF.value})
# Plain delivery receipts carry an empty type on the wire.
_DELIVERED_TYPES = frozenset({ReceiptType.DELIVERED.value, ""})


def format_rfc3339(ts: datetime) -> str:
    """Second-precision RFC 3339; UTC renders as ``Z``, naive input is taken as UTC."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    if ts.utcoffset() == timedelta(0):
        return ts.strftime("%Y-%m-%dT%H:%M:%SZ")
    return ts.isoformat(timespec="seconds")


def jid_user(jid: str) -> str:
    """Reduce a JID (or ``"<sender> in <chat>"`` source) to its bare user part."""
    sender = jid.split(" in ", 1)[0]
    user = sender.split("@", 1)[0]
    return user.split(":", 1)[0]


def is_from_me(source: str, own_jid: str) -> bool:
    if not own_jid:
        return False
    return jid_user(source) == jid_user(own_jid)


def receipt_type_label(receipt_type: str) -> str:
    if receipt_type in _READ_TYPES:
        return "read"
    if receipt_type in _DELIVERED_TYPES:
        return "delivered"
    return "unknown"


def build_receipt_payload(event: ReceiptEvent) -> Payload:
    body: Payload = {"event_type": "receipt"}

    if event.message_ids:
        body["message_ids"] = list(event.message_ids)
    if event.source:
        body["sender"] = event.source
    body["type"] = receipt_type_label(event.type)
    if event.timestamp is not None:
        body["timestamp"] = format_rfc3339(event.timestamp)

    return body


class PayloadBuilder:
    """Builds payloads for both event kinds.

    Binary attachments are handed to ``extractor`` and replaced by the
    returned storage path; the first extraction failure aborts the build.
    """

    def __init__(
        self,
        extractor: MediaExtractor,
        storage_root: str,
        own_jid: str = "",
    ) -> None:
        self._extractor = extractor
        self._storage_root = storage_root
        self._own_jid = own_jid

    async def build(self, event: MessageEvent | ReceiptEvent) -> Payload:
        if isinstance(event, MessageEvent):
            return await self.build_message(event)
        if isinstance(event, ReceiptEvent):
            return build_receipt_payload(event)
        raise TypeError(f"Unsupported event type: {type(event).__name__}")

    async def build_message(self, event: MessageEvent) -> Payload:
        body: Payload = {"event_type": "message"}

        if event.source:
            body["from"] = event.source
            body["from_me"] = is_from_me(event.source, self._own_jid)
        message = _message_fields(event)
        if message:
            body["message"] = message
        if event.pushname:
            body["pushname"] = event.pushname
        if event.reaction is not None and event.reaction.text:
            body["reaction"] = {"message": event.reaction.text}
            if event.reaction.message_id:
                body["reaction"]["id"] = event.reaction.message_id
        if event.view_once:
            body["view_once"] = True
        if event.forwarded:
            body["forwarded"] = True
        if event.timestamp is not None:
            body["timestamp"] = format_rfc3339(event.timestamp)

        content = event.first_content()
        if content is not None:
            kind, value = content
            if kind.is_binary:
                body[kind.value] = await self._extract(kind, value, event.source)
            else:
                inlined = value.model_dump(mode="json", exclude_defaults=True)
                if inlined:
                    body[kind.value] = inlined

        return body

    async def _extract(self, kind: MediaKind, media: Any, source: str) -> str:
        try:
            return await self._extractor.extract(self._storage_root, media)
        except Exception as exc:
            logger.error("Failed to download %s from %s: %s", kind.value, source, exc)
            raise BuildError(kind, exc) from exc


def _message_fields(event: MessageEvent) -> Payload:
    if not (event.id or event.text):
        return {}
    fields = {
        "id": event.id,
        "text": event.text,
        "replied_id": event.replied_id,
        "quoted_message": event.quoted_message,
    }
    return {k: v for k, v in fields.items() if v}
