"""Shared test fixtures for the webhook forwarder."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from src.models import MediaAttachment, MessageEvent, ReceiptEvent
from src.webhook.errors import MediaExtractionError
from src.webhook.models import Endpoint

FIXED_TS = datetime(2024, 5, 1, 12, 30, 45, tzinfo=UTC)
FIXED_TS_RFC3339 = "2024-05-01T12:30:45Z"


class FakeExtractor:
    """Media extractor that records calls and returns a deterministic path."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple[str, MediaAttachment]] = []

    async def extract(self, storage_root: str, media: MediaAttachment) -> str:
        self.calls.append((storage_root, media))
        if self.fail:
            raise MediaExtractionError("media key mismatch")
        return f"{storage_root}/{media.file_name or 'media.bin'}"


@pytest.fixture
def extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def endpoint() -> Endpoint:
    return Endpoint(url="https://hooks.example.com/wa", secret="s3cr3t")


# --- Factory functions for test data ---


def make_message_event(**kwargs: Any) -> MessageEvent:
    """Factory for MessageEvent with sensible defaults."""
    defaults: dict[str, Any] = {
        "source": "123@s.whatsapp.net",
        "pushname": "Alice",
        "timestamp": FIXED_TS,
    }
    defaults.update(kwargs)
    return MessageEvent(**defaults)


def make_receipt_event(**kwargs: Any) -> ReceiptEvent:
    """Factory for ReceiptEvent with sensible defaults."""
    defaults: dict[str, Any] = {
        "message_ids": ("3EB0AAA", "3EB0BBB"),
        "source": "456@s.whatsapp.net",
        "timestamp": FIXED_TS,
        "type": "read",
    }
    defaults.update(kwargs)
    return ReceiptEvent(**defaults)
