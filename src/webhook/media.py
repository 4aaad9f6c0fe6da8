"""Media extraction: persists message attachments under a storage root."""

from __future__ import annotations

import asyncio
import logging
import mimetypes
import time
import uuid
from pathlib import Path
from typing import Protocol

import httpx

from src.models import MediaAttachment
from src.webhook.errors import MediaExtractionError

logger = logging.getLogger(__name__)

_DOWNLOAD_TIMEOUT_SECONDS = 30.0


class MediaExtractor(Protocol):
    async def extract(self, storage_root: str, media: MediaAttachment) -> str:
        """Persist ``media`` and return the path it was written to."""
        ...


class FileMediaExtractor:
    """Writes inline attachment bytes, or downloads ``media.url``, to disk."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport

    async def extract(self, storage_root: str, media: MediaAttachment) -> str:
        content = media.data
        if content is None:
            if not media.url:
                raise MediaExtractionError("attachment has neither data nor url")
            content = await self._download(media.url)

        root = Path(storage_root)
        path = root / f"{int(time.time())}-{uuid.uuid4()}{_extension_for(media)}"
        try:
            await asyncio.to_thread(_store, path, content)
        except OSError as exc:
            raise MediaExtractionError(f"cannot write {path}: {exc}") from exc

        logger.debug("Stored %d bytes of media at %s", len(content), path)
        return str(path)

    async def _download(self, url: str) -> bytes:
        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=_DOWNLOAD_TIMEOUT_SECONDS,
            ) as client:
                resp = await client.get(url)
                resp.raise_for_status()
                return resp.content
        except httpx.HTTPError as exc:
            raise MediaExtractionError(f"download of {url} failed: {exc}") from exc


def _extension_for(media: MediaAttachment) -> str:
    if media.file_name:
        suffix = Path(media.file_name).suffix
        if suffix:
            return suffix
    if media.mimetype:
        # "audio/ogg; codecs=opus" -> "audio/ogg"
        guessed = mimetypes.guess_extension(media.mimetype.split(";")[0].strip())
        if guessed:
            return guessed
    return ""


def _store(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
