"""Tests for the file-backed media extractor."""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from src.models import MediaAttachment
from src.webhook.errors import MediaExtractionError
from src.webhook.media import FileMediaExtractor


class TestFileMediaExtractor:
    @pytest.mark.asyncio
    async def test_writes_inline_data(self, tmp_path: Path) -> None:
        extractor = FileMediaExtractor()
        media = MediaAttachment(data=b"\x89PNG...", mimetype="image/png")

        path = await extractor.extract(str(tmp_path / "media"), media)

        assert Path(path).read_bytes() == b"\x89PNG..."
        assert Path(path).parent == tmp_path / "media"
        assert path.endswith(".png")

    @pytest.mark.asyncio
    async def test_file_name_suffix_preferred(self, tmp_path: Path) -> None:
        media = MediaAttachment(data=b"%PDF", mimetype="application/octet-stream", file_name="q3.pdf")
        path = await FileMediaExtractor().extract(str(tmp_path), media)
        assert path.endswith(".pdf")

    @pytest.mark.asyncio
    async def test_mimetype_parameters_ignored(self, tmp_path: Path) -> None:
        media = MediaAttachment(data=b"\x89PNG", mimetype="image/png; charset=binary")
        path = await FileMediaExtractor().extract(str(tmp_path), media)
        assert path.endswith(".png")

    @pytest.mark.asyncio
    async def test_unique_names(self, tmp_path: Path) -> None:
        extractor = FileMediaExtractor()
        media = MediaAttachment(data=b"x")
        first = await extractor.extract(str(tmp_path), media)
        second = await extractor.extract(str(tmp_path), media)
        assert first != second

    @pytest.mark.asyncio
    async def test_downloads_url_when_no_inline_data(self, tmp_path: Path) -> None:
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            return httpx.Response(200, content=b"video-bytes")

        extractor = FileMediaExtractor(transport=httpx.MockTransport(handler))
        media = MediaAttachment(url="https://mmg.example.net/v.mp4", mimetype="video/mp4")

        path = await extractor.extract(str(tmp_path), media)

        assert requested == ["https://mmg.example.net/v.mp4"]
        assert Path(path).read_bytes() == b"video-bytes"

    @pytest.mark.asyncio
    async def test_download_http_error_raises(self, tmp_path: Path) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        extractor = FileMediaExtractor(transport=transport)

        with pytest.raises(MediaExtractionError):
            await extractor.extract(str(tmp_path), MediaAttachment(url="https://mmg.example.net/x"))

    @pytest.mark.asyncio
    async def test_download_transport_error_raises(self, tmp_path: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        extractor = FileMediaExtractor(transport=httpx.MockTransport(handler))

        with pytest.raises(MediaExtractionError):
            await extractor.extract(str(tmp_path), MediaAttachment(url="https://mmg.example.net/x"))

    @pytest.mark.asyncio
    async def test_missing_data_and_url_raises(self, tmp_path: Path) -> None:
        with pytest.raises(MediaExtractionError):
            await FileMediaExtractor().extract(str(tmp_path), MediaAttachment())

    @pytest.mark.asyncio
    async def test_write_runs_off_event_loop(self, tmp_path: Path) -> None:
        real_to_thread = asyncio.to_thread
        with patch("src.webhook.media.asyncio.to_thread", side_effect=real_to_thread) as to_thread:
            path = await FileMediaExtractor().extract(str(tmp_path), MediaAttachment(data=b"x"))

        to_thread.assert_awaited_once()
        assert Path(path).read_bytes() == b"x"

    @pytest.mark.asyncio
    async def test_unwritable_root_raises(self, tmp_path: Path) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file")

        with pytest.raises(MediaExtractionError):
            await FileMediaExtractor().extract(str(blocker), MediaAttachment(data=b"x"))
