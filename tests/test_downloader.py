"""Tests for the HTTP file downloader."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from audioscribe.errors import FileDownloadError
from audioscribe.services.downloader import HttpFileDownloader

URL = "https://example.com/audio.mp3"


def _downloader(handler, **kwargs) -> HttpFileDownloader:
    return HttpFileDownloader(transport=httpx.MockTransport(handler), **kwargs)


class TestHttpFileDownloader:
    @pytest.mark.asyncio
    async def test_writes_body_to_disk(self, tmp_path) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b"audio-bytes")

        dest = tmp_path / "a.audio"
        await _downloader(handler, headers={"x-token": "t"}).download_file(URL, dest)
        assert dest.read_bytes() == b"audio-bytes"
        assert str(seen[0].url) == URL
        assert seen[0].headers["x-token"] == "t"

    @pytest.mark.asyncio
    async def test_http_error(self, tmp_path) -> None:
        dest = tmp_path / "a.audio"
        with pytest.raises(FileDownloadError) as exc_info:
            await _downloader(lambda r: httpx.Response(404)).download_file(URL, dest)
        assert exc_info.value.code == "HTTP_ERROR"
        assert "404" in str(exc_info.value)
        assert not dest.exists()

    @pytest.mark.asyncio
    async def test_content_length_over_limit(self, tmp_path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"x" * 100)

        dest = tmp_path / "a.audio"
        with pytest.raises(FileDownloadError) as exc_info:
            await _downloader(handler, max_file_size=10).download_file(URL, dest)
        assert exc_info.value.code == "FILE_TOO_LARGE"
        assert not dest.exists()

    @pytest.mark.asyncio
    async def test_streamed_body_over_limit(self, tmp_path) -> None:
        async def body():
            for _ in range(5):
                yield b"x" * 8

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=body())

        dest = tmp_path / "a.audio"
        with pytest.raises(FileDownloadError) as exc_info:
            await _downloader(handler, max_file_size=20).download_file(URL, dest)
        assert exc_info.value.code == "FILE_TOO_LARGE"
        assert not dest.exists()

    @pytest.mark.asyncio
    async def test_empty_body(self, tmp_path) -> None:
        dest = tmp_path / "a.audio"
        with pytest.raises(FileDownloadError) as exc_info:
            await _downloader(lambda r: httpx.Response(200, content=b"")).download_file(URL, dest)
        assert exc_info.value.code == "EMPTY_RESPONSE"
        assert not dest.exists()

    @pytest.mark.asyncio
    async def test_connection_error(self, tmp_path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FileDownloadError) as exc_info:
            await _downloader(handler).download_file(URL, tmp_path / "a.audio")
        assert exc_info.value.code == "DOWNLOAD_FAILED"
        assert "connection refused" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_timeout(self, tmp_path) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(1)
            return httpx.Response(200, content=b"late")

        dest = tmp_path / "a.audio"
        with pytest.raises(FileDownloadError) as exc_info:
            await _downloader(handler, timeout=0.05).download_file(URL, dest)
        assert exc_info.value.code == "TIMEOUT_ERROR"
        assert not dest.exists()

    @pytest.mark.asyncio
    async def test_malformed_content_length_falls_back_to_byte_count(self, tmp_path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"content-length": "abc"}, content=b"x")

        dest = tmp_path / "a.audio"
        await _downloader(handler).download_file(URL, dest)
        assert dest.read_bytes() == b"x"

    @pytest.mark.asyncio
    async def test_malformed_content_length_still_enforces_limit(self, tmp_path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"content-length": "lots"}, content=b"x" * 100)

        dest = tmp_path / "a.audio"
        with pytest.raises(FileDownloadError) as exc_info:
            await _downloader(handler, max_file_size=10).download_file(URL, dest)
        assert exc_info.value.code == "FILE_TOO_LARGE"
        assert not dest.exists()
