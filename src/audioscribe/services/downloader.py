"""HTTP file downloader with size and time limits."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import httpx

from audioscribe.errors import FileDownloadError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_FILE_SIZE = 25 * 1024 * 1024  # 25MB


class HttpFileDownloader:
    """Streams a remote file to local disk.

    The whole download (connect, headers, body) must finish within
    ``timeout`` seconds and may not exceed ``max_file_size`` bytes. On any
    failure the partially written file is removed.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the downloader.

        Args:
            timeout: Total download time limit in seconds.
            max_file_size: Maximum accepted body size in bytes.
            headers: Extra request headers.
            transport: Optional httpx transport (used by tests).
        """
        self.timeout = timeout
        self.max_file_size = max_file_size
        self.headers = headers or {}
        self._transport = transport

    async def download_file(self, url: str, dest_path: Path) -> None:
        """Download ``url`` into ``dest_path``.

        Raises:
            FileDownloadError: With code HTTP_ERROR, FILE_TOO_LARGE,
                EMPTY_RESPONSE, TIMEOUT_ERROR or DOWNLOAD_FAILED.
        """
        dest_path = Path(dest_path)
        try:
            await asyncio.wait_for(self._stream_to(url, dest_path), timeout=self.timeout)
        except FileDownloadError:
            _remove_partial(dest_path)
            raise
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            _remove_partial(dest_path)
            raise FileDownloadError("Download timeout exceeded", code="TIMEOUT_ERROR") from e
        except (httpx.HTTPError, OSError) as e:
            _remove_partial(dest_path)
            raise FileDownloadError(
                f"Failed to download file: {e}", code="DOWNLOAD_FAILED"
            ) from e

    async def _stream_to(self, url: str, dest_path: Path) -> None:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            async with client.stream("GET", url, headers=self.headers) as response:
                if not response.is_success:
                    raise FileDownloadError(
                        f"HTTP error {response.status_code}: {response.reason_phrase}",
                        code="HTTP_ERROR",
                    )

                content_length = _content_length(response)
                if content_length is not None and content_length > self.max_file_size:
                    raise FileDownloadError(
                        f"File size {content_length} exceeds maximum size of {self.max_file_size}",
                        code="FILE_TOO_LARGE",
                    )

                downloaded = 0
                with open(dest_path, "wb") as f:
                    async for chunk in response.aiter_bytes():
                        downloaded += len(chunk)
                        if downloaded > self.max_file_size:
                            raise FileDownloadError(
                                f"File size exceeds maximum size of {self.max_file_size}",
                                code="FILE_TOO_LARGE",
                            )
                        f.write(chunk)

        if downloaded == 0:
            raise FileDownloadError("Empty response body", code="EMPTY_RESPONSE")

        logger.debug("Downloaded %d bytes from %s", downloaded, url)


def _content_length(response: httpx.Response) -> int | None:
    """Declared body size, or None when the header is missing or malformed."""
    try:
        value = int(response.headers["content-length"])
    except (KeyError, ValueError):
        return None
    return value if value >= 0 else None


def _remove_partial(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logger.warning("Could not remove partial download %s", path, exc_info=True)
