"""Whisper API transcription client."""

from __future__ import annotations

import logging
from pathlib import Path

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from audioscribe.errors import FileTooLargeError, TranscriptionError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MAX_FILE_SIZE = 25 * 1024 * 1024  # OpenAI upload limit

_RETRYABLE_CODES = {"RATE_LIMIT_EXCEEDED", "SERVER_ERROR", "CONNECTION_ERROR"}


class WhisperClient:
    """Client for the OpenAI-compatible ``/audio/transcriptions`` endpoint.

    Rate limiting, server errors and connection problems are retried with
    capped exponential backoff. Validation problems (missing or oversized
    files, 4xx responses) fail immediately.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        model: str = "whisper-1",
        max_retries: int = 3,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        timeout: float = 30.0,
        retry_min_delay: float = 1.0,
        retry_max_delay: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Whisper client.

        Args:
            api_key: Bearer token for the API.
            base_url: API base URL.
            model: Transcription model name.
            max_retries: Retries after the first attempt.
            max_file_size: Largest file accepted, in bytes.
            timeout: Per-request timeout in seconds.
            retry_min_delay: First backoff delay in seconds.
            retry_max_delay: Backoff ceiling in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.max_retries = max_retries
        self.max_file_size = max_file_size
        self.timeout = timeout
        self.retry_min_delay = retry_min_delay
        self.retry_max_delay = retry_max_delay
        self._transport = transport

    async def transcribe(self, audio_path: Path) -> str:
        """Transcribe an audio file and return its text.

        Raises:
            FileTooLargeError: If the file exceeds ``max_file_size``.
            TranscriptionError: If the file cannot be read, the API rejects
                the request, or retries are exhausted.
        """
        audio_path = Path(audio_path)
        try:
            size = audio_path.stat().st_size
        except OSError as e:
            raise TranscriptionError(
                f"Failed to read audio file: {e}", code="FILE_READ_ERROR"
            ) from e
        if size > self.max_file_size:
            raise FileTooLargeError(size, self.max_file_size)

        retrying = AsyncRetrying(
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.retry_min_delay, max=self.retry_max_delay)
            + wait_random(0, self.retry_min_delay),
            before_sleep=_log_retry,
            reraise=True,
        )
        text = ""
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                async for attempt in retrying:
                    with attempt:
                        text = await self._request(client, audio_path)
            except TranscriptionError as e:
                if not _is_retryable(e):
                    raise
                raise TranscriptionError(
                    f"Failed to transcribe audio after {self.max_retries} retries: {e}",
                    code="MAX_RETRIES_EXCEEDED",
                    status_code=e.status_code,
                ) from e
        return text

    async def _request(self, client: httpx.AsyncClient, audio_path: Path) -> str:
        try:
            with open(audio_path, "rb") as f:
                response = await client.post(
                    f"{self.base_url}/audio/transcriptions",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    files={"file": (audio_path.name, f, "application/octet-stream")},
                    data={"model": self.model},
                )
        except OSError as e:
            raise TranscriptionError(
                f"Failed to read audio file: {e}", code="FILE_READ_ERROR"
            ) from e
        except httpx.TransportError as e:
            raise TranscriptionError(
                f"Failed to connect to Whisper API: {e}", code="CONNECTION_ERROR"
            ) from e

        if response.status_code == 429:
            raise TranscriptionError(
                "Rate limit exceeded", code="RATE_LIMIT_EXCEEDED", status_code=429
            )
        if response.status_code >= 500:
            raise TranscriptionError(
                f"HTTP error {response.status_code}",
                code="SERVER_ERROR",
                status_code=response.status_code,
            )
        if not response.is_success:
            message, code = _api_error(response)
            raise TranscriptionError(
                message or f"HTTP error {response.status_code}",
                code=code or "API_ERROR",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict) or not isinstance(payload.get("text"), str):
            raise TranscriptionError(
                "Invalid API response format",
                code="INVALID_RESPONSE",
                status_code=response.status_code,
            )
        return payload["text"]


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, TranscriptionError) and exc.code in _RETRYABLE_CODES


def _log_retry(retry_state: RetryCallState) -> None:
    logger.warning(
        "Whisper API request failed (attempt %d): %s; retrying in %.1fs",
        retry_state.attempt_number,
        retry_state.outcome.exception() if retry_state.outcome else None,
        retry_state.next_action.sleep if retry_state.next_action else 0.0,
    )


def _api_error(response: httpx.Response) -> tuple[str | None, str | None]:
    """Extract ``error.message`` and ``error.code`` from an API error body."""
    try:
        body = response.json()
    except ValueError:
        return None, None
    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, dict):
        return None, None
    return error.get("message"), error.get("code")
