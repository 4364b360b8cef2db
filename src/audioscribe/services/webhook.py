"""Webhook notification client."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from audioscribe import __version__
from audioscribe.errors import WebhookDeliveryError
from audioscribe.jobs.models import TranscriptionJob

logger = logging.getLogger(__name__)

EVENT_TYPE = "transcription.status_updated"
_MAX_RETRY_DELAY = 30.0


def build_payload(job: TranscriptionJob) -> dict[str, Any]:
    """Build the JSON body sent to a job's webhook."""
    return {
        "id": job.id,
        "status": job.status.value,
        "result": job.result,
        "error": job.error,
        "audioFileUrl": job.audio_file_url,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "eventType": EVENT_TYPE,
    }


class WebhookClient:
    """Delivers job status payloads with bounded concurrency and retries.

    At most ``concurrency`` deliveries are on the wire at once; the rest
    wait on a semaphore. Failed deliveries (non-2xx or transport errors)
    are retried up to ``max_retries`` attempts in total.
    """

    def __init__(
        self,
        concurrency: int = 5,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 10.0,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.headers = headers or {}
        self._semaphore = asyncio.Semaphore(concurrency)
        self._transport = transport
        self._active: set[asyncio.Task[None]] = set()
        self._closed = False

    async def notify(self, webhook_url: str, job: TranscriptionJob) -> None:
        """Send the status of ``job`` to ``webhook_url``.

        Raises:
            WebhookDeliveryError: If every attempt failed or the client is
                shut down.
        """
        if self._closed:
            raise WebhookDeliveryError(
                "Webhook client is shut down",
                code="SHUTDOWN",
                webhook_url=webhook_url,
                attempt=0,
            )
        task = asyncio.ensure_future(self._deliver_limited(webhook_url, build_payload(job)))
        self._active.add(task)
        task.add_done_callback(self._active.discard)
        await task

    async def shutdown(self, grace_period: float = 5.0) -> None:
        """Stop accepting deliveries and wait up to ``grace_period`` for active ones."""
        self._closed = True
        if not self._active:
            return
        _, pending = await asyncio.wait(set(self._active), timeout=grace_period)
        for task in pending:
            task.cancel()
        if pending:
            logger.warning("Cancelled %d webhook delivery(ies) at shutdown", len(pending))

    async def _deliver_limited(self, webhook_url: str, payload: dict[str, Any]) -> None:
        async with self._semaphore:
            await self._deliver(webhook_url, payload)

    async def _deliver(self, webhook_url: str, payload: dict[str, Any]) -> None:
        retrying = AsyncRetrying(
            retry=retry_if_exception_type((WebhookDeliveryError, httpx.TransportError)),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.retry_delay, max=_MAX_RETRY_DELAY)
            + wait_random(0, self.retry_delay * 0.1),
            before_sleep=_log_retry,
            reraise=True,
        )
        number = 0
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                async for attempt in retrying:
                    with attempt:
                        number = attempt.retry_state.attempt_number
                        await self._post(client, webhook_url, payload, number)
            except httpx.TransportError as e:
                raise WebhookDeliveryError(
                    str(e) or type(e).__name__,
                    code="DELIVERY_FAILED",
                    webhook_url=webhook_url,
                    attempt=number,
                ) from e
        logger.debug("Delivered webhook for job %s to %s", payload["id"], webhook_url)

    async def _post(
        self,
        client: httpx.AsyncClient,
        webhook_url: str,
        payload: dict[str, Any],
        attempt: int,
    ) -> None:
        response = await client.post(
            webhook_url,
            json=payload,
            headers={
                "user-agent": f"audioscribe-webhook/{__version__}",
                "x-webhook-attempt": str(attempt),
                **self.headers,
            },
        )
        if response.is_success:
            return
        if response.status_code == 429:
            raise WebhookDeliveryError(
                "Rate limit exceeded",
                code="RATE_LIMITED",
                webhook_url=webhook_url,
                attempt=attempt,
                status_code=429,
            )
        raise WebhookDeliveryError(
            f"HTTP {response.status_code}: {response.reason_phrase}",
            code="DELIVERY_FAILED",
            webhook_url=webhook_url,
            attempt=attempt,
            status_code=response.status_code,
        )


def _log_retry(retry_state: RetryCallState) -> None:
    logger.info(
        "Webhook delivery failed (attempt %d): %s; retrying in %.1fs",
        retry_state.attempt_number,
        retry_state.outcome.exception() if retry_state.outcome else None,
        retry_state.next_action.sleep if retry_state.next_action else 0.0,
    )
