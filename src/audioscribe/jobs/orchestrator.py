"""Transcription job orchestrator with background execution."""

from __future__ import annotations

import asyncio
import logging
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urlparse
from uuid import uuid4

from audioscribe.errors import JobValidationError, describe_error
from audioscribe.jobs.models import JobStatus, JobUpdate, TranscriptionJob
from audioscribe.jobs.tracker import InFlightJobs

if TYPE_CHECKING:
    from audioscribe.services.interfaces import (
        IFileDownloader,
        IJobStorage,
        ITranscriptionClient,
        IWebhookClient,
    )

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = {"http", "https"}


def _validate_url(value: str | None, label: str) -> str:
    if value is None or not value.strip():
        raise JobValidationError(f"{label} is required")
    value = value.strip()
    parsed = urlparse(value)
    if parsed.scheme.lower() not in _ALLOWED_SCHEMES or not parsed.netloc:
        raise JobValidationError(f"{label} must be an http(s) URL: {value}")
    return value


class TranscriptionOrchestrator:
    """Creates transcription jobs and drives them through the pipeline.

    Each created job gets one background asyncio task that downloads the
    audio, transcribes it, persists the outcome and optionally fires a
    webhook. Running tasks are tracked per instance so callers can wait
    on a job by id.
    """

    def __init__(
        self,
        storage: IJobStorage,
        downloader: IFileDownloader,
        transcriber: ITranscriptionClient,
        notifier: IWebhookClient,
        *,
        in_flight: InFlightJobs | None = None,
        temp_root: Path | None = None,
    ) -> None:
        self._storage = storage
        self._downloader = downloader
        self._transcriber = transcriber
        self._notifier = notifier
        self._in_flight = in_flight if in_flight is not None else InFlightJobs()
        self._temp_root = temp_root

    async def create_job(
        self,
        audio_file_url: str,
        webhook_url: str | None = None,
    ) -> TranscriptionJob:
        """Persist a pending job and schedule its pipeline.

        Args:
            audio_file_url: Remote audio file to transcribe.
            webhook_url: Optional endpoint notified on completion.

        Returns:
            The created job (status=pending).

        Raises:
            JobValidationError: If a URL is missing or malformed.
            StorageError: If the initial record could not be persisted.
        """
        audio_file_url = _validate_url(audio_file_url, "audio_file_url")
        if webhook_url is not None:
            webhook_url = _validate_url(webhook_url, "webhook_url")

        job = await self._storage.create_job(
            audio_file_url=audio_file_url,
            webhook_url=webhook_url,
        )
        # Registered before returning; the task cannot start until we yield.
        task = asyncio.create_task(self._run_job(job), name=f"transcription-{job.id}")
        self._in_flight.add(job.id, task)
        logger.info("Created job %s for %s", job.id, audio_file_url)
        return job

    async def get_job(self, job_id: str) -> TranscriptionJob | None:
        """Get a job by ID."""
        return await self._storage.get_job(job_id)

    async def wait_for_job(self, job_id: str) -> None:
        """Wait until the job's background pipeline has finished.

        Returns immediately if no pipeline is running for ``job_id``. Does
        not raise when the job failed; check the record's status afterwards.
        """
        await self._in_flight.wait(job_id)

    def in_flight_job_ids(self) -> list[str]:
        """Ids of jobs whose pipeline is still running."""
        return self._in_flight.ids()

    async def drain(self, timeout: float | None = None) -> list[str]:
        """Wait for all running pipelines; return ids still running at timeout."""
        return await self._in_flight.wait_all(timeout=timeout)

    async def _run_job(self, job: TranscriptionJob) -> None:
        """Run the pipeline once and record a terminal state."""
        logger.info("Starting transcription for job %s", job.id)
        try:
            await self._process(job)
        except Exception as e:
            logger.exception("Job %s failed", job.id)
            await self._mark_failed(job, e)
        finally:
            self._in_flight.discard(job.id)

    async def _process(self, job: TranscriptionJob) -> None:
        await self._storage.update_job(job.id, JobUpdate(status=JobStatus.PROCESSING))

        with tempfile.TemporaryDirectory(
            prefix="transcription-",
            dir=self._temp_root,
            ignore_cleanup_errors=True,
        ) as workdir:
            audio_path = Path(workdir) / f"{uuid4().hex}.audio"

            logger.debug("Downloading %s for job %s", job.audio_file_url, job.id)
            await self._downloader.download_file(job.audio_file_url, audio_path)

            logger.debug("Transcribing file for job %s", job.id)
            text = await self._transcriber.transcribe(audio_path)

            completed = await self._storage.update_job(
                job.id,
                JobUpdate(status=JobStatus.COMPLETED, result=text),
            )
            logger.info("Job %s completed", job.id)

            if completed.webhook_url:
                await self._notify(completed)

    async def _notify(self, job: TranscriptionJob) -> None:
        # The job is already terminal; delivery problems only get logged.
        try:
            await self._notifier.notify(job.webhook_url, job)
        except asyncio.CancelledError:
            logger.warning(
                "Webhook delivery for job %s to %s was cancelled",
                job.id,
                job.webhook_url,
            )
            raise
        except Exception:
            logger.warning(
                "Webhook delivery for job %s to %s failed",
                job.id,
                job.webhook_url,
                exc_info=True,
            )

    async def _mark_failed(self, job: TranscriptionJob, exc: BaseException) -> None:
        try:
            await self._storage.update_job(
                job.id,
                JobUpdate(status=JobStatus.FAILED, error=describe_error(exc)),
            )
        except Exception:
            logger.exception(
                "Could not record failure for job %s; record left non-terminal",
                job.id,
            )
