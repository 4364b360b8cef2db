"""In-memory job storage."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from uuid import uuid4

from audioscribe.errors import JobNotFoundError
from audioscribe.jobs.models import JobStatus, JobUpdate, TranscriptionJob
from audioscribe.storage.base import JobFields, apply_update, next_timestamp


class InMemoryJobStorage:
    """Dict-backed job storage.

    Records are copied on the way in and out, so callers only ever hold
    snapshots. Nothing survives a restart.
    """

    def __init__(self) -> None:
        self._jobs: dict[str, TranscriptionJob] = {}
        self._lock = asyncio.Lock()

    async def create_job(
        self,
        *,
        audio_file_url: str,
        webhook_url: str | None = None,
    ) -> TranscriptionJob:
        async with self._lock:
            now = next_timestamp()
            job = TranscriptionJob(
                id=uuid4().hex,
                status=JobStatus.PENDING,
                audio_file_url=audio_file_url,
                webhook_url=webhook_url,
                created_at=now,
                updated_at=now,
            )
            self._jobs[job.id] = job
            return replace(job)

    async def update_job(self, job_id: str, update: JobUpdate) -> TranscriptionJob:
        async with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                raise JobNotFoundError(job_id)
            fields = apply_update(
                job_id,
                JobFields(status=job.status, result=job.result, error=job.error),
                update,
            )
            updated = replace(
                job,
                status=fields.status,
                result=fields.result,
                error=fields.error,
                updated_at=next_timestamp(job.updated_at),
            )
            self._jobs[job_id] = updated
            return replace(updated)

    async def get_job(self, job_id: str) -> TranscriptionJob | None:
        job = self._jobs.get(job_id)
        return replace(job) if job is not None else None

    async def close(self) -> None:
        pass
