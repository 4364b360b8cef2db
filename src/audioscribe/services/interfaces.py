"""Service interfaces (Protocols) for audioscribe.

These protocols define the contracts the job orchestrator consumes.
Each collaborator owns its own wire protocol; the orchestrator only
sees the shapes below, which keeps implementations swappable and
easy to fake in tests.
"""

from pathlib import Path
from typing import Protocol

from audioscribe.jobs.models import JobUpdate, TranscriptionJob


class IJobStorage(Protocol):
    """Interface for durable job records."""

    async def create_job(
        self,
        *,
        audio_file_url: str,
        webhook_url: str | None = None,
    ) -> TranscriptionJob:
        """Persist a new pending job.

        The storage assigns ``id``, ``created_at`` and ``updated_at``.

        Raises:
            StorageError: If the record could not be written
        """
        ...

    async def update_job(self, job_id: str, update: JobUpdate) -> TranscriptionJob:
        """Apply a sparse update and return the updated record.

        Raises:
            JobNotFoundError: If no job has this id
            InvalidTransitionError: If the status change is not allowed
            StorageError: On lower-level failures
        """
        ...

    async def get_job(self, job_id: str) -> TranscriptionJob | None:
        """Return the job, or None if it does not exist."""
        ...

    async def close(self) -> None:
        """Release any held resources."""
        ...


class IFileDownloader(Protocol):
    """Interface for fetching a remote file to local disk."""

    async def download_file(self, url: str, dest_path: Path) -> None:
        """Write the resource at ``url`` to ``dest_path``.

        Raises:
            FileDownloadError: On HTTP, size, timeout or transport failures
        """
        ...


class ITranscriptionClient(Protocol):
    """Interface for speech-to-text."""

    async def transcribe(self, audio_path: Path) -> str:
        """Transcribe a local audio file to text.

        Raises:
            TranscriptionError: On API or validation failures
        """
        ...


class IWebhookClient(Protocol):
    """Interface for delivering job status notifications."""

    async def notify(self, webhook_url: str, job: TranscriptionJob) -> None:
        """Deliver a status payload for ``job`` to ``webhook_url``.

        Raises:
            WebhookDeliveryError: If delivery ultimately failed
        """
        ...
