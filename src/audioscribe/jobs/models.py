"""Job domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class JobStatus(str, Enum):
    """Status of a transcription job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


# Forward-only lifecycle; terminal states have no outgoing edges.
ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING, JobStatus.FAILED}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}


def can_transition(current: JobStatus, new: JobStatus) -> bool:
    """Return True if a job in ``current`` may move to ``new``."""
    return new in ALLOWED_TRANSITIONS[current]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TranscriptionJob:
    """A request to transcribe one remote audio file."""

    id: str
    audio_file_url: str
    status: JobStatus = JobStatus.PENDING
    webhook_url: str | None = None
    result: str | None = None
    error: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dict (camelCase keys)."""
        return {
            "id": self.id,
            "status": self.status.value,
            "audioFileUrl": self.audio_file_url,
            "webhookUrl": self.webhook_url,
            "result": self.result,
            "error": self.error,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


@dataclass
class JobUpdate:
    """Sparse update to a job; ``None`` fields are left unchanged."""

    status: JobStatus | None = None
    result: str | None = None
    error: str | None = None
