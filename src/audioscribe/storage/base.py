"""Helpers shared by storage backends."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from audioscribe.errors import InvalidTransitionError
from audioscribe.jobs.models import JobStatus, JobUpdate, can_transition


@dataclass
class JobFields:
    """Mutable subset of a job record."""

    status: JobStatus
    result: str | None
    error: str | None


def next_timestamp(previous: datetime | None = None) -> datetime:
    """Current UTC time, nudged forward so it is strictly after ``previous``."""
    now = datetime.now(timezone.utc)
    if previous is not None and now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


def apply_update(job_id: str, current: JobFields, update: JobUpdate) -> JobFields:
    """Merge a sparse update into ``current``, enforcing lifecycle rules.

    Raises:
        InvalidTransitionError: If the status change is not allowed, or the
            job is terminal and the update would change it.
    """
    status = current.status
    if update.status is not None and update.status != current.status:
        if not can_transition(current.status, update.status):
            raise InvalidTransitionError(
                f"Job {job_id} cannot move from {current.status.value} "
                f"to {update.status.value}"
            )
        status = update.status
    elif current.status.is_terminal:
        raise InvalidTransitionError(
            f"Job {job_id} is {current.status.value} and can no longer change"
        )

    result = update.result if update.result is not None else current.result
    error = update.error if update.error is not None else current.error
    if status == JobStatus.COMPLETED:
        error = None
    elif status == JobStatus.FAILED:
        result = None
    else:
        result = None
        error = None
    return JobFields(status=status, result=result, error=error)
