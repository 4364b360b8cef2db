"""Transcription job orchestration."""

from audioscribe.jobs.models import JobStatus, JobUpdate, TranscriptionJob
from audioscribe.jobs.orchestrator import TranscriptionOrchestrator
from audioscribe.jobs.tracker import InFlightJobs

__all__ = [
    "InFlightJobs",
    "JobStatus",
    "JobUpdate",
    "TranscriptionJob",
    "TranscriptionOrchestrator",
]
