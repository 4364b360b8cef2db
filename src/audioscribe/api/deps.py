"""FastAPI dependencies."""

from __future__ import annotations

from audioscribe.jobs.orchestrator import TranscriptionOrchestrator

_orchestrator: TranscriptionOrchestrator | None = None


def set_orchestrator(orchestrator: TranscriptionOrchestrator | None) -> None:
    """Install the orchestrator used by request handlers (called from lifespan)."""
    global _orchestrator
    _orchestrator = orchestrator


def get_orchestrator() -> TranscriptionOrchestrator:
    """Dependency that provides the TranscriptionOrchestrator instance."""
    if _orchestrator is None:
        raise RuntimeError("Orchestrator not initialized; the app lifespan has not run")
    return _orchestrator
