"""Health check endpoint."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from audioscribe import __version__
from audioscribe.api.deps import get_orchestrator
from audioscribe.jobs.orchestrator import TranscriptionOrchestrator

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str
    in_flight_jobs: int


@router.get("/health", response_model=HealthResponse)
async def health_check(
    orchestrator: TranscriptionOrchestrator = Depends(get_orchestrator),
) -> HealthResponse:
    """Report liveness and how many pipelines are currently running."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        in_flight_jobs=len(orchestrator.in_flight_job_ids()),
    )
