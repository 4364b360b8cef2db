"""Transcription job endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from audioscribe.api.deps import get_orchestrator
from audioscribe.api.schemas import TranscriptionCreateRequest, TranscriptionJobResponse
from audioscribe.errors import JobValidationError
from audioscribe.jobs.orchestrator import TranscriptionOrchestrator

router = APIRouter(prefix="/api/v1/transcriptions", tags=["transcriptions"])


@router.post(
    "",
    response_model=TranscriptionJobResponse,
    response_model_by_alias=True,
    status_code=202,
)
async def create_transcription(
    req: TranscriptionCreateRequest,
    orchestrator: TranscriptionOrchestrator = Depends(get_orchestrator),
) -> TranscriptionJobResponse:
    try:
        job = await orchestrator.create_job(req.audio_file_url, req.webhook_url)
    except JobValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return TranscriptionJobResponse.from_job(job)


@router.get(
    "/{job_id}",
    response_model=TranscriptionJobResponse,
    response_model_by_alias=True,
)
async def get_transcription(
    job_id: str,
    orchestrator: TranscriptionOrchestrator = Depends(get_orchestrator),
) -> TranscriptionJobResponse:
    job = await orchestrator.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return TranscriptionJobResponse.from_job(job)
