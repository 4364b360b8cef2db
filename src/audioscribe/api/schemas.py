"""Request and response schemas for the audioscribe API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from audioscribe.jobs.models import TranscriptionJob


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TranscriptionCreateRequest(_CamelModel):
    audio_file_url: str = Field(..., description="URL of the audio file to transcribe")
    webhook_url: str | None = Field(None, description="Endpoint notified when the job completes")


class TranscriptionJobResponse(_CamelModel):
    id: str
    status: str
    audio_file_url: str
    webhook_url: str | None = None
    result: str | None = None
    error: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_job(cls, job: TranscriptionJob) -> TranscriptionJobResponse:
        return cls(
            id=job.id,
            status=job.status.value,
            audio_file_url=job.audio_file_url,
            webhook_url=job.webhook_url,
            result=job.result,
            error=job.error,
            created_at=job.created_at,
            updated_at=job.updated_at,
        )
