"""Shared fixtures and collaborator fakes."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from audioscribe.jobs.models import JobStatus, JobUpdate, TranscriptionJob
from audioscribe.jobs.orchestrator import TranscriptionOrchestrator
from audioscribe.storage.memory import InMemoryJobStorage


class RecordingStorage(InMemoryJobStorage):
    """In-memory storage that records updates and can fail on demand."""

    def __init__(self) -> None:
        super().__init__()
        self.updates: list[tuple[str, JobUpdate]] = []
        self.fail_on: dict[JobStatus, Exception] = {}
        self.create_error: Exception | None = None

    async def create_job(self, *, audio_file_url, webhook_url=None):
        if self.create_error is not None:
            raise self.create_error
        return await super().create_job(audio_file_url=audio_file_url, webhook_url=webhook_url)

    async def update_job(self, job_id, update):
        self.updates.append((job_id, update))
        if update.status in self.fail_on:
            raise self.fail_on[update.status]
        return await super().update_job(job_id, update)

    def statuses(self, job_id: str) -> list[JobStatus]:
        return [u.status for jid, u in self.updates if jid == job_id]


class FakeDownloader:
    def __init__(self, content: bytes = b"RIFF....WAVE", error: Exception | None = None) -> None:
        self.content = content
        self.error = error
        self.calls: list[tuple[str, Path]] = []

    async def download_file(self, url: str, dest_path: Path) -> None:
        self.calls.append((url, dest_path))
        if self.error is not None:
            raise self.error
        dest_path.write_bytes(self.content)


class FakeTranscriber:
    def __init__(self, text: str = "hello", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls: list[Path] = []
        self.saw_file: list[bool] = []
        self.gate: asyncio.Event | None = None

    async def transcribe(self, audio_path: Path) -> str:
        self.calls.append(audio_path)
        self.saw_file.append(audio_path.exists())
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.text


class FakeNotifier:
    def __init__(self, error: BaseException | None = None) -> None:
        self.error = error
        self.calls: list[tuple[str, TranscriptionJob]] = []

    async def notify(self, webhook_url: str, job: TranscriptionJob) -> None:
        self.calls.append((webhook_url, job))
        if self.error is not None:
            raise self.error


@pytest.fixture
def storage() -> RecordingStorage:
    return RecordingStorage()


@pytest.fixture
def downloader() -> FakeDownloader:
    return FakeDownloader()


@pytest.fixture
def transcriber() -> FakeTranscriber:
    return FakeTranscriber()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def temp_root(tmp_path: Path) -> Path:
    root = tmp_path / "work"
    root.mkdir()
    return root


@pytest.fixture
def orchestrator(storage, downloader, transcriber, notifier, temp_root) -> TranscriptionOrchestrator:
    return TranscriptionOrchestrator(
        storage=storage,
        downloader=downloader,
        transcriber=transcriber,
        notifier=notifier,
        temp_root=temp_root,
    )
