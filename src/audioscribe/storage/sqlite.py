"""SQLite job storage built on SQLAlchemy.

SQLAlchemy's engine is synchronous here; every operation runs in a worker
thread via ``asyncio.to_thread`` and is serialized by a lock, so the event
loop never blocks on disk I/O.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    String,
    Text,
    create_engine,
    event,
    text,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from audioscribe.errors import JobNotFoundError, StorageError, StorageInitializationError
from audioscribe.jobs.models import JobStatus, JobUpdate, TranscriptionJob
from audioscribe.storage.base import JobFields, apply_update, next_timestamp

logger = logging.getLogger(__name__)

Base = declarative_base()

_STATUS_VALUES = ", ".join(f"'{s.value}'" for s in JobStatus)


class TranscriptionJobRecord(Base):
    """Row in the transcription_jobs table."""

    __tablename__ = "transcription_jobs"
    __table_args__ = (
        CheckConstraint(f"status IN ({_STATUS_VALUES})", name="ck_transcription_jobs_status"),
    )

    id = Column(String(32), primary_key=True)
    status = Column(String(16), nullable=False, index=True)
    audio_file_url = Column(Text, nullable=False)
    result = Column(Text, nullable=True)
    error = Column(Text, nullable=True)
    webhook_url = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, index=True)  # naive UTC
    updated_at = Column(DateTime, nullable=False)  # naive UTC

    def __repr__(self) -> str:
        return f"<TranscriptionJobRecord(id='{self.id}', status='{self.status}')>"


def _to_naive_utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _to_aware_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_job(record: TranscriptionJobRecord) -> TranscriptionJob:
    return TranscriptionJob(
        id=record.id,
        status=JobStatus(record.status),
        audio_file_url=record.audio_file_url,
        webhook_url=record.webhook_url,
        result=record.result,
        error=record.error,
        created_at=_to_aware_utc(record.created_at),
        updated_at=_to_aware_utc(record.updated_at),
    )


def _set_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class SQLiteJobStorage:
    """Durable job storage in a single SQLite file.

    Args:
        path: Database file path, or ``":memory:"`` for a private in-memory
            database.
        create_schema: Create the jobs table if it does not exist. When
            False and the table is missing, every operation fails with
            StorageError.

    Raises:
        StorageInitializationError: If the database cannot be opened.
    """

    def __init__(self, path: str | Path, *, create_schema: bool = True) -> None:
        in_memory = str(path) == ":memory:"
        url = "sqlite://" if in_memory else f"sqlite:///{path}"
        engine_kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if in_memory:
            engine_kwargs["poolclass"] = StaticPool

        try:
            engine = create_engine(url, **engine_kwargs)
            event.listen(engine, "connect", _set_sqlite_pragmas)
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            if create_schema:
                Base.metadata.create_all(engine)
        except (SQLAlchemyError, sqlite3.Error) as e:
            raise StorageInitializationError(
                f"Failed to initialize SQLite database: {e}", cause=e
            ) from e

        self._engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        self._lock = threading.Lock()
        logger.info("SQLite job storage opened at %s", path)

    # ------------------------------------------------------------------
    # Async API
    # ------------------------------------------------------------------

    async def create_job(
        self,
        *,
        audio_file_url: str,
        webhook_url: str | None = None,
    ) -> TranscriptionJob:
        return await asyncio.to_thread(self._create, audio_file_url, webhook_url)

    async def update_job(self, job_id: str, update: JobUpdate) -> TranscriptionJob:
        return await asyncio.to_thread(self._update, job_id, update)

    async def get_job(self, job_id: str) -> TranscriptionJob | None:
        return await asyncio.to_thread(self._get, job_id)

    async def close(self) -> None:
        await asyncio.to_thread(self._engine.dispose)

    # ------------------------------------------------------------------
    # Blocking implementations
    # ------------------------------------------------------------------

    def _create(self, audio_file_url: str, webhook_url: str | None) -> TranscriptionJob:
        now = _to_naive_utc(next_timestamp())
        record = TranscriptionJobRecord(
            id=uuid4().hex,
            status=JobStatus.PENDING.value,
            audio_file_url=audio_file_url,
            webhook_url=webhook_url,
            created_at=now,
            updated_at=now,
        )
        try:
            with self._lock, self._session_factory() as session:
                session.add(record)
                session.commit()
                return _to_job(record)
        except SQLAlchemyError as e:
            raise StorageError("Failed to create job", cause=e) from e

    def _update(self, job_id: str, update: JobUpdate) -> TranscriptionJob:
        try:
            with self._lock, self._session_factory() as session:
                record = session.get(TranscriptionJobRecord, job_id)
                if record is None:
                    raise JobNotFoundError(job_id)

                fields = apply_update(
                    job_id,
                    JobFields(
                        status=JobStatus(record.status),
                        result=record.result,
                        error=record.error,
                    ),
                    update,
                )
                record.status = fields.status.value
                record.result = fields.result
                record.error = fields.error
                record.updated_at = _to_naive_utc(
                    next_timestamp(_to_aware_utc(record.updated_at))
                )
                session.commit()
                return _to_job(record)
        except SQLAlchemyError as e:
            raise StorageError("Failed to update job", cause=e) from e

    def _get(self, job_id: str) -> TranscriptionJob | None:
        try:
            with self._lock, self._session_factory() as session:
                record = session.get(TranscriptionJobRecord, job_id)
                return _to_job(record) if record is not None else None
        except SQLAlchemyError as e:
            raise StorageError("Failed to get job", cause=e) from e
