"""Main entry point for the audioscribe service."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from audioscribe import __version__
from audioscribe.api.deps import set_orchestrator
from audioscribe.api.routes import health, transcriptions
from audioscribe.config import Settings, settings
from audioscribe.jobs.orchestrator import TranscriptionOrchestrator
from audioscribe.services.downloader import HttpFileDownloader
from audioscribe.services.webhook import WebhookClient
from audioscribe.services.whisper import WhisperClient
from audioscribe.storage.sqlite import SQLiteJobStorage

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def build_orchestrator(
    cfg: Settings,
) -> tuple[TranscriptionOrchestrator, SQLiteJobStorage, WebhookClient]:
    """Wire the orchestrator to collaborators configured from ``cfg``."""
    if not cfg.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; transcription jobs will fail")

    storage = SQLiteJobStorage(cfg.database_path)
    webhook_client = WebhookClient(
        concurrency=cfg.webhook_concurrency,
        max_retries=cfg.webhook_max_retries,
        retry_delay=cfg.webhook_retry_delay,
        timeout=cfg.webhook_timeout,
    )
    orchestrator = TranscriptionOrchestrator(
        storage=storage,
        downloader=HttpFileDownloader(
            timeout=cfg.download_timeout,
            max_file_size=cfg.max_file_size,
        ),
        transcriber=WhisperClient(
            api_key=cfg.openai_api_key,
            base_url=cfg.whisper_base_url,
            model=cfg.whisper_model,
            max_retries=cfg.whisper_max_retries,
            max_file_size=cfg.max_file_size,
            timeout=cfg.whisper_timeout,
        ),
        notifier=webhook_client,
        temp_root=cfg.temp_dir,
    )
    return orchestrator, storage, webhook_client


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize collaborators on startup, drain and close them on shutdown."""
    settings.ensure_directories()
    orchestrator, storage, webhook_client = build_orchestrator(settings)
    set_orchestrator(orchestrator)
    try:
        yield
    finally:
        remaining = await orchestrator.drain(timeout=settings.shutdown_grace_period)
        if remaining:
            logger.warning("Shutting down with %d unfinished job(s): %s", len(remaining), remaining)
        await webhook_client.shutdown(grace_period=settings.shutdown_grace_period)
        await storage.close()
        set_orchestrator(None)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="audioscribe",
        description="Asynchronous audio transcription jobs",
        version=__version__,
        lifespan=lifespan,
    )

    app.include_router(health.router)
    app.include_router(transcriptions.router)

    return app


app = create_app()


def main() -> None:
    """Run the application."""
    configure_logging(settings.log_level)
    uvicorn.run(
        "audioscribe.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
