"""Configuration management for audioscribe."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # Storage
    database_path: Path = Path("./data/transcriptions.db")

    # Pipeline
    temp_dir: Path | None = None
    shutdown_grace_period: float = 10.0

    # File download
    download_timeout: float = 30.0
    max_file_size: int = 25 * 1024 * 1024

    # Whisper API
    openai_api_key: str = ""
    whisper_base_url: str = "https://api.openai.com/v1"
    whisper_model: str = "whisper-1"
    whisper_timeout: float = 30.0
    whisper_max_retries: int = 3

    # Webhooks
    webhook_concurrency: int = 5
    webhook_max_retries: int = 3
    webhook_retry_delay: float = 1.0
    webhook_timeout: float = 10.0

    def ensure_directories(self) -> None:
        """Create required directories if they don't exist."""
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        if self.temp_dir is not None:
            self.temp_dir.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
