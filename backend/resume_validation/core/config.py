# resume_validation/core/config.py
from __future__ import annotations
from functools import lru_cache
from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import Field

# Resolve the .env alongside the backend package root (adjust if your layout differs)
ENV_PATH = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    """Process-wide configuration. Loaded once and handed to every component constructor."""

    # --- Database (record store + durable job queue) ---
    DATABASE_URL: str = Field(..., description="Full PostgreSQL connection URL (sync, e.g., postgresql+psycopg://...)")
    DATABASE_URL_ASYNC: str | None = Field(
        default=None,
        description="Async PostgreSQL URL (e.g., postgresql+asyncpg://...). Optional; derived if missing.",
    )

    # --- App info ---
    APP_NAME: str = Field(default="Resume Validation Backend")
    CORS_ORIGINS: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
    )

    # --- Inference endpoint (local Ollama) ---
    OLLAMA_BASE_URL: str = Field(default="http://localhost:8080", description="Base URL of the local Ollama server")
    LLM_CHAT_MODEL: str = Field(default="qwen2:7b", description="Model used for scored resume evaluation")
    LLM_SCREENING_MODEL: str = Field(default="llama3:8b", description="Model used for binary resume screening")
    CLASSIFIER_MAX_CHARS: int = 3000
    CLASSIFIER_TIMEOUT_SECONDS: float | None = None
    FETCH_TIMEOUT_SECONDS: float | None = None

    # --- Resume policy ---
    MIN_TEXT_LENGTH: int = 50
    MAX_RESUME_BYTES: int = 5 * 1024 * 1024
    MAX_RESUME_ATTEMPTS: int = 3

    # --- Job queue ---
    QUEUE_NAME: str = "resume-validation"
    QUEUE_MAX_ATTEMPTS: int = 3
    QUEUE_RETRY_DELAY_SECONDS: float = 5.0
    QUEUE_POLL_INTERVAL_SECONDS: float = 1.0
    QUEUE_VISIBILITY_TIMEOUT_SECONDS: float = 600.0

    # --- Worker ---
    WORKER_CONCURRENCY: int = 4
    PROCESSING_DEADLINE_SECONDS: float = 900.0
    RECONCILE_INTERVAL_SECONDS: float = 60.0

    # --- Email notifier ---
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    EMAIL_USER: str | None = None
    EMAIL_PASS: str | None = None
    EMAIL_FROM_NAME: str = "Code & Quest Feria"

    class Config:
        env_file = str(ENV_PATH)
        case_sensitive = True
        frozen = True

    @property
    def database_url_async_effective(self) -> str:
        """
        Prefer DATABASE_URL_ASYNC; if it's missing, derive from DATABASE_URL by swapping
        '+psycopg' -> '+asyncpg'. If no swap is possible, return DATABASE_URL as-is.
        """
        if self.DATABASE_URL_ASYNC:
            return self.DATABASE_URL_ASYNC
        if "+psycopg" in self.DATABASE_URL:
            return self.DATABASE_URL.replace("+psycopg", "+asyncpg")
        return self.DATABASE_URL


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings on first use; every later call returns the same instance."""
    return Settings()
