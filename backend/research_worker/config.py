"""
Prism Research Worker — Central Configuration

All environment variables live here.
Import `get_settings`, `log`, and `generate_error_code` from this module.
Do not read `os.environ` anywhere else.
"""

import uuid
from datetime import datetime, timezone
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings

ENGINE_NAME = "Prism Intelligence Engine"
ENGINE_VERSION = "2.0.0"


class Settings(BaseSettings):
    """All environment variables. Loaded from .env or the host's env vars."""

    # Job store (edge functions that own the research_jobs table)
    job_store_url: str
    worker_secret: str                # Sent as x-worker-secret on every job store call
    job_store_timeout_seconds: float = 30.0

    # Research API
    perplexity_api_key: str
    research_model: str = "sonar-deep-research"
    research_mode: Literal["single", "dual"] = "dual"

    # Summarizer (optional — empty key skips structured parsing)
    summarizer_api_key: str = ""
    summarizer_base_url: str = "https://ai.gateway.lovable.dev/v1"
    summarizer_model: str = "google/gemini-2.5-flash"

    # App
    host: str = "0.0.0.0"
    port: int = 3000
    environment: str = "development"  # "development" | "production"
    cors_origins: str = "http://localhost:3000"  # Comma-separated for multiple origins

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    """Build the settings object once per process.

    The app factory stores the result on app.state; everything downstream
    receives it as an argument.
    """
    return Settings()


# ──────────────────────────────────────────────────────
# Logging Utilities (structured print)
# ──────────────────────────────────────────────────────

def generate_error_code() -> str:
    """Generate a short error reference code.

    Format: 'RW-' followed by 6 uppercase hex characters.
    Example: 'RW-3F8A2C'

    The same code is logged next to the error so operators can grep for it
    when a job shows up as failed in the store.
    """
    return f"RW-{uuid.uuid4().hex[:6].upper()}"


def log(level: str, message: str, **context) -> None:
    """Structured print-based logger.

    Every log line follows the format:
        [ISO_TIMESTAMP] [LEVEL] message | key1=value1 key2=value2

    Args:
        level: One of "INFO", "WARN", "ERROR".
        message: Human-readable description of what happened.
        **context: Arbitrary key-value pairs. Always include job_id when available.

    Usage:
        log("INFO", "research phase started", job_id="abc-123", phase=1)
        log("ERROR", "job failed", job_id="abc-123", error_code="RW-3F8A2C", error=str(e))
    """
    ts = datetime.now(timezone.utc).isoformat()
    ctx = " ".join(f"{k}={v}" for k, v in context.items())
    print(f"[{ts}] [{level}] {message} | {ctx}", flush=True)


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string (the format the job store expects)."""
    return datetime.now(timezone.utc).isoformat()
