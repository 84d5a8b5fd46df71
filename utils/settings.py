"""
Environment-driven settings.
Values come from the process environment, with a local .env file loaded first.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    session_secret: str = "dev-secret-change-me"
    session_max_age: int = 86400
    upload_dir: str = "uploads"
    max_upload_mb: int = 10
    max_files_per_upload: int = 10
    default_model: str = "gpt-4o-mini"
    generation_timeout: int = 30
    pdf_quiz_mode: str = "text"
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:5173"])
    log_level: str = "INFO"
    log_file: str = "app.log"

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process."""
    pdf_mode = os.getenv("PDF_QUIZ_MODE", "text").strip().lower()
    if pdf_mode not in ("text", "vision"):
        raise ValueError(f"PDF_QUIZ_MODE must be 'text' or 'vision', got {pdf_mode!r}")

    return Settings(
        session_secret=os.getenv("SESSION_SECRET", "dev-secret-change-me"),
        session_max_age=_env_int("SESSION_MAX_AGE", 86400),
        upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
        max_upload_mb=_env_int("MAX_UPLOAD_MB", 10),
        max_files_per_upload=_env_int("MAX_FILES_PER_UPLOAD", 10),
        default_model=os.getenv("DEFAULT_MODEL", "gpt-4o-mini"),
        generation_timeout=_env_int("GENERATION_TIMEOUT", 30),
        pdf_quiz_mode=pdf_mode,
        cors_origins=_env_list("CORS_ORIGINS", "http://localhost:5173"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_file=os.getenv("LOG_FILE", "app.log"),
    )
