"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/interview.db")
    STATE_KEY: str = "interviewState_v1"
    CANDIDATE_KEY: str = "savedCandidateInfo"

    LLM_CONFIG_PATH: str | None = None

    SUBJECT_A: str = "React"
    SUBJECT_B: str = "Node"

    ASSISTANT_MAX_ATTEMPTS: int = Field(default=4, ge=1)
    ASSISTANT_BACKOFF_BASE_MS: int = Field(default=2000, ge=0)
    ASSISTANT_BACKOFF_CAP_MS: int = Field(default=8000, ge=0)
    ASSISTANT_JITTER_MS: int = Field(default=200, ge=0)

    FALLBACK_SCORE: int = Field(default=50, ge=0, le=100)
    OCR_MIN_CHARS: int = 5
    OCR_DPI: int = Field(default=300, ge=72)
    OCR_LANG: str = "eng"
    TICK_SECONDS: float = Field(default=1.0, gt=0)

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
