"""Frame timeline configuration via pydantic-settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Timeline settings loaded from environment variables.

    All variables are prefixed with ``FRAME_TIMELINE_``
    (e.g. ``FRAME_TIMELINE_DEFAULT_INTERVAL_MS``).
    """

    # "production" / "prod" / "staging" switch logging to JSON
    env: str = "development"
    log_level: str = "INFO"

    # Playback
    default_interval_ms: float = 0.0

    # Upper bound on calls drained by a virtual-clock run
    max_idle_steps: int = 10000

    model_config = SettingsConfigDict(
        env_prefix="FRAME_TIMELINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("default_interval_ms")
    @classmethod
    def _non_negative_interval(cls, value: float) -> float:
        if value < 0:
            raise ValueError("default_interval_ms must be >= 0")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def is_production(self) -> bool:
        return self.env.lower() in ("production", "prod", "staging")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance."""
    return Settings()
