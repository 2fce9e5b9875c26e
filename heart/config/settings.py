"""Environment-driven settings.

Values are read once, at session construction. Every field can be
overridden with an ``HEART_``-prefixed environment variable or a ``.env``
file, e.g. ``HEART_DRIFT_INTERVAL_SECONDS=30``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class HeartSettings(BaseSettings):
    """Timer periods, buffer sizes and the personality source."""

    model_config = SettingsConfigDict(
        env_prefix="HEART_",
        env_file=".env",
        extra="ignore",
    )

    # Background loop periods
    drift_interval_seconds: float = Field(default=60.0, gt=0)
    autonomous_interval_seconds: float = Field(default=30.0, gt=0)

    # Bounded buffers
    max_history_size: int = Field(default=100, ge=1)
    max_thoughts: int = Field(default=50, ge=1)

    # Personality JSON file; built-in defaults are used when unset
    personality_path: Optional[Path] = None


@lru_cache(maxsize=1)
def get_settings() -> HeartSettings:
    """Process-wide settings instance."""
    return HeartSettings()
