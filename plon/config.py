"""
Settings for the plon scheduling engine.

Values are read from the environment (prefix ``PLON_``) or a local ``.env``
file. Use ``get_settings()`` to share a single cached instance.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PLON_",
        env_file=".env",
        extra="ignore",
    )

    # Logging
    debug: bool = False
    log_level: str | None = None
    log_json: bool = False

    # Scheduling
    default_estimated_hours: float = Field(default=8.0, ge=0)
    unassigned_hours_per_day: float = Field(default=8.0, gt=0)
    max_schedule_days: int = Field(default=3650, gt=0)  # ~10 years of calendar days


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
