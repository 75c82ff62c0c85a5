"""Formation engine configuration via pydantic-settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SEED = 12345


class Settings(BaseSettings):
    """Settings loaded from environment variables.

    All variables are prefixed with ``PROTOZOA_`` (e.g. ``PROTOZOA_DATA_PATH``).
    """

    # Authored data root; formation files live under ``<data_path>/formations``
    data_path: str = "data"

    # Generation
    default_seed: int = DEFAULT_SEED
    mock_formations_per_tier: int = Field(default=3, ge=1)
    max_workers: Optional[int] = Field(default=None, ge=1)

    # Transitions (seconds)
    default_transition_time: float = Field(default=1.0, ge=0)

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(
        env_prefix="PROTOZOA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance."""
    return Settings()
