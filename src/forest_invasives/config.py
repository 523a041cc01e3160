"""Application settings.

Values come from (highest priority first) environment variables prefixed with
``FOREST_INVASIVES_``, a local ``.env`` file, then the defaults below::

    FOREST_INVASIVES_REQUEST_TIMEOUT=60 forest-invasives map --forest "Angeles National Forest"
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from forest_invasives.datasources.usfs.client import (
    DEFAULT_FOREST,
    DEFAULT_RECORD_COUNT,
    FOREST_BOUNDARY_LAYER,
    INVASIVE_SPECIES_LAYER,
)


class Settings(BaseSettings):
    """Runtime configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FOREST_INVASIVES_",
        env_file=".env",
        extra="ignore",
    )

    app_name: str = "forest-invasives"
    app_env: str = "development"
    debug: bool = False

    # HTTP
    request_timeout: float = Field(default=30.0, gt=0, description="Per-request timeout (s)")
    http_retries: int = Field(default=0, ge=0, description="Transport retries (0 = none)")
    user_agent: str = "forest-invasives/0.1"

    # Layers
    forest_layer_url: str = FOREST_BOUNDARY_LAYER
    invasives_layer_url: str = INVASIVE_SPECIES_LAYER
    record_count: int = Field(default=DEFAULT_RECORD_COUNT, gt=0)
    default_forest: str = DEFAULT_FOREST

    output_dir: Path = Path("site")


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings (read once)."""
    return Settings()
