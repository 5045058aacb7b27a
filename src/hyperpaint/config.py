"""Configuration loading for the projection studio.

Settings come from environment variables (prefixed ``HYPERPAINT_``) and an
optional ``.env`` file, validated by pydantic-settings.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class StudioSettings(BaseSettings):
    """Tunables for the projection scheduler and the frame loop.

    Environment Variables:
        HYPERPAINT_MAX_INSTANCES: Total instance slots, split over 4 categories (default: 20000)
        HYPERPAINT_BATCH_THRESHOLD: Node count at which passes are batched (default: 5000)
        HYPERPAINT_BATCH_SIZE: Nodes projected per tick in a batched pass (default: 500)
        HYPERPAINT_FRAME_RATE: Host ticks per second for the server frame loop (default: 60)
        HYPERPAINT_SAMPLE_SEED: Seed for the sample space property jitter (default: 123456789)

    Example:
        >>> settings = StudioSettings()  # Loads from environment
        >>> settings = StudioSettings(batch_size=250)
    """

    model_config = SettingsConfigDict(
        env_prefix="HYPERPAINT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_instances: int = Field(
        default=20000,
        ge=4,
        le=1_000_000,
        description="Total instance slots across all categories",
    )
    batch_threshold: int = Field(
        default=5000,
        ge=1,
        description="Node count at or above which projection passes are batched",
    )
    batch_size: int = Field(
        default=500,
        ge=1,
        description="Nodes projected per tick in a batched pass",
    )
    frame_rate: float = Field(
        default=60.0,
        gt=0,
        le=240.0,
        description="Host ticks per second",
    )
    sample_seed: int = Field(
        default=123456789,
        description="Seed for the sample space property jitter",
    )

    @model_validator(mode="after")
    def check_batching(self) -> StudioSettings:
        """Warn when a chunk is large enough to make batching pointless."""
        if self.batch_size >= self.batch_threshold:
            logger.warning(
                "batch_size (%d) >= batch_threshold (%d): batched passes finish in one tick",
                self.batch_size,
                self.batch_threshold,
            )
        return self


@lru_cache
def get_settings() -> StudioSettings:
    """Get cached studio settings.

    To reload, call ``get_settings.cache_clear()`` first.
    """
    settings = StudioSettings()
    logger.info("Loaded studio settings: %r", settings)
    return settings
