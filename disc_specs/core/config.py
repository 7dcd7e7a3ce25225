"""Runtime configuration for the disc-specs service.

Every value can be overridden through the environment (or a ``.env`` file)
using the field name, e.g. ``SCRAPE_DELAY_BASE_SECONDS=30``.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = Field(
        default="sqlite:///./disc_specs.db",
        description="SQLAlchemy connection URL for the job, spec and cache tables.",
    )
    DEBUG: bool = False
    API_KEY: str = Field(
        default="", description="Shared key for write endpoints; empty disables the check."
    )
    LOG_LEVEL: str = "INFO"

    # Source site
    SOURCE_BASE_URL: str = "https://www.blu-ray.com"
    SEARCH_SECTION: str = "bluraymovies"
    SEARCH_COUNTRY: str = "US"
    SEARCH_RESULT_LIMIT: int = Field(default=5, ge=1)

    # Outbound pacing. Each job waits BASE + uniform(0, JITTER) seconds
    # before its first network fetch (22-36s with the defaults).
    SCRAPE_DELAY_BASE_SECONDS: float = Field(default=22.0, ge=0)
    SCRAPE_DELAY_JITTER_SECONDS: float = Field(default=14.0, ge=0)
    SCRAPE_REQUEST_TIMEOUT: int = Field(default=30, gt=0)

    # Queue
    SCRAPE_BATCH_SIZE: int = Field(default=3, ge=3, le=5)
    DEFAULT_MAX_ATTEMPTS: int = Field(default=3, ge=1)
    RETRY_BASE_MINUTES: float = Field(
        default=1.0, gt=0, description="retry delay = RETRY_BASE_MINUTES * 2^attempts"
    )

    # Freshness
    PAGE_CACHE_MAX_AGE_DAYS: int | None = Field(
        default=None,
        description="Cached pages older than this are refetched; unset keeps them forever.",
    )
    SPEC_MAX_AGE_DAYS: int = 30
    QUEUE_STATS_WINDOW_DAYS: int = 7

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
