"""
DTOs for job submission, status and batch results.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from disc_specs.core.config import settings

JobStatus = Literal["pending", "processing", "completed", "failed"]


class ScrapeJobCreate(BaseModel):
    """DTO for requesting spec enrichment of a title."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=500, description="Movie or show title")
    year: int | None = Field(default=None, gt=1870, description="Release year")
    source_url: str | None = Field(
        default=None, max_length=1000, description="Known blu-ray.com release page"
    )
    imdb_id: str | None = Field(default=None, max_length=20)
    collection_item_id: int | None = Field(
        default=None, description="Collection row to link the specs to"
    )
    priority: int = Field(default=0, description="Higher runs first")
    max_attempts: int = Field(default_factory=lambda: settings.DEFAULT_MAX_ATTEMPTS, ge=1, le=10)
    requested_by: str | None = Field(default=None, max_length=100)


class ScrapeJobRead(BaseModel):
    id: int
    title: str
    year: int | None
    source_url: str | None
    imdb_id: str | None
    collection_item_id: int | None
    status: str
    priority: int
    attempts: int
    max_attempts: int
    retry_after: datetime | None
    error_message: str | None
    technical_specs_id: int | None
    created_at: datetime
    started_at: datetime | None
    completed_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class SearchCandidate(BaseModel):
    """One row of the source site's search results."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    url: str
    title: str
    year: int | None = None


class JobResult(BaseModel):
    """Outcome of processing one job within a batch."""

    job_id: int
    title: str
    status: Literal["completed", "retrying", "failed"]
    spec_id: int | None = None
    retry_after: datetime | None = None
    attempts: int
    max_attempts: int
    error: str | None = None


class BatchSummary(BaseModel):
    processed_count: int
    results: list[JobResult] = Field(default_factory=list)


class QueueStats(BaseModel):
    pending: int = 0
    processing: int = 0
    completed: int = 0
    failed: int = 0
