"""
Submission side of the queue: creating jobs and reporting on them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from disc_specs.core.config import settings
from disc_specs.core.source_urls import build_search_query, canonicalize_source_url
from disc_specs.dtos.scrape_job_dto import QueueStats, ScrapeJobCreate
from disc_specs.entities.base import utcnow
from disc_specs.entities.scrape_job import JOB_STATUSES, ScrapeJob
from disc_specs.repositories.scrape_job_repo import ScrapeJobRepository

logger = logging.getLogger(__name__)


class SpecRequestService:
    def __init__(self, session: Session, *, clock: Callable[[], datetime] = utcnow) -> None:
        self.job_repo = ScrapeJobRepository(session)
        self.clock = clock

    def submit_job(self, dto: ScrapeJobCreate) -> ScrapeJob:
        """
        Queue a title for enrichment.

        An already pending or processing job for the same title and year is
        returned instead of creating a second one.

        Raises:
            InvalidSourceUrlError: if ``source_url`` is given and is not a
                blu-ray.com URL. No job is created.
        """
        source_url = canonicalize_source_url(dto.source_url) if dto.source_url else None

        existing = self.job_repo.find_active_job(dto.title, dto.year)
        if existing is not None:
            logger.info("Job %s already queued for %s (%s)", existing.id, dto.title, dto.year)
            return existing

        job = self.job_repo.create_job(
            dto,
            source_url=source_url,
            search_query=None if source_url else build_search_query(dto.title, dto.year),
        )
        logger.info("Queued job %s for %s (%s)", job.id, dto.title, dto.year)
        return job

    def get_job_status(self, job_id: int) -> Optional[ScrapeJob]:
        return self.job_repo.get_by_id(job_id)

    def list_jobs(self, status: Optional[str] = None, limit: int = 100) -> list[ScrapeJob]:
        """
        List jobs, newest first, optionally filtered by status.

        Args:
            status: Optional status filter (pending, processing, completed, failed)
            limit: Maximum number of jobs to return
        """
        if status:
            return self.job_repo.get_jobs_by_status(status, limit)
        return self.job_repo.get_all_jobs(limit)

    def get_latest_for_collection_item(self, collection_item_id: int) -> Optional[ScrapeJob]:
        return self.job_repo.get_latest_for_collection_item(collection_item_id)

    def queue_stats(self, window_days: Optional[int] = None) -> QueueStats:
        """Counts per status for jobs created within the stats window."""
        days = settings.QUEUE_STATS_WINDOW_DAYS if window_days is None else window_days
        counts = self.job_repo.count_by_status(since=self.clock() - timedelta(days=days))
        return QueueStats(**{status: counts.get(status, 0) for status in JOB_STATUSES})
