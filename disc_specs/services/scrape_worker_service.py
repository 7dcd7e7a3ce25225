"""
Worker that drains the enrichment queue.

Architecture:
    ScrapeWorkerService -> JobQueueRepository  (scraping_queue table)
    ScrapeWorkerService -> SearchService        (catalog search, when no source URL)
    ScrapeWorkerService -> PageCacheService     (release pages already fetched)
    ScrapeWorkerService -> fetch_html           (release pages not in cache)
    ScrapeWorkerService -> spec_extractor / quality_service
    ScrapeWorkerService -> spec, rating and collection repositories

Job lifecycle:  pending -> processing -> completed
                                      \\-> pending (retry_after set) -> ...
                                      \\-> failed (attempts exhausted)

A batch claims up to SCRAPE_BATCH_SIZE due jobs and processes them one at a
time. A failing job never stops the batch: its error is recorded and the
retry policy decides whether it goes back in the queue. Each job waits on
the rate limiter once, before its first network fetch; a job served
entirely from the page cache does not wait at all.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from disc_specs.core.config import settings
from disc_specs.core.database import SessionLocal
from disc_specs.core.errors import NoMatchError, PersistenceError
from disc_specs.core.http_fetcher import fetch_html
from disc_specs.core.rate_limiter import RateLimiter
from disc_specs.dtos.scrape_job_dto import BatchSummary, JobResult
from disc_specs.dtos.technical_spec_dto import RatingCreate, TechnicalSpecCreate
from disc_specs.entities.base import utcnow
from disc_specs.entities.scrape_job import ScrapeJob
from disc_specs.repositories.collection_item_repo import CollectionItemRepository
from disc_specs.repositories.scrape_job_repo import JobQueueRepository, ScrapeJobRepository
from disc_specs.repositories.technical_spec_repo import (
    DiscRatingRepository,
    TechnicalSpecRepository,
)
from disc_specs.services.page_cache_service import PageCacheService
from disc_specs.services.quality_service import assess_data_quality
from disc_specs.services.search_service import SearchService, select_best_match
from disc_specs.services.spec_extractor import extract_ratings, extract_specs

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = "No specs found - search returned empty results"


def retry_delay(attempts: int, base_minutes: float | None = None) -> timedelta:
    """Backoff after a failed attempt: ``base * 2**attempts`` minutes."""
    base = settings.RETRY_BASE_MINUTES if base_minutes is None else base_minutes
    return timedelta(minutes=base * 2**attempts)


class _JobPacing:
    """Applies the rate limiter at most once for a single job."""

    def __init__(self, limiter: RateLimiter) -> None:
        self.limiter = limiter
        self.waited = False

    async def before_fetch(self) -> None:
        if not self.waited:
            self.waited = True
            await self.limiter.wait()


class ScrapeWorkerService:
    """
    Service that claims queued jobs and enriches them with technical specs.

    Every collaborator is injectable; by default they are built on the
    given session.
    """

    def __init__(
        self,
        session: Session,
        *,
        job_repo: Optional[JobQueueRepository] = None,
        spec_repo: Optional[TechnicalSpecRepository] = None,
        rating_repo: Optional[DiscRatingRepository] = None,
        collection_repo: Optional[CollectionItemRepository] = None,
        page_cache: Optional[PageCacheService] = None,
        search_service: Optional[SearchService] = None,
        fetcher: Callable[[str], str] = fetch_html,
        rate_limiter: Optional[RateLimiter] = None,
        clock: Callable[[], datetime] = utcnow,
        batch_size: Optional[int] = None,
    ) -> None:
        self.session = session
        self.job_repo = job_repo or ScrapeJobRepository(session)
        self.spec_repo = spec_repo or TechnicalSpecRepository(session)
        self.rating_repo = rating_repo or DiscRatingRepository(session)
        self.collection_repo = collection_repo or CollectionItemRepository(session)
        self.page_cache = page_cache or PageCacheService(session, clock=clock)
        self.fetcher = fetcher
        self.search_service = search_service or SearchService(fetcher)
        self.rate_limiter = rate_limiter or RateLimiter()
        self.clock = clock
        self.batch_size = batch_size or settings.SCRAPE_BATCH_SIZE

    async def process_batch(self, limit: Optional[int] = None) -> BatchSummary:
        """
        Claim due jobs and process them sequentially.

        Args:
            limit: Override for the number of jobs to claim

        Returns:
            Per-job outcomes, in processing order
        """
        jobs = self.job_repo.claim_batch(limit or self.batch_size, self.clock())
        if not jobs:
            logger.info("No due jobs in the queue")
            return BatchSummary(processed_count=0)

        logger.info("Claimed %d jobs: %s", len(jobs), [job.id for job in jobs])
        results = []
        for job in jobs:
            results.append(await self.process_job(job))

        completed = sum(1 for r in results if r.status == "completed")
        logger.info(
            "Batch finished: %d completed, %d retrying, %d failed",
            completed,
            sum(1 for r in results if r.status == "retrying"),
            sum(1 for r in results if r.status == "failed"),
        )
        return BatchSummary(processed_count=len(results), results=results)

    async def process_job(self, job: ScrapeJob) -> JobResult:
        """
        Enrich one claimed job and record the outcome.

        Never raises for a job-level failure; the error goes through the
        retry policy and is returned in the result.
        """
        logger.info("Processing job %s: %s (%s), attempt %d/%d",
                    job.id, job.title, job.year, job.attempts, job.max_attempts)
        try:
            spec_id = await self._enrich(job)
            self.job_repo.mark_completed(job.id, spec_id, self.clock())
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Storing results for job %s failed", job.id)
            return self._handle_failure(job, PersistenceError(f"Failed to store specs: {exc}"))
        except Exception as exc:
            logger.exception("Job %s failed", job.id)
            return self._handle_failure(job, exc)

        logger.info("Job %s completed with spec %s", job.id, spec_id)
        return JobResult(
            job_id=job.id,
            title=job.title,
            status="completed",
            spec_id=spec_id,
            attempts=job.attempts,
            max_attempts=job.max_attempts,
        )

    async def _enrich(self, job: ScrapeJob) -> int:
        pacing = _JobPacing(self.rate_limiter)

        url = job.source_url or await self._resolve_source(job, pacing)

        cached = self.page_cache.get(url)
        if cached is not None:
            html = cached.html_content
        else:
            await pacing.before_fetch()
            html = await asyncio.to_thread(self.fetcher, url)

        spec = extract_specs(html, job.title, job.year, url, imdb_id=job.imdb_id)
        spec = spec.model_copy(
            update={"data_quality": assess_data_quality(spec), "last_scraped_at": self.clock()}
        )
        rating = extract_ratings(html)

        if cached is None:
            self.page_cache.put(url, html, spec, rating)
        return self._store(job, spec, rating)

    async def _resolve_source(self, job: ScrapeJob, pacing: _JobPacing) -> str:
        await pacing.before_fetch()
        candidates = await self.search_service.search(
            job.title, job.year, query=job.search_query
        )
        if not candidates:
            raise NoMatchError(NO_RESULTS_MESSAGE)
        best = select_best_match(candidates, job.title, job.year)
        logger.info("Job %s matched %s (%s) at %s", job.id, best.title, best.year, best.url)
        return best.url

    def _store(self, job: ScrapeJob, spec: TechnicalSpecCreate, rating: RatingCreate) -> int:
        """Write spec, ratings and collection link in one transaction."""
        stored = self.spec_repo.upsert_spec(spec, commit=False)
        if not rating.is_empty():
            self.rating_repo.upsert_rating(
                job.title,
                job.year,
                rating,
                source_url=spec.source_url,
                scraped_at=spec.last_scraped_at,
                commit=False,
            )
        if job.collection_item_id is not None:
            if not self.collection_repo.attach_spec(job.collection_item_id, stored.id, commit=False):
                logger.warning("Collection item %s not found for job %s",
                               job.collection_item_id, job.id)
        self.session.commit()
        return stored.id

    def _handle_failure(self, job: ScrapeJob, exc: Exception) -> JobResult:
        now = self.clock()
        message = str(exc) or type(exc).__name__

        if job.attempts < job.max_attempts:
            retry_after = now + retry_delay(job.attempts)
            self.job_repo.schedule_retry(job.id, retry_after, message, now)
            logger.info("Job %s will retry after %s", job.id, retry_after)
            return JobResult(
                job_id=job.id,
                title=job.title,
                status="retrying",
                retry_after=retry_after,
                attempts=job.attempts,
                max_attempts=job.max_attempts,
                error=message,
            )

        self.job_repo.mark_failed(job.id, message, now)
        logger.warning("Job %s failed permanently after %d attempts", job.id, job.attempts)
        return JobResult(
            job_id=job.id,
            title=job.title,
            status="failed",
            attempts=job.attempts,
            max_attempts=job.max_attempts,
            error=message,
        )


# Convenience function for standalone use
async def run_batch(limit: Optional[int] = None) -> BatchSummary:
    """
    Process one batch with a new session.

    Returns:
        Summary of the processed jobs
    """
    db = SessionLocal()
    try:
        service = ScrapeWorkerService(db)
        return await service.process_batch(limit)
    finally:
        db.close()
