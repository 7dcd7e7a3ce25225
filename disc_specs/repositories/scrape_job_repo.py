"""
Repository for the enrichment job queue.

All SQL touching ``scraping_queue`` lives here -- services must call these
methods rather than executing queries directly.

Claiming uses a compare-and-set UPDATE conditioned on ``status='pending'``,
so a row is only ever handed to one worker even if two batch triggers
overlap. No in-process locking is needed beyond that.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional, List, Protocol
from sqlalchemy.orm import Session
from sqlalchemy import func, or_, select, update

from disc_specs.dtos.scrape_job_dto import ScrapeJobCreate
from disc_specs.entities.scrape_job import ScrapeJob
from disc_specs.repositories.base_repo import BaseRepository


class JobQueueRepository(Protocol):
    """The queue operations the worker depends on."""

    def claim_batch(self, limit: int, now: datetime) -> List[ScrapeJob]: ...

    def mark_processing(self, job_id: int, now: datetime) -> bool: ...

    def mark_completed(
        self, job_id: int, spec_id: Optional[int], now: datetime
    ) -> Optional[ScrapeJob]: ...

    def schedule_retry(
        self, job_id: int, retry_after: datetime, error_message: str, now: datetime
    ) -> Optional[ScrapeJob]: ...

    def mark_failed(
        self, job_id: int, error_message: str, now: datetime
    ) -> Optional[ScrapeJob]: ...


class ScrapeJobRepository(BaseRepository[ScrapeJob]):
    """
    SQLAlchemy implementation of :class:`JobQueueRepository`.

    Also carries the submission-side queries (duplicate detection, status
    lookups, statistics).
    """

    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=ScrapeJob)

    def create_job(
        self,
        dto: ScrapeJobCreate,
        *,
        source_url: Optional[str] = None,
        search_query: Optional[str] = None,
    ) -> ScrapeJob:
        """
        Create a new pending job.

        Args:
            dto: Validated submission
            source_url: Canonical source URL, if one was supplied
            search_query: Query the worker will search with

        Returns:
            Created ScrapeJob entity
        """
        job = ScrapeJob(
            title=dto.title,
            year=dto.year,
            source_url=source_url,
            imdb_id=dto.imdb_id,
            search_query=search_query,
            collection_item_id=dto.collection_item_id,
            requested_by=dto.requested_by,
            status="pending",
            priority=dto.priority,
            attempts=0,
            max_attempts=dto.max_attempts,
        )
        return self.create(job, commit=True)

    def find_active_job(self, title: str, year: Optional[int]) -> Optional[ScrapeJob]:
        """Return a pending or processing job for the same title/year, if any."""
        stmt = (
            select(ScrapeJob)
            .where(ScrapeJob.title == title)
            .where(ScrapeJob.year.is_(None) if year is None else ScrapeJob.year == year)
            .where(ScrapeJob.status.in_(("pending", "processing")))
            .order_by(ScrapeJob.created_at.asc())
            .limit(1)
        )
        return self.session.execute(stmt).scalars().first()

    def get_latest_for_collection_item(self, collection_item_id: int) -> Optional[ScrapeJob]:
        stmt = (
            select(ScrapeJob)
            .where(ScrapeJob.collection_item_id == collection_item_id)
            .order_by(ScrapeJob.created_at.desc(), ScrapeJob.id.desc())
            .limit(1)
        )
        return self.session.execute(stmt).scalars().first()

    def claim_batch(self, limit: int, now: datetime) -> List[ScrapeJob]:
        """
        Claim up to *limit* due jobs and move them to ``processing``.

        Due means pending with no ``retry_after`` or one already in the past.
        Order: priority descending, then oldest first.

        Returns:
            The jobs this call won, in claim order
        """
        stmt = (
            select(ScrapeJob.id)
            .where(ScrapeJob.status == "pending")
            .where(or_(ScrapeJob.retry_after.is_(None), ScrapeJob.retry_after < now))
            .order_by(
                ScrapeJob.priority.desc(),
                ScrapeJob.created_at.asc(),
                ScrapeJob.id.asc(),
            )
            .limit(limit)
        )
        candidate_ids = list(self.session.execute(stmt).scalars().all())

        claimed: List[ScrapeJob] = []
        for job_id in candidate_ids:
            if self.mark_processing(job_id, now):
                job = self.get_by_id(job_id)
                if job is not None:
                    claimed.append(job)
        return claimed

    def mark_processing(self, job_id: int, now: datetime) -> bool:
        """
        Compare-and-set a pending job into ``processing`` and count the attempt.

        Returns:
            True if this call made the transition
        """
        stmt = (
            update(ScrapeJob)
            .where(ScrapeJob.id == job_id, ScrapeJob.status == "pending")
            .values(
                status="processing",
                attempts=ScrapeJob.attempts + 1,
                started_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        self.session.commit()
        return result.rowcount == 1

    def mark_completed(
        self, job_id: int, spec_id: Optional[int], now: datetime
    ) -> Optional[ScrapeJob]:
        job = self.get_by_id(job_id)
        if job:
            job.status = "completed"
            job.technical_specs_id = spec_id
            job.error_message = None
            job.retry_after = None
            job.completed_at = now
            job.updated_at = now
            return self.update(job, commit=True)
        return None

    def schedule_retry(
        self, job_id: int, retry_after: datetime, error_message: str, now: datetime
    ) -> Optional[ScrapeJob]:
        """Put a failed attempt back in the queue, not claimable before *retry_after*."""
        job = self.get_by_id(job_id)
        if job:
            job.status = "pending"
            job.retry_after = retry_after
            job.error_message = error_message
            job.updated_at = now
            return self.update(job, commit=True)
        return None

    def mark_failed(
        self, job_id: int, error_message: str, now: datetime
    ) -> Optional[ScrapeJob]:
        """Terminal failure: the job is never claimed again."""
        job = self.get_by_id(job_id)
        if job:
            job.status = "failed"
            job.retry_after = None
            job.error_message = error_message
            job.completed_at = now
            job.updated_at = now
            return self.update(job, commit=True)
        return None

    def get_jobs_by_status(self, status: str, limit: int = 100) -> List[ScrapeJob]:
        stmt = (
            select(ScrapeJob)
            .where(ScrapeJob.status == status)
            .order_by(ScrapeJob.created_at.desc(), ScrapeJob.id.desc())
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars().all())

    def get_all_jobs(self, limit: int = 100) -> List[ScrapeJob]:
        stmt = (
            select(ScrapeJob)
            .order_by(ScrapeJob.created_at.desc(), ScrapeJob.id.desc())
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars().all())

    def count_by_status(self, since: Optional[datetime] = None) -> dict[str, int]:
        """Job counts per status, optionally only for jobs created after *since*."""
        stmt = select(ScrapeJob.status, func.count()).group_by(ScrapeJob.status)
        if since is not None:
            stmt = stmt.where(ScrapeJob.created_at >= since)
        return {status: count for status, count in self.session.execute(stmt).all()}
