"""
Entity for the spec-enrichment job queue.
Each row asks the worker to find and store technical specs for one title.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from disc_specs.entities.base import Base, utcnow

JOB_STATUSES = ("pending", "processing", "completed", "failed")


class ScrapeJob(Base):
    """
    One unit of enrichment work.

    Lifecycle: pending -> processing -> completed | pending (retry) | failed.
    ``attempts`` is incremented when the worker claims the job; once it
    reaches ``max_attempts`` a further failure is terminal.
    """

    __tablename__ = "scraping_queue"
    __table_args__ = (
        Index("ix_scraping_queue_priority_created", "priority", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # What to look up
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    source_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    imdb_id: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)
    search_query: Mapped[str | None] = mapped_column(String(600), nullable=True)
    collection_item_id: Mapped[int | None] = mapped_column(
        Integer, nullable=True, index=True
    )
    requested_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending", index=True
    )  # pending, processing, completed, failed
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    retry_after: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True, index=True
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    technical_specs_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    started_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True, default=utcnow
    )
