"""
Entity for cached release pages.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from disc_specs.entities.base import Base, utcnow


class CachedPage(Base):
    """
    Raw HTML of a fetched release page plus the fields derived from it.

    One row per canonical URL. ``derived_specs`` / ``derived_ratings`` are
    denormalized at write time so listings can read them without parsing.
    """

    __tablename__ = "bluray_page_cache"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    source_url: Mapped[str] = mapped_column(
        String(1000), nullable=False, unique=True, index=True
    )
    html_content: Mapped[str] = mapped_column(Text, nullable=False)
    derived_specs: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    derived_ratings: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    fetched_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    last_accessed: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
