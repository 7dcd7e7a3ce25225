"""
Repository for the release page cache.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from disc_specs.entities.cached_page import CachedPage
from disc_specs.repositories.base_repo import BaseRepository


class CachedPageRepository(BaseRepository[CachedPage]):
    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=CachedPage)

    def get_by_url(self, source_url: str) -> Optional[CachedPage]:
        return self.find_one(source_url=source_url)

    def touch(self, page: CachedPage, now: datetime) -> CachedPage:
        """Record a cache hit."""
        page.last_accessed = now
        return self.update(page, commit=True)

    def save_page(
        self,
        source_url: str,
        html_content: str,
        *,
        derived_specs: Optional[dict] = None,
        derived_ratings: Optional[dict] = None,
        now: datetime,
    ) -> CachedPage:
        """Insert the page, or rewrite the existing row for the same URL."""
        values = {
            "source_url": source_url,
            "html_content": html_content,
            "derived_specs": derived_specs,
            "derived_ratings": derived_ratings,
            "fetched_at": now,
            "last_accessed": now,
        }
        return self.upsert(values, ("source_url",), commit=True)
