"""
Persistent cache of fetched release pages, keyed by canonical URL.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from disc_specs.core.config import settings
from disc_specs.core.source_urls import canonicalize_source_url
from disc_specs.dtos.technical_spec_dto import RatingCreate, TechnicalSpecCreate
from disc_specs.entities.base import utcnow
from disc_specs.entities.cached_page import CachedPage
from disc_specs.repositories.cached_page_repo import CachedPageRepository

logger = logging.getLogger(__name__)


class PageCacheService:
    """
    Lookup and write-through for release pages.

    A hit never touches the network. Entries older than ``max_age_days``
    (measured from ``fetched_at``) are treated as misses; ``None`` keeps
    entries forever.
    """

    def __init__(
        self,
        session: Session,
        *,
        clock: Callable[[], datetime] = utcnow,
        max_age_days: Optional[int] = None,
    ) -> None:
        self.repo = CachedPageRepository(session)
        self.clock = clock
        self.max_age_days = (
            settings.PAGE_CACHE_MAX_AGE_DAYS if max_age_days is None else max_age_days
        )

    def is_stale(self, page: CachedPage, now: datetime) -> bool:
        if self.max_age_days is None:
            return False
        return page.fetched_at < now - timedelta(days=self.max_age_days)

    def get(self, url: str) -> Optional[CachedPage]:
        key = canonicalize_source_url(url)
        page = self.repo.get_by_url(key)
        if page is None:
            logger.debug("Cache miss for %s", key)
            return None

        now = self.clock()
        if self.is_stale(page, now):
            logger.info("Cached page for %s is stale (fetched %s)", key, page.fetched_at)
            return None

        logger.info("Cache hit for %s", key)
        return self.repo.touch(page, now)

    def put(
        self,
        url: str,
        html: str,
        spec: Optional[TechnicalSpecCreate] = None,
        rating: Optional[RatingCreate] = None,
    ) -> CachedPage:
        key = canonicalize_source_url(url)
        return self.repo.save_page(
            key,
            html,
            derived_specs=spec.model_dump(mode="json") if spec else None,
            derived_ratings=rating.model_dump(mode="json") if rating else None,
            now=self.clock(),
        )
