"""
Read side for stored specs.
"""

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from disc_specs.core.config import settings
from disc_specs.dtos.technical_spec_dto import (
    RatingRead,
    SpecLookupResponse,
    TechnicalSpecRead,
)
from disc_specs.entities.base import utcnow
from disc_specs.entities.technical_spec import TechnicalSpec
from disc_specs.repositories.technical_spec_repo import (
    DiscRatingRepository,
    TechnicalSpecRepository,
)
from disc_specs.services.quality_service import QUALITY_RANK


def best_spec(specs: list[TechnicalSpec]) -> Optional[TechnicalSpec]:
    """Highest quality tier first, then the most recently scraped."""
    if not specs:
        return None
    return max(
        specs,
        key=lambda s: (QUALITY_RANK.get(s.data_quality, 0), s.last_scraped_at, s.id),
    )


class SpecLookupService:
    def __init__(
        self,
        session: Session,
        *,
        clock: Callable[[], datetime] = utcnow,
        max_age_days: Optional[int] = None,
    ) -> None:
        self.spec_repo = TechnicalSpecRepository(session)
        self.rating_repo = DiscRatingRepository(session)
        self.clock = clock
        self.max_age_days = settings.SPEC_MAX_AGE_DAYS if max_age_days is None else max_age_days

    def is_fresh(self, spec: TechnicalSpec) -> bool:
        return spec.last_scraped_at >= self.clock() - timedelta(days=self.max_age_days)

    def lookup(
        self,
        title: str,
        year: Optional[int] = None,
        disc_format: Optional[str] = None,
    ) -> Optional[SpecLookupResponse]:
        """
        Best stored spec for a title with its ratings.

        Returns:
            None when nothing is stored for the title
        """
        spec = best_spec(self.spec_repo.find_specs(title, year, disc_format))
        if spec is None:
            return None

        rating = self.rating_repo.get_for_title(spec.title, spec.year)
        return SpecLookupResponse(
            spec=TechnicalSpecRead.model_validate(spec),
            ratings=RatingRead.model_validate(rating) if rating else None,
            fresh=self.is_fresh(spec),
        )
