"""
Repository for technical specs and ratings.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import select

from disc_specs.dtos.technical_spec_dto import RatingCreate, TechnicalSpecCreate
from disc_specs.entities.disc_rating import DiscRating
from disc_specs.entities.technical_spec import TechnicalSpec
from disc_specs.repositories.base_repo import BaseRepository

SPEC_KEY = ("title", "year", "disc_format")
RATING_KEY = ("title", "year")


class TechnicalSpecRepository(BaseRepository[TechnicalSpec]):
    """
    Repository for technical spec operations.

    Specs are written with upsert semantics on (title, year, disc_format):
    the last scrape wins.
    """

    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=TechnicalSpec)

    def upsert_spec(self, dto: TechnicalSpecCreate, *, commit: bool = True) -> TechnicalSpec:
        """
        Insert or overwrite the spec row for the DTO's key.

        Args:
            dto: Extracted and assessed spec
            commit: Whether to commit the transaction

        Returns:
            The stored TechnicalSpec entity
        """
        values = dto.model_dump()
        if values.get("last_scraped_at") is None:
            values.pop("last_scraped_at")
        return self.upsert(values, SPEC_KEY, commit=commit)

    def get_by_key(
        self, title: str, year: Optional[int], disc_format: str
    ) -> Optional[TechnicalSpec]:
        return self.find_one(title=title, year=year, disc_format=disc_format)

    def find_specs(
        self,
        title: str,
        year: Optional[int] = None,
        disc_format: Optional[str] = None,
    ) -> List[TechnicalSpec]:
        """All stored specs for a title, optionally narrowed by year and format."""
        stmt = select(TechnicalSpec).where(TechnicalSpec.title == title)
        if year is not None:
            stmt = stmt.where(TechnicalSpec.year == year)
        if disc_format is not None:
            stmt = stmt.where(TechnicalSpec.disc_format == disc_format)
        stmt = stmt.order_by(TechnicalSpec.last_scraped_at.desc(), TechnicalSpec.id.desc())
        return list(self.session.execute(stmt).scalars().all())


class DiscRatingRepository(BaseRepository[DiscRating]):
    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=DiscRating)

    def upsert_rating(
        self,
        title: str,
        year: Optional[int],
        dto: RatingCreate,
        *,
        source_url: Optional[str] = None,
        scraped_at: Optional[datetime] = None,
        commit: bool = True,
    ) -> DiscRating:
        values = {"title": title, "year": year, "source_url": source_url, **dto.model_dump()}
        if scraped_at is not None:
            values["last_scraped_at"] = scraped_at
        return self.upsert(values, RATING_KEY, commit=commit)

    def get_for_title(self, title: str, year: Optional[int]) -> Optional[DiscRating]:
        return self.find_one(title=title, year=year)
