"""
Entity for blu-ray.com user ratings of a release.
"""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, DateTime, Float, Integer, String, UniqueConstraint

from disc_specs.entities.base import Base, utcnow

RATING_FIELDS = ("video_4k", "video_2k", "three_d", "audio", "extras", "overall")


class DiscRating(Base):
    """
    User ratings scraped alongside a TechnicalSpec.

    Each rating is on a 0-5 scale and may be missing; the row is attached
    to the (title, year) it was scraped for and overwritten on re-scrape.
    """

    __tablename__ = "bluray_ratings"
    __table_args__ = (
        UniqueConstraint("title", "year", name="uq_ratings_title_year"),
        *(
            CheckConstraint(f"{name} IS NULL OR ({name} >= 0 AND {name} <= 5)", name=f"ck_{name}_range")
            for name in RATING_FIELDS
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(500), nullable=False, index=True)
    year = Column(Integer, nullable=True)

    video_4k = Column(Float, nullable=True)
    video_2k = Column(Float, nullable=True)
    three_d = Column(Float, nullable=True)
    audio = Column(Float, nullable=True)
    extras = Column(Float, nullable=True)
    overall = Column(Float, nullable=True)

    source_url = Column(String(1000), nullable=True)
    last_scraped_at = Column(DateTime, nullable=False, default=utcnow)
