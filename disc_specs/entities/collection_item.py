"""
Projection of the collection table owned by the watchlist app.

Only the columns this service touches are mapped; the worker sets
``technical_specs_id`` after a successful scrape.
"""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, String

from disc_specs.entities.base import Base


class CollectionItem(Base):
    __tablename__ = "physical_media_collections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(500), nullable=True)
    year = Column(Integer, nullable=True)
    technical_specs_id = Column(
        Integer, ForeignKey("bluray_technical_specs.id"), nullable=True, index=True
    )
