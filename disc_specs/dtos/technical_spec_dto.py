"""
DTOs for technical specs and user ratings.
"""

import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DiscFormat = Literal["DVD", "Blu-ray", "4K UHD", "3D Blu-ray"]
DataQuality = Literal["complete", "partial", "minimal"]

_CHANNEL_LAYOUT = re.compile(r"^\d\.\d$")


class TechnicalSpecCreate(BaseModel):
    """DTO produced by the extractor and written by the worker."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=500)
    year: int | None = Field(default=None, gt=1870, description="Release year")
    disc_format: DiscFormat = "Blu-ray"
    imdb_id: str | None = None
    source_url: str | None = None

    video_codec: str | None = None
    video_resolution: str | None = Field(
        default=None, description="Normalized to 4K UHD / 1080p / 720p when recognized"
    )
    hdr_format: list[str] | None = None
    aspect_ratio: str | None = None
    original_aspect_ratio: str | None = None

    audio_tracks: list[str] | None = None
    audio_codecs: list[str] | None = None
    audio_channels: list[str] | None = None
    audio_languages: list[str] | None = None
    subtitles: list[str] | None = None

    discs: list[str] | None = None
    disc_count: int | None = Field(default=None, ge=1)
    packaging: str | None = None
    playback_info: str | None = None
    digital_copy_included: bool | None = None
    edition_cover_url: str | None = None
    runtime_minutes: int | None = Field(default=None, gt=0)
    studio: str | None = None

    data_quality: DataQuality = "minimal"
    last_scraped_at: datetime | None = None

    @field_validator("audio_channels")
    @classmethod
    def _channel_layouts(cls, v: list[str] | None) -> list[str] | None:
        if v is not None:
            bad = [c for c in v if not _CHANNEL_LAYOUT.match(c)]
            if bad:
                raise ValueError(f"channel layouts must look like 5.1, got {bad}")
        return v


class TechnicalSpecRead(BaseModel):
    """DTO for reading stored specs."""

    id: int
    title: str
    year: int | None
    disc_format: str
    imdb_id: str | None
    source_url: str | None
    video_codec: str | None
    video_resolution: str | None
    hdr_format: list[str] | None
    aspect_ratio: str | None
    original_aspect_ratio: str | None
    audio_tracks: list[str] | None
    audio_codecs: list[str] | None
    audio_channels: list[str] | None
    audio_languages: list[str] | None
    subtitles: list[str] | None
    discs: list[str] | None
    disc_count: int | None
    packaging: str | None
    playback_info: str | None
    digital_copy_included: bool | None
    edition_cover_url: str | None
    runtime_minutes: int | None
    studio: str | None
    data_quality: str
    last_scraped_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RatingCreate(BaseModel):
    """User ratings from the release page, each on a 0-5 scale."""

    model_config = ConfigDict(extra="forbid")

    video_4k: float | None = Field(default=None, ge=0, le=5)
    video_2k: float | None = Field(default=None, ge=0, le=5)
    three_d: float | None = Field(default=None, ge=0, le=5)
    audio: float | None = Field(default=None, ge=0, le=5)
    extras: float | None = Field(default=None, ge=0, le=5)
    overall: float | None = Field(default=None, ge=0, le=5)

    def is_empty(self) -> bool:
        return all(v is None for v in self.model_dump().values())


class RatingRead(BaseModel):
    title: str
    year: int | None
    video_4k: float | None
    video_2k: float | None
    three_d: float | None
    audio: float | None
    extras: float | None
    overall: float | None
    last_scraped_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SpecLookupResponse(BaseModel):
    spec: TechnicalSpecRead
    ratings: RatingRead | None = None
    fresh: bool = Field(..., description="False once the spec is older than SPEC_MAX_AGE_DAYS")
