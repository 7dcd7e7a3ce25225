"""
Completeness scoring for extracted specs.
"""

from typing import Any

SCORED_FIELDS = (
    "video_codec",
    "video_resolution",
    "audio_codecs",
    "audio_channels",
    "runtime_minutes",
    "studio",
)

COMPLETE_THRESHOLD = 5
PARTIAL_THRESHOLD = 3


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (list, tuple, set, str)):
        return len(value) > 0
    return True


def quality_score(record: Any) -> int:
    """One point per scored field that is present (0-6)."""
    return sum(1 for field in SCORED_FIELDS if _present(getattr(record, field, None)))


def assess_data_quality(record: Any) -> str:
    """
    Classify how complete *record* is.

    Works on anything exposing the scored attributes (DTO or entity).

    Returns:
        "complete" for 5+ points, "partial" for 3-4, otherwise "minimal"
    """
    score = quality_score(record)
    if score >= COMPLETE_THRESHOLD:
        return "complete"
    if score >= PARTIAL_THRESHOLD:
        return "partial"
    return "minimal"


QUALITY_RANK = {"minimal": 0, "partial": 1, "complete": 2}
