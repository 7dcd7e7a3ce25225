"""
Unit tests for data quality assessment.
"""

import pytest

from disc_specs.dtos.technical_spec_dto import TechnicalSpecCreate
from disc_specs.services.quality_service import (
    QUALITY_RANK,
    SCORED_FIELDS,
    assess_data_quality,
    quality_score,
)

FULL = {
    "video_codec": "HEVC / H.265",
    "video_resolution": "4K UHD",
    "audio_codecs": ["Dolby Atmos"],
    "audio_channels": ["7.1"],
    "runtime_minutes": 155,
    "studio": "Warner Bros.",
}


def _spec(**fields) -> TechnicalSpecCreate:
    return TechnicalSpecCreate(title="Dune", **fields)


class TestAssessDataQuality:
    def test_codec_and_runtime_is_minimal(self):
        spec = _spec(video_codec="AVC", runtime_minutes=120)
        assert quality_score(spec) == 2
        assert assess_data_quality(spec) == "minimal"

    def test_three_fields_is_partial(self):
        spec = _spec(video_codec="AVC", runtime_minutes=120, studio="Criterion")
        assert assess_data_quality(spec) == "partial"

    def test_five_fields_is_complete(self):
        fields = dict(FULL)
        fields.pop("studio")
        assert assess_data_quality(_spec(**fields)) == "complete"

    def test_empty_lists_do_not_count(self):
        spec = _spec(audio_codecs=[], audio_channels=[])
        assert quality_score(spec) == 0

    def test_unscored_fields_do_not_count(self):
        spec = _spec(subtitles=["English"], packaging="Slipcover", disc_count=2)
        assert assess_data_quality(spec) == "minimal"

    def test_adding_a_field_never_lowers_quality(self):
        fields = {}
        previous = QUALITY_RANK[assess_data_quality(_spec())]
        for name in SCORED_FIELDS:
            fields[name] = FULL[name]
            current = QUALITY_RANK[assess_data_quality(_spec(**fields))]
            assert current >= previous
            previous = current
        assert previous == QUALITY_RANK["complete"]

    @pytest.mark.parametrize("missing", SCORED_FIELDS)
    def test_any_five_is_complete(self, missing):
        fields = {k: v for k, v in FULL.items() if k != missing}
        assert assess_data_quality(_spec(**fields)) == "complete"
