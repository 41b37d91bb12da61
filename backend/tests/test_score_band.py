import pytest

from models.score_band import (
    ScoreBand,
    band_for_weight,
    format_band,
    parse_band_name,
    weight_of,
)


def test_weights_are_fixed_and_ordered():
    assert [weight_of(b) for b in ScoreBand] == [1, 2, 3, 4, 5]
    assert ScoreBand.STRETCH.weight == 5
    assert ScoreBand.OFFTRACK.weight == 1


@pytest.mark.parametrize("band", list(ScoreBand))
def test_parse_band_name_any_casing(band):
    assert parse_band_name(band.value) is band
    assert parse_band_name(band.value.upper()) is band
    assert parse_band_name(band.label) is band
    assert parse_band_name(f"  {band.value.swapcase()} ") is band


@pytest.mark.parametrize("token", ["strict", "stretchy", "rob", "excellent", "", None, "3"])
def test_parse_band_name_rejects_other_labels(token):
    assert parse_band_name(token) is None


def test_band_for_weight():
    assert band_for_weight(3) is ScoreBand.ROBUST
    assert band_for_weight(0) is None
    assert band_for_weight(6) is None


def test_format_band():
    assert format_band(ScoreBand.ROBUST) == "Robust (3/5)"
    assert format_band(ScoreBand.COMMITMENT) == "Commitment (4/5)"
