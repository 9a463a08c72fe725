"""Tests for the environmental suitability score."""

import pytest

from src.scoring.zone_score import (
    FACTOR_MAX,
    calculate_zone_score,
    score_chlorophyll,
    score_moon,
    score_sst,
    score_wave,
    score_wind,
)


# =============================================================================
# Factor bands
# =============================================================================

class TestFactorBands:
    @pytest.mark.parametrize("value,points", [
        (0.51, 30), (0.5, 20), (0.31, 20), (0.3, 10), (0.11, 10), (0.1, 0), (0.0, 0),
    ])
    def test_chlorophyll(self, value, points):
        assert score_chlorophyll(value)[0] == points

    @pytest.mark.parametrize("value,points", [
        (27.0, 25), (30.0, 25), (26.9, 15), (32.0, 15), (24.0, 5), (34.0, 5), (22.9, 0), (34.1, 0),
    ])
    def test_sst(self, value, points):
        assert score_sst(value)[0] == points

    @pytest.mark.parametrize("value,points", [
        (0, 20), (29, 20), (30, 15), (49, 15), (50, 10), (69, 10), (70, 5), (99, 5),
    ])
    def test_moon_darker_is_better(self, value, points):
        assert score_moon(value)[0] == points

    @pytest.mark.parametrize("value,points", [
        (0.0, 15), (0.99, 15), (1.0, 10), (1.49, 10), (1.5, 5), (1.99, 5), (2.0, 0),
    ])
    def test_wave(self, value, points):
        assert score_wave(value)[0] == points

    @pytest.mark.parametrize("value,points", [
        (4.9, 10), (5.0, 7), (6.9, 7), (7.0, 4), (9.9, 4), (10.0, 0),
    ])
    def test_wind(self, value, points):
        assert score_wind(value)[0] == points

    def test_ratings(self):
        assert score_chlorophyll(0.6)[1] == "Excellent"
        assert score_sst(28)[1] == "Optimal"
        assert score_wave(2.5)[1] == "Rough"
        assert score_wind(12)[1] == "Strong"

    def test_weights_sum_to_100(self):
        assert sum(FACTOR_MAX.values()) == 100


# =============================================================================
# Aggregation
# =============================================================================

class TestCalculateZoneScore:
    def test_perfect_bundle(self, make_bundle):
        result = calculate_zone_score(make_bundle())
        assert result.total == 100
        assert result.max_score == 100
        assert result.actual_score == 100
        assert set(result.breakdown) == {"chlorophyll", "sst", "moon", "wave", "wind"}

    def test_mixed_bundle(self, make_bundle):
        """20 + 15 + 10 + 10 + 7 = 62 of 100."""
        bundle = make_bundle(chlorophyll=0.4, sst=26.0, illumination=55, wave=1.2, wind=6.0)
        result = calculate_zone_score(bundle)
        assert result.total == 62
        assert result.breakdown["moon"].score == 10
        assert result.breakdown["sst"].rating == "Good"

    def test_result_is_within_range(self, make_bundle):
        worst = make_bundle(chlorophyll=0.0, sst=40.0, illumination=99, wave=3.0, wind=15.0)
        assert calculate_zone_score(worst).total == 5

    def test_missing_factor_renormalizes(self, make_bundle):
        """Without wind the maximum is 90; 90/90 still scores 100."""
        result = calculate_zone_score(make_bundle(wind=None))
        assert result.max_score == 90
        assert result.total == 100
        assert "wind" not in result.breakdown

    def test_partial_renormalization_rounds_half_up(self, make_bundle):
        """Only chlorophyll (20/30) and wind (10/10): 30/40 = 75."""
        bundle = make_bundle(chlorophyll=0.4, sst=None, illumination=None, wave=None, wind=1.0)
        assert calculate_zone_score(bundle).total == 75

    def test_empty_bundle_scores_zero(self, make_bundle):
        bundle = make_bundle(chlorophyll=None, sst=None, illumination=None, wave=None, wind=None)
        result = calculate_zone_score(bundle)
        assert result.total == 0
        assert result.breakdown == {}

    def test_none_scores_zero(self):
        assert calculate_zone_score(None).total == 0

    def test_fallback_marks_degraded(self, make_bundle):
        result = calculate_zone_score(make_bundle(fallback=("sst",)))
        assert result.degraded
        assert result.breakdown["sst"].source == "Estimated"
        assert not calculate_zone_score(make_bundle()).degraded

    def test_deterministic(self, make_bundle):
        bundle = make_bundle(chlorophyll=0.2, sst=31.0)
        assert calculate_zone_score(bundle) == calculate_zone_score(bundle)
