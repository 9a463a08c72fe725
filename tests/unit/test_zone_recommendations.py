"""Tests for the fixed fishing zone recommendations."""

import asyncio
from datetime import date

import pytest

from src.data.environmental_client import EnvironmentalDataClient
from src.scoring.zone_recommendations import (
    DEFAULT_ZONES,
    ZoneRecommendationService,
    recommendation_label,
)

DAY = date(2025, 6, 1)


@pytest.mark.parametrize("score,label", [
    (100, "Highly Recommended"),
    (80, "Highly Recommended"),
    (79, "Recommended"),
    (60, "Recommended"),
    (59, "Fair"),
    (40, "Fair"),
    (39, "Not Recommended"),
    (0, "Not Recommended"),
])
def test_recommendation_label(score, label):
    assert recommendation_label(score) == label


class TestZoneService:
    def test_lists_default_zones(self, static_source):
        zones = ZoneRecommendationService(static_source).list_zones()
        assert [z.id for z in zones] == ["A", "B", "C"]
        assert zones[0].position.lat == pytest.approx(-6.9456)

    def test_recommendations_sorted_best_first(self, make_source, make_bundle):
        def by_zone(point):
            # Zone C (easternmost) has the calmest water
            return make_bundle(wave=0.5 if point.lng > 105.69 else 2.5)

        ranked = asyncio.run(ZoneRecommendationService(make_source(by_zone)).get_recommendations(DAY))
        assert [r.zone.id for r in ranked][0] == "C"
        scores = [r.score.total for r in ranked]
        assert scores == sorted(scores, reverse=True)

    def test_predicted_catch_and_label(self, static_source):
        [top, *_] = asyncio.run(ZoneRecommendationService(static_source).get_recommendations(DAY))
        assert top.score.total == 100
        assert top.predicted_catch_min == 60
        assert top.predicted_catch_max == 90
        assert top.label == "Highly Recommended"

    def test_failed_zone_is_dropped(self, make_source, make_bundle):
        def flaky(point):
            if point == DEFAULT_ZONES["B"].position:
                raise RuntimeError("zone B source down")
            return make_bundle()

        ranked = asyncio.run(ZoneRecommendationService(make_source(flaky)).get_recommendations(DAY))
        assert sorted(r.zone.id for r in ranked) == ["A", "C"]

    def test_all_zones_failing(self, failing_source):
        ranked = asyncio.run(ZoneRecommendationService(failing_source).get_recommendations(DAY))
        assert ranked == []

    def test_zone_detail_case_insensitive(self, static_source):
        service = ZoneRecommendationService(static_source)
        rec = asyncio.run(service.get_zone_detail("b", DAY))
        assert rec.zone.id == "B"
        assert static_source.calls == [(DEFAULT_ZONES["B"].position, DAY)]

    def test_unknown_zone(self, static_source):
        assert asyncio.run(ZoneRecommendationService(static_source).get_zone_detail("Z", DAY)) is None

    def test_mock_client_end_to_end(self):
        service = ZoneRecommendationService(EnvironmentalDataClient(mock_mode=True))
        ranked = asyncio.run(service.get_recommendations(DAY))
        assert len(ranked) == 3
        assert all(0 <= r.score.total <= 100 for r in ranked)
        assert not any(r.readings.degraded for r in ranked)
