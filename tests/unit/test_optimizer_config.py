"""Tests for the immutable optimizer configuration."""

import dataclasses

import pytest

from src.optimization.errors import ConfigurationError, ValidationError
from src.optimization.geo import GeoPoint
from src.optimization.optimizer_config import Island, OptimizerConfig, SafeZone


class TestDefaults:
    def test_economics(self, config):
        assert config.fuel_price_per_liter == 10000
        assert config.fuel_consumption_per_km == 4
        assert config.catch_price_per_kg == 35000
        assert config.min_profit_threshold == 50000

    def test_operations_and_geography(self, config):
        assert config.tow_speed_knots == 2.5
        assert config.setup_time_minutes == 20
        assert config.max_tow_distance_km == 5
        assert config.safe_zone == SafeZone(GeoPoint(-6.75, 105.52), 10.0)
        assert len(config.islands) == 3
        assert config.max_exhaustive_route_size == 8
        assert config.assignment_strategy == "greedy"

    def test_immutable(self, config):
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.fuel_price_per_liter = 1


class TestOverrides:
    def test_returns_new_value(self, config):
        updated = config.with_overrides({"fuel_price_per_liter": 12000})
        assert updated.fuel_price_per_liter == 12000
        assert config.fuel_price_per_liter == 10000
        assert updated.catch_price_per_kg == config.catch_price_per_kg

    def test_keyword_form(self, config):
        assert config.with_overrides(tow_speed_knots=3.0).tow_speed_knots == 3.0

    def test_nested_safe_zone(self, config):
        updated = config.with_overrides(
            safe_zone={"center": {"lat": -6.8, "lng": 105.6}, "radius_km": 4}
        )
        assert updated.safe_zone == SafeZone(GeoPoint(-6.8, 105.6), 4.0)

    def test_disable_safe_zone(self, config):
        assert config.with_overrides(safe_zone=None).safe_zone is None

    def test_islands(self, config):
        updated = config.with_overrides(islands=[{"name": "Pulau Deli", "lat": -6.9, "lng": 105.2}])
        assert updated.islands == (Island("Pulau Deli", GeoPoint(-6.9, 105.2)),)

    def test_unknown_option(self, config):
        with pytest.raises(ConfigurationError, match="bogus"):
            config.with_overrides(bogus=1)

    @pytest.mark.parametrize("overrides", [
        {"fuel_price_per_liter": 0},
        {"tow_speed_knots": -1},
        {"max_tow_distance_km": float("inf")},
        {"setup_time_minutes": -5},
        {"max_exhaustive_route_size": 0},
        {"max_exhaustive_route_size": 2.5},
        {"max_exhaustive_route_size": None},
        {"min_profit_threshold": None},
        {"min_profit_threshold": float("nan")},
        {"setup_time_minutes": None},
        {"assignment_strategy": "random"},
        {"safe_zone": {"center": {"lat": -6.8, "lng": 105.6}, "radius_km": 0}},
        {"safe_zone": {"radius_km": 3}},
    ])
    def test_invalid_values(self, config, overrides):
        with pytest.raises(ConfigurationError):
            config.with_overrides(overrides)

    def test_configuration_error_is_validation_error(self):
        assert issubclass(ConfigurationError, ValidationError)


def test_to_dict_round_trips_through_overrides(config):
    data = config.to_dict()
    assert data["safe_zone"] == {"center": {"lat": -6.75, "lng": 105.52}, "radius_km": 10.0}
    assert data["islands"][0] == {"name": "Pulau Badul", "lat": -6.745, "lng": 105.515}
    assert OptimizerConfig().with_overrides(data) == config
