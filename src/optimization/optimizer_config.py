"""
Optimizer configuration value.

``OptimizerConfig`` is immutable: every engine entry point receives one
explicitly, and an "update" produces a new value through
``with_overrides``. Concurrent optimization calls therefore never observe
each other's configuration changes.
"""

import math
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from src.optimization.errors import ConfigurationError
from src.optimization.geo import GeoPoint

ASSIGNMENT_STRATEGIES = ("greedy", "exclusive")


@dataclass(frozen=True)
class SafeZone:
    """Circle inside which candidate sites may be generated."""
    center: GeoPoint
    radius_km: float


@dataclass(frozen=True)
class Island:
    """Island or reef known to aggregate fish.

    Carried in the configuration but not used by the suitability score.
    """
    name: str
    position: GeoPoint


DEFAULT_ISLANDS: Tuple[Island, ...] = (
    Island("Pulau Badul", GeoPoint(-6.7450, 105.5150)),
    Island("Pulau Tinjil", GeoPoint(-6.7300, 105.5000)),
    Island("Karang Bokor", GeoPoint(-6.7600, 105.5300)),
)


@dataclass(frozen=True)
class OptimizerConfig:
    """Economic, operational and geographic parameters of an optimization run."""

    # Economics (Rp)
    fuel_price_per_liter: float = 10000.0
    fuel_consumption_per_km: float = 4.0     # litres per km while towing
    catch_price_per_kg: float = 35000.0
    min_profit_threshold: float = 50000.0

    # Operations
    tow_speed_knots: float = 2.5
    setup_time_minutes: float = 20.0

    # Geography
    max_tow_distance_km: float = 5.0
    safe_zone: Optional[SafeZone] = field(
        default_factory=lambda: SafeZone(GeoPoint(-6.7500, 105.5200), 10.0)
    )
    islands: Tuple[Island, ...] = DEFAULT_ISLANDS

    # Search
    max_exhaustive_route_size: int = 8
    assignment_strategy: str = "greedy"

    def __post_init__(self):
        for name in (
            "fuel_price_per_liter",
            "fuel_consumption_per_km",
            "catch_price_per_kg",
            "tow_speed_knots",
            "max_tow_distance_km",
        ):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive number, got {value!r}")
        threshold = self.min_profit_threshold
        if not isinstance(threshold, (int, float)) or not math.isfinite(threshold):
            raise ConfigurationError(f"min_profit_threshold must be a number, got {threshold!r}")
        setup = self.setup_time_minutes
        if not isinstance(setup, (int, float)) or not math.isfinite(setup) or setup < 0:
            raise ConfigurationError(
                f"setup_time_minutes must be a non-negative number, got {setup!r}"
            )
        size = self.max_exhaustive_route_size
        if isinstance(size, bool) or not isinstance(size, int) or size < 1:
            raise ConfigurationError(
                f"max_exhaustive_route_size must be an integer of at least 1, got {size!r}"
            )
        if self.assignment_strategy not in ASSIGNMENT_STRATEGIES:
            raise ConfigurationError(
                f"Unknown assignment_strategy '{self.assignment_strategy}'. "
                f"Must be one of: {list(ASSIGNMENT_STRATEGIES)}"
            )
        if self.safe_zone is not None and self.safe_zone.radius_km <= 0:
            raise ConfigurationError("safe_zone radius_km must be positive")

    def with_overrides(self, overrides: Optional[Mapping[str, Any]] = None, **changes) -> "OptimizerConfig":
        """Return a new configuration with the given options replaced.

        Accepts plain values plus nested mappings for ``safe_zone``
        (``{"center": {"lat", "lng"}, "radius_km"}``) and ``islands``
        (``[{"name", "lat", "lng"}]``). Unknown option names are rejected.
        """
        merged: Dict[str, Any] = dict(overrides or {})
        merged.update(changes)
        known = {f.name for f in fields(self)}
        unknown = sorted(set(merged) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration option(s): {unknown}")

        if "safe_zone" in merged:
            merged["safe_zone"] = _coerce_safe_zone(merged["safe_zone"])
        if "islands" in merged:
            merged["islands"] = tuple(_coerce_island(i) for i in merged["islands"] or ())
        return replace(self, **merged)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["islands"] = [
            {"name": i.name, "lat": i.position.lat, "lng": i.position.lng}
            for i in self.islands
        ]
        return data


def _coerce_point(value: Any) -> GeoPoint:
    if isinstance(value, GeoPoint):
        return value
    try:
        return GeoPoint(float(value["lat"]), float(value["lng"]))
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid position {value!r}: {e}") from e


def _coerce_safe_zone(value: Any) -> Optional[SafeZone]:
    if value is None or isinstance(value, SafeZone):
        return value
    try:
        return SafeZone(_coerce_point(value["center"]), float(value["radius_km"]))
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid safe_zone {value!r}: {e}") from e


def _coerce_island(value: Any) -> Island:
    if isinstance(value, Island):
        return value
    try:
        position = value.get("position") or value
        return Island(str(value["name"]), _coerce_point(position))
    except (AttributeError, KeyError) as e:
        raise ConfigurationError(f"Invalid island {value!r}: {e}") from e
