"""
Environmental suitability score (0-100) for bagan fishing.

Weights:
    chlorophyll   30   plankton, proxy for baitfish aggregation
    sst           25   sea surface temperature
    moon          20   darker nights make the lamps more effective
    wave          15   sea state, safety and efficiency
    wind          10

Lower moon illumination scores higher. Missing factors are left out of both
the earned points and the maximum, so a partial bundle is renormalized.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from src.optimization.geo import round_half_up
from src.scoring.readings import ReadingBundle

FACTOR_MAX = {
    "chlorophyll": 30,
    "sst": 25,
    "moon": 20,
    "wave": 15,
    "wind": 10,
}


@dataclass(frozen=True)
class FactorScore:
    score: int
    max: int
    rating: str
    value: float
    source: str


@dataclass(frozen=True)
class SuitabilityScore:
    total: int
    breakdown: Dict[str, FactorScore] = field(default_factory=dict)
    max_score: int = 0
    actual_score: int = 0

    @property
    def degraded(self) -> bool:
        return any(f.source == "Estimated" for f in self.breakdown.values())


def score_chlorophyll(value: float) -> Tuple[int, str]:
    if value > 0.5:
        return 30, "Excellent"
    if value > 0.3:
        return 20, "Good"
    if value > 0.1:
        return 10, "Fair"
    return 0, "Poor"


def score_sst(value: float) -> Tuple[int, str]:
    if 27 <= value <= 30:
        return 25, "Optimal"
    if 25 <= value <= 32:
        return 15, "Good"
    if 23 <= value <= 34:
        return 5, "Fair"
    return 0, "Poor"


def score_moon(illumination: float) -> Tuple[int, str]:
    if illumination < 30:
        return 20, "Excellent"
    if illumination < 50:
        return 15, "Good"
    if illumination < 70:
        return 10, "Fair"
    return 5, "Poor"


def score_wave(height: float) -> Tuple[int, str]:
    if height < 1.0:
        return 15, "Calm"
    if height < 1.5:
        return 10, "Moderate"
    if height < 2.0:
        return 5, "Choppy"
    return 0, "Rough"


def score_wind(speed: float) -> Tuple[int, str]:
    if speed < 5:
        return 10, "Calm"
    if speed < 7:
        return 7, "Light"
    if speed < 10:
        return 4, "Moderate"
    return 0, "Strong"


_SCORERS = {
    "chlorophyll": score_chlorophyll,
    "sst": score_sst,
    "moon": score_moon,
    "wave": score_wave,
    "wind": score_wind,
}


def _factor_value(name: str, reading) -> float:
    if name == "moon":
        return reading.illumination
    return reading.value


def calculate_zone_score(bundle: Optional[ReadingBundle]) -> SuitabilityScore:
    """Score a bundle of readings. An empty bundle scores 0."""
    if bundle is None:
        return SuitabilityScore(total=0)

    earned = 0
    max_score = 0
    breakdown: Dict[str, FactorScore] = {}

    for name, result in bundle.results().items():
        reading = result.reading
        value = _factor_value(name, reading)
        points, rating = _SCORERS[name](value)
        factor_max = FACTOR_MAX[name]

        earned += points
        max_score += factor_max
        breakdown[name] = FactorScore(
            score=points,
            max=factor_max,
            rating=rating,
            value=value,
            source=reading.source,
        )

    total = int(round_half_up(earned / max_score * 100)) if max_score else 0
    return SuitabilityScore(
        total=total,
        breakdown=breakdown,
        max_score=max_score,
        actual_score=earned,
    )
