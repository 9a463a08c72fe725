"""Environmental suitability scoring for bagan fishing sites."""

from .readings import (
    Chlorophyll,
    SeaSurfaceTemperature,
    WaveHeight,
    WindSpeed,
    MoonPhase,
    Live,
    Fallback,
    ReadingBundle,
)
from .moon import moon_phase
from .zone_score import SuitabilityScore, FactorScore, calculate_zone_score
from .zone_recommendations import FishingZone, ZoneRecommendationService

__all__ = [
    "Chlorophyll",
    "SeaSurfaceTemperature",
    "WaveHeight",
    "WindSpeed",
    "MoonPhase",
    "Live",
    "Fallback",
    "ReadingBundle",
    "moon_phase",
    "SuitabilityScore",
    "FactorScore",
    "calculate_zone_score",
    "FishingZone",
    "ZoneRecommendationService",
]
