"""
Daily recommendations for the fixed fishing zones.

Scores every configured zone for a date, concurrently, and ranks them.
A zone whose processing fails is left out of the ranking rather than
failing the whole request.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Mapping, Optional

from src.optimization.geo import GeoPoint, round_half_up
from src.scoring.readings import ReadingBundle
from src.scoring.zone_score import SuitabilityScore, calculate_zone_score

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FishingZone:
    id: str
    name: str
    position: GeoPoint


DEFAULT_ZONES: Dict[str, FishingZone] = {
    "A": FishingZone("A", "Zona A", GeoPoint(-6.9456, 105.6234)),
    "B": FishingZone("B", "Zona B", GeoPoint(-6.9123, 105.6789)),
    "C": FishingZone("C", "Zona C", GeoPoint(-6.8900, 105.7000)),
}


@dataclass(frozen=True)
class ZoneRecommendation:
    zone: FishingZone
    score: SuitabilityScore
    readings: ReadingBundle
    predicted_catch_min: int
    predicted_catch_max: int
    label: str
    timestamp: datetime


def recommendation_label(score: float) -> str:
    if score >= 80:
        return "Highly Recommended"
    if score >= 60:
        return "Recommended"
    if score >= 40:
        return "Fair"
    return "Not Recommended"


class ZoneRecommendationService:
    """Ranks fixed fishing zones by environmental suitability."""

    def __init__(self, source, zones: Optional[Mapping[str, FishingZone]] = None):
        """
        Args:
            source: EnvironmentalDataSource used for readings.
            zones: Zones keyed by upper-case id (defaults to zones A-C).
        """
        self.source = source
        self.zones = dict(zones or DEFAULT_ZONES)

    def list_zones(self) -> List[FishingZone]:
        return list(self.zones.values())

    async def _score_zone(self, zone: FishingZone, date) -> ZoneRecommendation:
        bundle = await self.source.fetch_bundle(zone.position, date)
        score = calculate_zone_score(bundle)
        return ZoneRecommendation(
            zone=zone,
            score=score,
            readings=bundle,
            predicted_catch_min=int(round_half_up(score.total * 0.6)),
            predicted_catch_max=int(round_half_up(score.total * 0.9)),
            label=recommendation_label(score.total),
            timestamp=datetime.utcnow(),
        )

    async def get_recommendations(self, date) -> List[ZoneRecommendation]:
        """Score all zones for *date*, best first."""
        zones = self.list_zones()
        results = await asyncio.gather(
            *(self._score_zone(zone, date) for zone in zones),
            return_exceptions=True,
        )

        ranked = []
        for zone, result in zip(zones, results):
            if isinstance(result, Exception):
                logger.error(f"Error processing {zone.name}: {result}")
                continue
            ranked.append(result)

        ranked.sort(key=lambda r: r.score.total, reverse=True)
        logger.info(f"Zone recommendations for {date}: {len(ranked)}/{len(zones)} zone(s) scored")
        return ranked

    async def get_zone_detail(self, zone_id: str, date) -> Optional[ZoneRecommendation]:
        zone = self.zones.get(zone_id.upper())
        if zone is None:
            return None
        return await self._score_zone(zone, date)
