"""
Fishing zones API router.

Lists the fixed fishing zones, ranks them by environmental suitability
for a date, and scores arbitrary points.
"""

import logging
from datetime import date as date_type
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query

from api.schemas import (
    FactorScoreModel,
    PointScoreRequest,
    PointScoreResponse,
    PredictedCatchModel,
    ZoneCoordinates,
    ZoneRecommendationModel,
    ZoneRecommendationsResponse,
    ZoneSummaryModel,
)
from api.state import get_engine_state
from src.optimization.geo import GeoPoint
from src.scoring.readings import MoonPhase, ReadingBundle, WaveHeight, WindSpeed
from src.scoring.zone_recommendations import FishingZone, ZoneRecommendation
from src.scoring.zone_score import SuitabilityScore, calculate_zone_score

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/zones", tags=["Zones"])


def _coordinates(zone: FishingZone) -> ZoneCoordinates:
    return ZoneCoordinates(latitude=zone.position.lat, longitude=zone.position.lng)


def _breakdown(score: SuitabilityScore) -> Dict[str, FactorScoreModel]:
    return {
        name: FactorScoreModel(
            score=f.score, max=f.max, rating=f.rating, value=f.value, source=f.source,
        )
        for name, f in score.breakdown.items()
    }


def serialize_readings(bundle: ReadingBundle) -> Dict[str, Dict[str, Any]]:
    """Flatten a reading bundle into JSON-ready dicts, one per factor."""
    data: Dict[str, Dict[str, Any]] = {}
    for name, result in bundle.results().items():
        reading = result.reading
        if isinstance(reading, MoonPhase):
            entry = {
                "illumination": reading.illumination,
                "phase": reading.phase_name,
                "quality": reading.quality,
                "source": reading.source,
            }
        else:
            entry = {
                "value": reading.value,
                "unit": reading.unit,
                "quality": reading.quality,
                "source": reading.source,
            }
            if isinstance(reading, WaveHeight):
                entry["direction"] = reading.direction_deg
                entry["period"] = reading.period_s
            elif isinstance(reading, WindSpeed):
                entry["direction"] = reading.direction_deg
                entry["gust"] = reading.gust
        if result.is_fallback:
            entry["error"] = result.error
        data[name] = entry
    return data


def _recommendation_model(rec: ZoneRecommendation) -> ZoneRecommendationModel:
    return ZoneRecommendationModel(
        zone_id=rec.zone.id,
        zone_name=rec.zone.name,
        coordinates=_coordinates(rec.zone),
        score=rec.score.total,
        score_breakdown=_breakdown(rec.score),
        data=serialize_readings(rec.readings),
        predicted_catch=PredictedCatchModel(
            min=rec.predicted_catch_min, max=rec.predicted_catch_max,
        ),
        recommendation=rec.label,
        degraded=rec.readings.degraded,
        timestamp=rec.timestamp,
    )


@router.get("")
async def list_zones():
    """Fixed fishing zones with their coordinates."""
    zones = [
        ZoneSummaryModel(id=z.id, name=z.name, coordinates=_coordinates(z))
        for z in get_engine_state().zone_service.list_zones()
    ]
    return {"data": [z.model_dump(by_alias=True) for z in zones], "count": len(zones)}


@router.get("/recommendations", response_model=ZoneRecommendationsResponse)
async def get_recommendations(
    date: Optional[date_type] = Query(None, description="Date to score (YYYY-MM-DD), default today"),
):
    """All zones scored for a date, best first."""
    day = date or date_type.today()
    ranked = await get_engine_state().zone_service.get_recommendations(day)
    return ZoneRecommendationsResponse(
        data=[_recommendation_model(r) for r in ranked],
        date=day,
        count=len(ranked),
    )


@router.post("/score", response_model=PointScoreResponse)
async def score_point(request_body: PointScoreRequest):
    """Suitability score for an arbitrary position."""
    day = request_body.date or date_type.today()
    point = GeoPoint(request_body.position.lat, request_body.position.lng)
    bundle = await get_engine_state().source.fetch_bundle(point, day)
    score = calculate_zone_score(bundle)
    return PointScoreResponse(
        score=score.total,
        max_score=score.max_score,
        actual_score=score.actual_score,
        breakdown=_breakdown(score),
        data=serialize_readings(bundle),
        degraded=bundle.degraded,
        errors=bundle.errors,
    )


@router.get("/{zone_id}", response_model=ZoneRecommendationModel)
async def get_zone(
    zone_id: str,
    date: Optional[date_type] = Query(None, description="Date to score (YYYY-MM-DD), default today"),
):
    """Detailed score for a single zone."""
    rec = await get_engine_state().zone_service.get_zone_detail(zone_id, date or date_type.today())
    if rec is None:
        raise HTTPException(status_code=404, detail=f"Zone {zone_id} not found")
    return _recommendation_model(rec)
