"""Fishing zone schemas."""

import datetime as dt
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from .common import CamelModel, Position


class ZoneCoordinates(CamelModel):
    latitude: float
    longitude: float


class ZoneSummaryModel(CamelModel):
    id: str
    name: str
    coordinates: ZoneCoordinates


class FactorScoreModel(CamelModel):
    score: int
    max: int
    rating: str
    value: float
    source: str


class PredictedCatchModel(CamelModel):
    min: int
    max: int
    unit: str = "kg"


class ZoneRecommendationModel(CamelModel):
    zone_id: str
    zone_name: str
    coordinates: ZoneCoordinates
    score: int
    score_breakdown: Dict[str, FactorScoreModel]
    data: Dict[str, Dict[str, Any]]
    predicted_catch: PredictedCatchModel
    recommendation: str
    degraded: bool
    timestamp: datetime


class ZoneRecommendationsResponse(CamelModel):
    data: List[ZoneRecommendationModel]
    date: dt.date
    count: int


class PointScoreRequest(CamelModel):
    position: Position
    date: Optional[dt.date] = None


class PointScoreResponse(CamelModel):
    score: int
    max_score: int
    actual_score: int
    breakdown: Dict[str, FactorScoreModel]
    data: Dict[str, Dict[str, Any]]
    degraded: bool
    errors: Dict[str, str] = Field(default_factory=dict)
