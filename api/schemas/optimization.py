"""Bagan optimization API schemas."""

import datetime as dt
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, Field, field_validator

from .common import CamelModel, CatchModel, Position


# ============================================================================
# Inputs
# ============================================================================

class BaganModel(CamelModel):
    """A bagan at its current position."""
    id: str = Field(..., min_length=1, max_length=64)
    name: Optional[str] = Field(None, max_length=100)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    score: float = Field(..., ge=0, le=100, description="Current site suitability score")


class CandidateSiteModel(CamelModel):
    """A candidate relocation site supplied by the caller."""
    id: str = Field(..., min_length=1, max_length=64)
    name: Optional[str] = Field(None, max_length=100)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    score: float = Field(..., ge=0, le=100)


class SafeZoneModel(CamelModel):
    center: Position
    radius_km: float = Field(..., gt=0)


class IslandModel(CamelModel):
    name: str = Field(..., max_length=100)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class ConfigOverrides(CamelModel):
    """Any subset of optimizer options; unspecified options keep their current value."""
    fuel_price_per_liter: Optional[float] = Field(None, gt=0)
    fuel_consumption_per_km: Optional[float] = Field(None, gt=0)
    catch_price_per_kg: Optional[float] = Field(None, gt=0)
    min_profit_threshold: Optional[float] = None
    tow_speed_knots: Optional[float] = Field(None, gt=0, le=20)
    setup_time_minutes: Optional[float] = Field(None, ge=0)
    max_tow_distance_km: Optional[float] = Field(None, gt=0)
    safe_zone: Optional[SafeZoneModel] = None
    islands: Optional[List[IslandModel]] = Field(None, max_length=50)
    max_exhaustive_route_size: Optional[int] = Field(None, ge=1, le=10)
    assignment_strategy: Optional[Literal["greedy", "exclusive"]] = None

    @field_validator(
        "fuel_price_per_liter",
        "fuel_consumption_per_km",
        "catch_price_per_kg",
        "min_profit_threshold",
        "tow_speed_knots",
        "setup_time_minutes",
        "max_tow_distance_km",
        "islands",
        "max_exhaustive_route_size",
        "assignment_strategy",
    )
    @classmethod
    def reject_null(cls, v):
        # Only safeZone accepts null, meaning "no safe zone".
        if v is None:
            raise ValueError("null is only accepted for safeZone")
        return v

    def to_overrides(self) -> Dict[str, Any]:
        """Only the options the caller actually sent, keyed by config field name."""
        return {
            name: value
            for name, value in self.model_dump(exclude_unset=True).items()
            if value is not None or name == "safe_zone"
        }


class AnalyzeRequest(CamelModel):
    """Request for a full fleet optimization."""
    vessel_position: Optional[Position] = Field(
        None, validation_alias=AliasChoices("vesselPosition", "kapalPosition", "vessel_position")
    )
    bagans: List[BaganModel] = Field(
        default_factory=list,
        max_length=50,
        validation_alias=AliasChoices("bagans", "currentBagans"),
    )
    candidate_sites: Optional[List[CandidateSiteModel]] = Field(
        None,
        max_length=200,
        validation_alias=AliasChoices("candidateSites", "candidateSpots", "candidate_sites"),
    )
    scan_radius_km: Optional[float] = Field(
        None, gt=0, le=20, validation_alias=AliasChoices("scanRadiusKm", "scanRadius", "scan_radius_km")
    )
    date: Optional[dt.date] = None
    config: Optional[ConfigOverrides] = None


class QuickCheckRequest(CamelModel):
    """Move/stay check for one bagan and one site."""
    bagan: Optional[BaganModel] = None
    target_site: Optional[CandidateSiteModel] = Field(
        None, validation_alias=AliasChoices("targetSite", "targetSpot", "target_site")
    )
    config: Optional[ConfigOverrides] = None


# ============================================================================
# Outputs
# ============================================================================

class MoveAnalysisModel(CamelModel):
    current_score: float
    target_score: float
    score_delta: float
    distance_km: float
    worth_it: bool
    reason: Optional[str] = None
    tow_time_min: Optional[int] = None
    setup_time_min: Optional[int] = None
    total_time_min: Optional[int] = None
    fuel_cost: Optional[int] = None
    current_expected_catch: Optional[CatchModel] = None
    target_expected_catch: Optional[CatchModel] = None
    extra_catch_kg: Optional[float] = None
    extra_revenue: Optional[int] = None
    net_profit: Optional[int] = None
    roi_percent: Optional[float] = None


class CandidateSiteResponse(CamelModel):
    id: str
    name: str
    lat: float
    lng: float
    score: float
    estimated_catch: CatchModel
    degraded: bool = False
    breakdown: Optional[Dict[str, Dict[str, Any]]] = None


class RecommendationModel(CamelModel):
    bagan: BaganModel
    action: Literal["move", "stay"]
    target_site: Optional[CandidateSiteResponse] = None
    analysis: Optional[MoveAnalysisModel] = None
    reason: Optional[str] = None
    current_expected_catch: Optional[CatchModel] = None


class RouteStepModel(CamelModel):
    step: int
    bagan_id: str
    bagan_name: str
    action: Literal["pickup"] = "pickup"
    from_position: Position = Field(..., alias="from")
    pickup_location: Position
    target_location: Position
    distance_to_pickup: float
    distance_to_tow: float
    total_step_distance: float
    time_to_pickup: int
    time_to_tow: int
    setup_time: int
    total_step_time: int
    cumulative_distance: float
    cumulative_time: int
    target_score: float
    expected_profit: int


class RouteSummaryModel(CamelModel):
    total_bagans: int
    total_distance: float
    total_time: int
    total_fuel_cost: int
    total_expected_profit: int


class RoutePlanModel(CamelModel):
    route: List[RouteStepModel]
    summary: RouteSummaryModel
    search_method: Literal["trivial", "exhaustive", "heuristic"]
    permutations_evaluated: int


class SummaryModel(CamelModel):
    total_bagans: int
    bagans_to_move: int
    bagans_to_stay: int
    worth_moving: bool


class EstimatedTotalsModel(CamelModel):
    total_distance: float
    total_time: int
    total_fuel_cost: int
    total_expected_profit: int
    net_profit: int
    roi_percent: float


class AnalyzeResponse(CamelModel):
    timestamp: datetime
    summary: SummaryModel
    recommendations: List[RecommendationModel]
    optimized_route: Optional[RoutePlanModel] = None
    estimated_totals: Optional[EstimatedTotalsModel] = None
    candidate_sites: List[CandidateSiteResponse] = Field(default_factory=list)


class QuickCheckResponse(CamelModel):
    should_move: bool
    analysis: MoveAnalysisModel


class OptimizerConfigModel(CamelModel):
    fuel_price_per_liter: float
    fuel_consumption_per_km: float
    catch_price_per_kg: float
    min_profit_threshold: float
    tow_speed_knots: float
    setup_time_minutes: float
    max_tow_distance_km: float
    safe_zone: Optional[SafeZoneModel] = None
    islands: List[IslandModel]
    max_exhaustive_route_size: int
    assignment_strategy: Literal["greedy", "exclusive"]
