"""
Value objects produced and consumed by the optimization engine.

All objects live for the duration of one optimization call and hold no
back-references. Numbers are kept unrounded; rounding happens only where
results are serialized.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from src.optimization.catch import CatchEstimate, estimate_catch
from src.optimization.errors import ValidationError
from src.optimization.geo import GeoPoint

ACTION_MOVE = "move"
ACTION_STAY = "stay"


def _check_score(kind: str, ident: str, score: float) -> None:
    if not isinstance(score, (int, float)) or not math.isfinite(score) or not 0 <= score <= 100:
        raise ValidationError(f"{kind} '{ident}' score must be within [0, 100], got {score!r}")


def _check_position(kind: str, ident: str, position: GeoPoint) -> None:
    if not isinstance(position, GeoPoint):
        raise ValidationError(f"{kind} '{ident}' has no valid position")
    if not (-90 <= position.lat <= 90 and -180 <= position.lng <= 180):
        raise ValidationError(f"{kind} '{ident}' position out of range: {position}")


@dataclass(frozen=True)
class Bagan:
    """A floating fishing platform at its current position."""
    id: str
    name: str
    position: GeoPoint
    score: float

    def __post_init__(self):
        _check_position("Bagan", self.id, self.position)
        _check_score("Bagan", self.id, self.score)


@dataclass(frozen=True)
class CandidateSite:
    """A scored location a bagan could be towed to."""
    id: str
    name: str
    position: GeoPoint
    score: float
    estimated_catch: Optional[CatchEstimate] = None
    # True when any factor behind the score came from a fallback value
    degraded: bool = False
    breakdown: Optional[Dict[str, Dict]] = None

    def __post_init__(self):
        _check_position("Candidate site", self.id, self.position)
        _check_score("Candidate site", self.id, self.score)
        if self.estimated_catch is None:
            object.__setattr__(self, "estimated_catch", estimate_catch(self.score))


@dataclass(frozen=True)
class MoveAnalysis:
    """Cost/benefit of towing one bagan to one candidate site.

    When the site is beyond the maximum tow distance only ``distance_km``,
    ``worth_it`` and ``reason`` are populated.
    """
    current_score: float
    target_score: float
    distance_km: float
    worth_it: bool
    reason: Optional[str] = None
    tow_time_min: Optional[float] = None
    setup_time_min: Optional[float] = None
    total_time_min: Optional[float] = None
    fuel_cost: Optional[float] = None
    current_catch: Optional[CatchEstimate] = None
    target_catch: Optional[CatchEstimate] = None
    extra_catch_kg: Optional[float] = None
    extra_revenue: Optional[float] = None
    net_profit: Optional[float] = None
    roi_percent: Optional[float] = None

    @property
    def in_range(self) -> bool:
        return self.net_profit is not None

    @property
    def score_delta(self) -> float:
        return self.target_score - self.current_score


@dataclass(frozen=True)
class Recommendation:
    """Move or stay decision for one bagan."""
    bagan: Bagan
    action: str
    target_site: Optional[CandidateSite] = None
    analysis: Optional[MoveAnalysis] = None
    reason: Optional[str] = None
    current_catch: Optional[CatchEstimate] = None

    @property
    def is_move(self) -> bool:
        return self.action == ACTION_MOVE


@dataclass(frozen=True)
class RouteStep:
    """One pickup-and-tow step of the service vessel's route."""
    step: int
    bagan: Bagan
    target_site: CandidateSite
    from_position: GeoPoint
    distance_to_pickup_km: float
    distance_to_tow_km: float
    time_to_pickup_min: float
    time_to_tow_min: float
    setup_time_min: float
    cumulative_distance_km: float
    cumulative_time_min: float
    expected_profit: float

    @property
    def pickup_location(self) -> GeoPoint:
        return self.bagan.position

    @property
    def target_location(self) -> GeoPoint:
        return self.target_site.position

    @property
    def step_distance_km(self) -> float:
        return self.distance_to_pickup_km + self.distance_to_tow_km

    @property
    def step_time_min(self) -> float:
        return self.time_to_pickup_min + self.time_to_tow_min + self.setup_time_min


@dataclass(frozen=True)
class RouteSummary:
    total_bagans: int
    total_distance_km: float
    total_time_min: float
    total_fuel_cost: float
    total_expected_profit: float


@dataclass(frozen=True)
class RoutePlan:
    """Ordered visiting plan for the service vessel."""
    steps: List[RouteStep]
    summary: RouteSummary
    search_method: str  # "trivial", "exhaustive" or "heuristic"
    permutations_evaluated: int = 0


@dataclass(frozen=True)
class OptimizationSummary:
    total_bagans: int
    bagans_to_move: int
    bagans_to_stay: int

    @property
    def worth_moving(self) -> bool:
        return self.bagans_to_move > 0


@dataclass(frozen=True)
class EstimatedTotals:
    total_distance_km: float
    total_time_min: float
    total_fuel_cost: float
    total_expected_profit: float
    net_profit: float
    roi_percent: float


@dataclass(frozen=True)
class OptimizationResult:
    """Terminal artifact of one optimization call. Never cached by the engine."""
    summary: OptimizationSummary
    recommendations: List[Recommendation]
    route: Optional[RoutePlan]
    estimated_totals: Optional[EstimatedTotals]
    candidate_sites: List[CandidateSite] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.utcnow)
