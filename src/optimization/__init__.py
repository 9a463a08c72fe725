"""Bagan relocation optimization: move economics, assignment and routing."""

from .geo import GeoPoint, distance_km
from .optimizer_config import OptimizerConfig, SafeZone, Island
from .models import (
    Bagan,
    CandidateSite,
    MoveAnalysis,
    Recommendation,
    RoutePlan,
    RouteStep,
    RouteSummary,
    OptimizationResult,
)
from .catch import CatchEstimate, estimate_catch
from .move_decision import should_move
from .assignment import plan_assignments
from .route_sequencer import RouteSequencer
from .site_scanner import CandidateSiteScanner
from .orchestrator import BaganOptimizer

__all__ = [
    "GeoPoint",
    "distance_km",
    "OptimizerConfig",
    "SafeZone",
    "Island",
    "Bagan",
    "CandidateSite",
    "MoveAnalysis",
    "Recommendation",
    "RoutePlan",
    "RouteStep",
    "RouteSummary",
    "OptimizationResult",
    "CatchEstimate",
    "estimate_catch",
    "should_move",
    "plan_assignments",
    "RouteSequencer",
    "CandidateSiteScanner",
    "BaganOptimizer",
]
