"""
End-to-end bagan relocation optimization.

Pipeline: (optional) candidate scan -> per-bagan assignment -> route
sequencing -> summary and totals. Each call is independent and uses only
its own inputs, the configuration value it was given, and environmental
readings fetched during the call.
"""

import asyncio
import logging
import threading
from datetime import date as date_type
from typing import List, Optional, Sequence

from src.optimization.assignment import plan_assignments
from src.optimization.errors import ValidationError
from src.optimization.geo import GeoPoint
from src.optimization.models import (
    Bagan,
    CandidateSite,
    EstimatedTotals,
    MoveAnalysis,
    OptimizationResult,
    OptimizationSummary,
    RoutePlan,
)
from src.optimization.move_decision import should_move
from src.optimization.optimizer_config import OptimizerConfig
from src.optimization.route_sequencer import RouteSequencer
from src.optimization.site_scanner import CandidateSiteScanner

logger = logging.getLogger(__name__)

DEFAULT_SCAN_RADIUS_KM = 5.0


def validate_inputs(
    vessel_position,
    bagans,
    candidate_sites,
    require_sites: bool = True,
) -> None:
    """Reject malformed input before any computation."""
    if not isinstance(vessel_position, GeoPoint):
        raise ValidationError("Missing required field: vessel position")
    if not bagans:
        raise ValidationError("Missing required field: at least one bagan")
    if any(not isinstance(b, Bagan) for b in bagans):
        raise ValidationError("Bagan list contains malformed entries")
    ids = [b.id for b in bagans]
    if len(set(ids)) != len(ids):
        raise ValidationError(f"Duplicate bagan ids: {sorted({i for i in ids if ids.count(i) > 1})}")
    if candidate_sites is None:
        if require_sites:
            raise ValidationError("Missing required field: candidate sites")
        return
    if any(not isinstance(s, CandidateSite) for s in candidate_sites):
        raise ValidationError("Candidate site list contains malformed entries")


def estimate_totals(route: Optional[RoutePlan]) -> Optional[EstimatedTotals]:
    """Aggregate totals for a route plan (None when nothing moves)."""
    if route is None:
        return None
    summary = route.summary
    net = summary.total_expected_profit - summary.total_fuel_cost
    roi = net / summary.total_fuel_cost * 100 if summary.total_fuel_cost > 0 else 0.0
    return EstimatedTotals(
        total_distance_km=summary.total_distance_km,
        total_time_min=summary.total_time_min,
        total_fuel_cost=summary.total_fuel_cost,
        total_expected_profit=summary.total_expected_profit,
        net_profit=net,
        roi_percent=roi,
    )


class BaganOptimizer:
    """
    Runs relocation optimizations for a fleet of bagans.

    Usage:
        optimizer = BaganOptimizer(OptimizerConfig())
        result = optimizer.optimize(vessel, bagans, sites)

        # Let the optimizer scan for sites first
        optimizer = BaganOptimizer(config, source=EnvironmentalDataClient())
        result = await optimizer.optimize_area(vessel, bagans, scan_radius_km=5)
    """

    def __init__(
        self,
        config: Optional[OptimizerConfig] = None,
        source=None,
        scan_concurrency: int = 16,
    ):
        """
        Args:
            config: Configuration value for every call on this optimizer.
            source: EnvironmentalDataSource, needed only for scanning.
            scan_concurrency: Points scored at once while scanning.
        """
        self.config = config or OptimizerConfig()
        self.source = source
        self.scan_concurrency = scan_concurrency

    def evaluate_move(self, bagan: Bagan, site: CandidateSite) -> MoveAnalysis:
        return should_move(bagan, site, self.config)

    def optimize(
        self,
        vessel_position: GeoPoint,
        bagans: Sequence[Bagan],
        candidate_sites: Sequence[CandidateSite],
        cancel_event: Optional[threading.Event] = None,
    ) -> OptimizationResult:
        """Assign sites and sequence the route for a known candidate list."""
        validate_inputs(vessel_position, bagans, candidate_sites)
        logger.info(
            f"Optimization start: {len(bagans)} bagan(s), {len(candidate_sites)} candidate site(s)"
        )

        recommendations = plan_assignments(bagans, candidate_sites, self.config)
        moves = [r for r in recommendations if r.is_move]

        route = None
        if moves:
            route = RouteSequencer(self.config).sequence(vessel_position, moves, cancel_event)

        summary = OptimizationSummary(
            total_bagans=len(bagans),
            bagans_to_move=len(moves),
            bagans_to_stay=len(bagans) - len(moves),
        )
        logger.info(f"Optimization complete: {summary.bagans_to_move} bagan(s) worth moving")

        return OptimizationResult(
            summary=summary,
            recommendations=recommendations,
            route=route,
            estimated_totals=estimate_totals(route),
            candidate_sites=list(candidate_sites),
        )

    async def scan(
        self,
        vessel_position: GeoPoint,
        bagans: Sequence[Bagan],
        radius_km: float = DEFAULT_SCAN_RADIUS_KM,
        date=None,
    ) -> List[CandidateSite]:
        if self.source is None:
            raise ValidationError("Candidate sites omitted and no environmental data source configured")
        scanner = CandidateSiteScanner(
            self.source, self.config, max_concurrency=self.scan_concurrency
        )
        return await scanner.scan(vessel_position, bagans, radius_km, date or date_type.today())

    async def optimize_area(
        self,
        vessel_position: GeoPoint,
        bagans: Sequence[Bagan],
        candidate_sites: Optional[Sequence[CandidateSite]] = None,
        scan_radius_km: float = DEFAULT_SCAN_RADIUS_KM,
        date=None,
        cancel_event: Optional[threading.Event] = None,
    ) -> OptimizationResult:
        """Optimize, scanning for candidate sites when none are given."""
        validate_inputs(vessel_position, bagans, candidate_sites, require_sites=False)
        if candidate_sites is None:
            candidate_sites = await self.scan(vessel_position, bagans, scan_radius_km, date)

        # Route search is CPU-bound; keep the event loop responsive
        return await asyncio.to_thread(
            self.optimize, vessel_position, bagans, candidate_sites, cancel_event
        )
