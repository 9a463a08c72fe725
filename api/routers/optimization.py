"""
Bagan optimization API router.

Handles fleet analysis (assignment + route sequencing), single move
checks, and the shared optimizer configuration.

Engine results are kept at full precision; rounding for display happens
only here, when building response models.
"""

import logging
import math
from typing import Optional

from fastapi import APIRouter

from api.config import settings
from api.schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    BaganModel,
    CandidateSiteModel,
    CandidateSiteResponse,
    CatchModel,
    ConfigOverrides,
    EstimatedTotalsModel,
    MoveAnalysisModel,
    OptimizerConfigModel,
    Position,
    QuickCheckRequest,
    QuickCheckResponse,
    RecommendationModel,
    RoutePlanModel,
    RouteStepModel,
    RouteSummaryModel,
    SummaryModel,
)
from api.state import get_engine_state
from src.optimization import (
    Bagan,
    BaganOptimizer,
    CandidateSite,
    CatchEstimate,
    GeoPoint,
    MoveAnalysis,
    OptimizationResult,
    OptimizerConfig,
    Recommendation,
    RoutePlan,
)
from src.optimization.errors import ValidationError
from src.optimization.geo import round_half_up

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Optimization"])


def _safe_round(value: Optional[float], ndigits: int = 2, fallback: float = 0.0) -> Optional[float]:
    """Round half up, replacing NaN/Inf with fallback to prevent JSON serialization errors."""
    if value is None:
        return None
    if math.isnan(value) or math.isinf(value):
        return fallback
    return round_half_up(value, ndigits)


def _whole(value: Optional[float]) -> Optional[int]:
    rounded = _safe_round(value, 0)
    return None if rounded is None else int(rounded)


# =============================================================================
# Request -> domain
# =============================================================================

def _to_point(position: Optional[Position]) -> Optional[GeoPoint]:
    if position is None:
        return None
    return GeoPoint(position.lat, position.lng)


def _to_bagan(model: BaganModel) -> Bagan:
    return Bagan(
        id=model.id,
        name=model.name or model.id,
        position=GeoPoint(model.lat, model.lng),
        score=model.score,
    )


def _to_site(model: CandidateSiteModel) -> CandidateSite:
    return CandidateSite(
        id=model.id,
        name=model.name or model.id,
        position=GeoPoint(model.lat, model.lng),
        score=model.score,
    )


def _request_config(overrides: Optional[ConfigOverrides]) -> OptimizerConfig:
    """Current shared config, with per-request overrides applied to a copy."""
    config = get_engine_state().config
    if overrides is None:
        return config
    return config.with_overrides(overrides.to_overrides())


# =============================================================================
# Domain -> response
# =============================================================================

def _catch_model(estimate: Optional[CatchEstimate]) -> Optional[CatchModel]:
    if estimate is None:
        return None
    return CatchModel(min=estimate.min, max=estimate.max, avg=estimate.avg)


def _bagan_model(bagan: Bagan) -> BaganModel:
    return BaganModel(
        id=bagan.id,
        name=bagan.name,
        lat=bagan.position.lat,
        lng=bagan.position.lng,
        score=bagan.score,
    )


def _site_model(site: CandidateSite) -> CandidateSiteResponse:
    return CandidateSiteResponse(
        id=site.id,
        name=site.name,
        lat=site.position.lat,
        lng=site.position.lng,
        score=site.score,
        estimated_catch=_catch_model(site.estimated_catch),
        degraded=site.degraded,
        breakdown=site.breakdown,
    )


def build_analysis_model(analysis: MoveAnalysis) -> MoveAnalysisModel:
    return MoveAnalysisModel(
        current_score=analysis.current_score,
        target_score=analysis.target_score,
        score_delta=_safe_round(analysis.score_delta, 1),
        distance_km=_safe_round(analysis.distance_km, 2),
        worth_it=analysis.worth_it,
        reason=analysis.reason,
        tow_time_min=_whole(analysis.tow_time_min),
        setup_time_min=_whole(analysis.setup_time_min),
        total_time_min=_whole(analysis.total_time_min),
        fuel_cost=_whole(analysis.fuel_cost),
        current_expected_catch=_catch_model(analysis.current_catch),
        target_expected_catch=_catch_model(analysis.target_catch),
        extra_catch_kg=_safe_round(analysis.extra_catch_kg, 1),
        extra_revenue=_whole(analysis.extra_revenue),
        net_profit=_whole(analysis.net_profit),
        roi_percent=_safe_round(analysis.roi_percent, 1),
    )


def _recommendation_model(rec: Recommendation) -> RecommendationModel:
    return RecommendationModel(
        bagan=_bagan_model(rec.bagan),
        action=rec.action,
        target_site=_site_model(rec.target_site) if rec.target_site else None,
        analysis=build_analysis_model(rec.analysis) if rec.analysis else None,
        reason=rec.reason,
        current_expected_catch=_catch_model(rec.current_catch),
    )


def _position(point: GeoPoint) -> Position:
    return Position(lat=point.lat, lng=point.lng)


def build_route_model(plan: RoutePlan) -> RoutePlanModel:
    steps = []
    for step in plan.steps:
        steps.append(RouteStepModel(
            step=step.step,
            bagan_id=step.bagan.id,
            bagan_name=step.bagan.name,
            from_position=_position(step.from_position),
            pickup_location=_position(step.pickup_location),
            target_location=_position(step.target_location),
            distance_to_pickup=_safe_round(step.distance_to_pickup_km, 2),
            distance_to_tow=_safe_round(step.distance_to_tow_km, 2),
            total_step_distance=_safe_round(step.step_distance_km, 2),
            time_to_pickup=_whole(step.time_to_pickup_min),
            time_to_tow=_whole(step.time_to_tow_min),
            setup_time=_whole(step.setup_time_min),
            total_step_time=_whole(step.step_time_min),
            cumulative_distance=_safe_round(step.cumulative_distance_km, 2),
            cumulative_time=_whole(step.cumulative_time_min),
            target_score=step.target_site.score,
            expected_profit=_whole(step.expected_profit),
        ))

    summary = plan.summary
    return RoutePlanModel(
        route=steps,
        summary=RouteSummaryModel(
            total_bagans=summary.total_bagans,
            total_distance=_safe_round(summary.total_distance_km, 2),
            total_time=_whole(summary.total_time_min),
            total_fuel_cost=_whole(summary.total_fuel_cost),
            total_expected_profit=_whole(summary.total_expected_profit),
        ),
        search_method=plan.search_method,
        permutations_evaluated=plan.permutations_evaluated,
    )


def build_analyze_response(result: OptimizationResult) -> AnalyzeResponse:
    totals = result.estimated_totals
    return AnalyzeResponse(
        timestamp=result.timestamp,
        summary=SummaryModel(
            total_bagans=result.summary.total_bagans,
            bagans_to_move=result.summary.bagans_to_move,
            bagans_to_stay=result.summary.bagans_to_stay,
            worth_moving=result.summary.worth_moving,
        ),
        recommendations=[_recommendation_model(r) for r in result.recommendations],
        optimized_route=build_route_model(result.route) if result.route else None,
        estimated_totals=EstimatedTotalsModel(
            total_distance=_safe_round(totals.total_distance_km, 2),
            total_time=_whole(totals.total_time_min),
            total_fuel_cost=_whole(totals.total_fuel_cost),
            total_expected_profit=_whole(totals.total_expected_profit),
            net_profit=_whole(totals.net_profit),
            roi_percent=_safe_round(totals.roi_percent, 1),
        ) if totals else None,
        candidate_sites=[_site_model(s) for s in result.candidate_sites],
    )


def build_config_model(config: OptimizerConfig) -> OptimizerConfigModel:
    return OptimizerConfigModel.model_validate(config.to_dict())


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/api/optimize/analyze", response_model=AnalyzeResponse)
async def analyze(request_body: AnalyzeRequest):
    """
    Recommend move/stay for every bagan and plan the service vessel route.

    When ``candidateSites`` is omitted, sites are found by scanning a grid
    of ``scanRadiusKm`` around the vessel and scoring each point from
    environmental data.
    """
    state = get_engine_state()
    config = _request_config(request_body.config)

    bagans = [_to_bagan(b) for b in request_body.bagans]
    sites = None
    if request_body.candidate_sites is not None:
        sites = [_to_site(s) for s in request_body.candidate_sites]

    optimizer = BaganOptimizer(
        config, source=state.source, scan_concurrency=settings.scan_max_concurrency
    )
    result = await optimizer.optimize_area(
        _to_point(request_body.vessel_position),
        bagans,
        sites,
        scan_radius_km=request_body.scan_radius_km or settings.default_scan_radius_km,
        date=request_body.date,
    )
    return build_analyze_response(result)


@router.post("/api/optimize/quick-check", response_model=QuickCheckResponse)
async def quick_check(request_body: QuickCheckRequest):
    """Decide whether one bagan should be towed to one site."""
    if request_body.bagan is None or request_body.target_site is None:
        raise ValidationError("Missing required field: bagan and targetSite")

    config = _request_config(request_body.config)
    optimizer = BaganOptimizer(config)
    analysis = optimizer.evaluate_move(
        _to_bagan(request_body.bagan), _to_site(request_body.target_site)
    )
    return QuickCheckResponse(should_move=analysis.worth_it, analysis=build_analysis_model(analysis))


@router.get("/api/optimize/config", response_model=OptimizerConfigModel)
async def get_config():
    """Current optimizer configuration."""
    return build_config_model(get_engine_state().config)


@router.put("/api/optimize/config", response_model=OptimizerConfigModel)
async def update_config(request_body: ConfigOverrides):
    """
    Update the shared optimizer configuration.

    Only the options present in the body change. Requests already running
    keep the configuration they started with.
    """
    updated = get_engine_state().update_config(request_body.to_overrides())
    return build_config_model(updated)
