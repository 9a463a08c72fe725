"""
Move/stay economics for a single bagan and candidate site.

Towing cost is fuel only: distance x consumption x price. The benefit is
the extra expected catch at the new site valued at the catch price. A move
is worth it when the net profit reaches the configured threshold.
"""

import logging
import math

from src.optimization.catch import estimate_catch
from src.optimization.errors import ComputationError
from src.optimization.geo import distance_km, travel_time_minutes
from src.optimization.models import Bagan, CandidateSite, MoveAnalysis
from src.optimization.optimizer_config import OptimizerConfig

logger = logging.getLogger(__name__)


def fuel_cost(distance: float, config: OptimizerConfig) -> float:
    """Fuel cost (Rp) of towing over *distance* km."""
    return distance * config.fuel_consumption_per_km * config.fuel_price_per_liter


def should_move(bagan: Bagan, site: CandidateSite, config: OptimizerConfig) -> MoveAnalysis:
    """Evaluate towing *bagan* to *site*. Pure and deterministic."""
    distance = distance_km(bagan.position, site.position)
    if not math.isfinite(distance):
        raise ComputationError("Non-finite tow distance", platform_id=bagan.id, site_id=site.id)

    if distance > config.max_tow_distance_km:
        return MoveAnalysis(
            current_score=bagan.score,
            target_score=site.score,
            distance_km=distance,
            worth_it=False,
            reason=f"Too far ({distance:.1f} km > {config.max_tow_distance_km:g} km max)",
        )

    tow_time = travel_time_minutes(distance, config.tow_speed_knots)
    cost = fuel_cost(distance, config)

    current_catch = estimate_catch(bagan.score)
    target_catch = estimate_catch(site.score)
    extra_catch = target_catch.avg - current_catch.avg

    extra_revenue = extra_catch * config.catch_price_per_kg
    net_profit = extra_revenue - cost
    roi = net_profit / cost * 100 if cost > 0 else 0.0

    worth_it = net_profit >= config.min_profit_threshold
    logger.debug(
        f"{bagan.id} -> {site.id}: {distance:.2f} km, net {net_profit:.0f} Rp, "
        f"worth_it={worth_it}"
    )

    return MoveAnalysis(
        current_score=bagan.score,
        target_score=site.score,
        distance_km=distance,
        worth_it=worth_it,
        reason=None if worth_it else "Not profitable enough",
        tow_time_min=tow_time,
        setup_time_min=config.setup_time_minutes,
        total_time_min=tow_time + config.setup_time_minutes,
        fuel_cost=cost,
        current_catch=current_catch,
        target_catch=target_catch,
        extra_catch_kg=extra_catch,
        extra_revenue=extra_revenue,
        net_profit=net_profit,
        roi_percent=roi,
    )
