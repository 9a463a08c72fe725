"""
Visiting order for the service vessel.

The vessel starts at its own position, sails to each bagan that should
move, tows it to its target site and continues from there. The order that
minimizes total distance (pickup legs + tow legs) is selected.

Exhaustive search is factorial in the number of moves: 8 moves is 40,320
permutations, 10 already 3.6 million. Above
``OptimizerConfig.max_exhaustive_route_size`` the sequencer falls back to a
nearest-neighbour order improved by pairwise swaps, which is fast but not
guaranteed optimal.
"""

import itertools
import logging
import threading
from typing import List, Optional, Sequence, Tuple

from src.optimization.errors import ComputationError, RouteSearchCancelled
from src.optimization.geo import GeoPoint, distance_km, travel_time_minutes
from src.optimization.models import Recommendation, RoutePlan, RouteStep, RouteSummary
from src.optimization.move_decision import fuel_cost
from src.optimization.optimizer_config import OptimizerConfig

logger = logging.getLogger(__name__)

# How often (in evaluated permutations) the cancel event is polled
_CANCEL_POLL_INTERVAL = 1024


def route_distance(start: GeoPoint, order: Sequence[Recommendation]) -> float:
    """Total pickup + tow distance (km) for visiting *order* from *start*."""
    total = 0.0
    current = start
    for item in order:
        total += distance_km(current, item.bagan.position)
        total += distance_km(item.bagan.position, item.target_site.position)
        current = item.target_site.position
    return total


class RouteSequencer:
    """Finds the minimum-distance pickup order for a set of move recommendations."""

    def __init__(self, config: OptimizerConfig):
        self.config = config

    def sequence(
        self,
        vessel_position: GeoPoint,
        moves: Sequence[Recommendation],
        cancel_event: Optional[threading.Event] = None,
    ) -> Optional[RoutePlan]:
        """
        Build the route plan for *moves*.

        Args:
            vessel_position: Starting position of the service vessel.
            moves: Recommendations with action "move". Others are ignored.
            cancel_event: Optional event; when set, the search stops with
                ``RouteSearchCancelled``.

        Returns:
            RoutePlan, or None when there is nothing to move.
        """
        moves = [m for m in moves if m.is_move]
        if not moves:
            return None

        if len(moves) == 1:
            return self._build_plan(vessel_position, moves, "trivial", 0)

        if len(moves) <= self.config.max_exhaustive_route_size:
            order, evaluated = self._exhaustive(vessel_position, moves, cancel_event)
            method = "exhaustive"
        else:
            logger.warning(
                f"{len(moves)} moves exceed exhaustive bound "
                f"{self.config.max_exhaustive_route_size}, using heuristic route search"
            )
            order, evaluated = self._heuristic(vessel_position, moves, cancel_event)
            method = "heuristic"

        logger.info(
            f"Route search ({method}) evaluated {evaluated} ordering(s) for {len(moves)} move(s)"
        )
        return self._build_plan(vessel_position, order, method, evaluated)

    # -------------------------------------------------------------------
    # Search strategies
    # -------------------------------------------------------------------

    @staticmethod
    def _check_cancel(cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise RouteSearchCancelled("Route search cancelled")

    def _exhaustive(
        self,
        start: GeoPoint,
        moves: List[Recommendation],
        cancel_event: Optional[threading.Event],
    ) -> Tuple[List[Recommendation], int]:
        best_order: Optional[Tuple[Recommendation, ...]] = None
        best_distance = float("inf")
        evaluated = 0

        for perm in itertools.permutations(moves):
            if evaluated % _CANCEL_POLL_INTERVAL == 0:
                self._check_cancel(cancel_event)
            evaluated += 1
            total = route_distance(start, perm)
            # Strict comparison keeps the first-generated order on ties
            if total < best_distance:
                best_distance = total
                best_order = perm

        if best_order is None:
            raise ComputationError(
                "No finite route found",
                platform_id=",".join(m.bagan.id for m in moves),
            )
        return list(best_order), evaluated

    def _heuristic(
        self,
        start: GeoPoint,
        moves: List[Recommendation],
        cancel_event: Optional[threading.Event],
    ) -> Tuple[List[Recommendation], int]:
        # Nearest neighbour: always pick up the closest remaining bagan
        remaining = list(moves)
        order: List[Recommendation] = []
        current = start
        while remaining:
            nearest = min(remaining, key=lambda m: distance_km(current, m.bagan.position))
            remaining.remove(nearest)
            order.append(nearest)
            current = nearest.target_site.position

        best_distance = route_distance(start, order)
        evaluated = 1
        improved = True
        while improved:
            improved = False
            for i in range(len(order) - 1):
                self._check_cancel(cancel_event)
                for j in range(i + 1, len(order)):
                    candidate = list(order)
                    candidate[i], candidate[j] = candidate[j], candidate[i]
                    total = route_distance(start, candidate)
                    evaluated += 1
                    if total < best_distance - 1e-9:
                        order, best_distance = candidate, total
                        improved = True
        return order, evaluated

    # -------------------------------------------------------------------
    # Route detail
    # -------------------------------------------------------------------

    def _build_plan(
        self,
        start: GeoPoint,
        order: Sequence[Recommendation],
        method: str,
        evaluated: int,
    ) -> RoutePlan:
        config = self.config
        steps: List[RouteStep] = []
        current = start
        cumulative_distance = 0.0
        cumulative_time = 0.0

        for index, item in enumerate(order, start=1):
            to_pickup = distance_km(current, item.bagan.position)
            to_tow = item.analysis.distance_km
            time_to_pickup = travel_time_minutes(to_pickup, config.tow_speed_knots)
            time_to_tow = item.analysis.tow_time_min

            cumulative_distance += to_pickup + to_tow
            cumulative_time += time_to_pickup + time_to_tow + config.setup_time_minutes

            steps.append(RouteStep(
                step=index,
                bagan=item.bagan,
                target_site=item.target_site,
                from_position=current,
                distance_to_pickup_km=to_pickup,
                distance_to_tow_km=to_tow,
                time_to_pickup_min=time_to_pickup,
                time_to_tow_min=time_to_tow,
                setup_time_min=config.setup_time_minutes,
                cumulative_distance_km=cumulative_distance,
                cumulative_time_min=cumulative_time,
                expected_profit=item.analysis.net_profit,
            ))
            current = item.target_site.position

        summary = RouteSummary(
            total_bagans=len(steps),
            total_distance_km=cumulative_distance,
            total_time_min=cumulative_time,
            total_fuel_cost=fuel_cost(cumulative_distance, config),
            total_expected_profit=sum(item.analysis.net_profit for item in order),
        )
        return RoutePlan(
            steps=steps,
            summary=summary,
            search_method=method,
            permutations_evaluated=evaluated,
        )
