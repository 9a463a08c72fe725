"""Tests for the service vessel visiting order."""

import itertools
import threading

import pytest

from src.optimization.errors import RouteSearchCancelled
from src.optimization.geo import GeoPoint, distance_km
from src.optimization.models import ACTION_STAY, Bagan, CandidateSite, Recommendation
from src.optimization.route_sequencer import RouteSequencer, route_distance


def _fleet(n, spacing=0.004):
    """*n* score-60 bagans in a ring, each with its own score-95 site nearby."""
    bagans, sites = [], []
    for i in range(n):
        lat = -6.7500 + spacing * ((i % 3) - 1) + 0.001 * i
        lng = 105.5200 + spacing * ((i // 3) - 1) - 0.0007 * i
        bagans.append(Bagan(f"BGN-{i:03d}", f"Bagan {i}", GeoPoint(lat, lng), 60))
        sites.append(CandidateSite(f"SPOT_{i}", f"Candidate {i}", GeoPoint(lat + 0.0015, lng + 0.001), 95))
    return bagans, sites


@pytest.fixture
def three_moves(make_move):
    bagans, sites = _fleet(3, spacing=0.01)
    return [make_move(b, s) for b, s in zip(bagans, sites)]


# =============================================================================
# Optimality
# =============================================================================

class TestExhaustiveSearch:
    def test_chosen_order_beats_every_permutation(self, vessel, three_moves, config):
        plan = RouteSequencer(config).sequence(vessel, three_moves)
        chosen = [step.bagan.id for step in plan.steps]
        by_id = {m.bagan.id: m for m in three_moves}
        chosen_distance = route_distance(vessel, [by_id[i] for i in chosen])

        for perm in itertools.permutations(three_moves):
            # Recompute independently of route_distance
            total, current = 0.0, vessel
            for m in perm:
                total += distance_km(current, m.bagan.position)
                total += distance_km(m.bagan.position, m.target_site.position)
                current = m.target_site.position
            assert chosen_distance <= total + 1e-9

    def test_metadata(self, vessel, three_moves, config):
        plan = RouteSequencer(config).sequence(vessel, three_moves)
        assert plan.search_method == "exhaustive"
        assert plan.permutations_evaluated == 6
        assert [s.step for s in plan.steps] == [1, 2, 3]

    def test_each_move_visited_once(self, vessel, make_move, config):
        bagans, sites = _fleet(6)
        moves = [make_move(b, s) for b, s in zip(bagans, sites)]
        plan = RouteSequencer(config).sequence(vessel, moves)
        assert sorted(s.bagan.id for s in plan.steps) == sorted(b.id for b in bagans)
        assert plan.permutations_evaluated == 720


# =============================================================================
# Plan detail
# =============================================================================

class TestRoutePlan:
    def test_cumulative_totals(self, vessel, three_moves, config):
        plan = RouteSequencer(config).sequence(vessel, three_moves)
        last = plan.steps[-1]
        assert last.cumulative_distance_km == pytest.approx(
            sum(s.step_distance_km for s in plan.steps)
        )
        assert last.cumulative_time_min == pytest.approx(sum(s.step_time_min for s in plan.steps))
        assert plan.summary.total_distance_km == pytest.approx(last.cumulative_distance_km)
        assert plan.summary.total_time_min == pytest.approx(last.cumulative_time_min)
        assert plan.summary.total_bagans == 3

    def test_legs_chain(self, vessel, three_moves, config):
        plan = RouteSequencer(config).sequence(vessel, three_moves)
        assert plan.steps[0].from_position == vessel
        for prev, step in zip(plan.steps, plan.steps[1:]):
            assert step.from_position == prev.target_location

    def test_step_timing(self, vessel, three_moves, config):
        step = RouteSequencer(config).sequence(vessel, three_moves).steps[0]
        assert step.time_to_pickup_min == pytest.approx(
            step.distance_to_pickup_km * 0.539957 / 2.5 * 60
        )
        assert step.distance_to_tow_km == pytest.approx(
            distance_km(step.pickup_location, step.target_location)
        )
        assert step.setup_time_min == 20

    def test_fuel_and_profit_totals(self, vessel, three_moves, config):
        plan = RouteSequencer(config).sequence(vessel, three_moves)
        assert plan.summary.total_fuel_cost == pytest.approx(
            plan.summary.total_distance_km * 4 * 10000
        )
        assert plan.summary.total_expected_profit == pytest.approx(
            sum(m.analysis.net_profit for m in three_moves)
        )


# =============================================================================
# Edge cases
# =============================================================================

class TestEdgeCases:
    def test_no_moves(self, vessel, config):
        assert RouteSequencer(config).sequence(vessel, []) is None

    def test_stays_are_ignored(self, vessel, bagan_a, config):
        stay = Recommendation(bagan=bagan_a, action=ACTION_STAY, reason="No better spot found")
        assert RouteSequencer(config).sequence(vessel, [stay]) is None

    def test_single_move_is_trivial(self, vessel, bagan_a, site_near, make_move, config):
        plan = RouteSequencer(config).sequence(vessel, [make_move(bagan_a, site_near)])
        assert plan.search_method == "trivial"
        assert plan.permutations_evaluated == 0
        assert len(plan.steps) == 1
        # Vessel already alongside the bagan
        assert plan.steps[0].distance_to_pickup_km == 0.0

    def test_heuristic_above_bound(self, vessel, make_move, config):
        bagans, sites = _fleet(5)
        moves = [make_move(b, s) for b, s in zip(bagans, sites)]
        small_bound = config.with_overrides(max_exhaustive_route_size=3)
        plan = RouteSequencer(small_bound).sequence(vessel, moves)
        assert plan.search_method == "heuristic"
        assert len(plan.steps) == 5
        assert len({s.bagan.id for s in plan.steps}) == 5

        exact = RouteSequencer(config).sequence(vessel, moves)
        assert exact.search_method == "exhaustive"
        assert exact.summary.total_distance_km <= plan.summary.total_distance_km + 1e-9

    def test_cancel_before_search(self, vessel, three_moves, config):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(RouteSearchCancelled):
            RouteSequencer(config).sequence(vessel, three_moves, cancel_event=cancel)

    def test_cancel_heuristic(self, vessel, make_move, config):
        bagans, sites = _fleet(4)
        moves = [make_move(b, s) for b, s in zip(bagans, sites)]
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(RouteSearchCancelled):
            RouteSequencer(config.with_overrides(max_exhaustive_route_size=2)).sequence(
                vessel, moves, cancel_event=cancel
            )

    def test_unset_event_does_not_cancel(self, vessel, three_moves, config):
        plan = RouteSequencer(config).sequence(vessel, three_moves, cancel_event=threading.Event())
        assert plan is not None
