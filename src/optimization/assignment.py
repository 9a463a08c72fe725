"""
Per-fleet assignment of bagans to candidate sites.

Two strategies are available through ``OptimizerConfig.assignment_strategy``:

- ``greedy`` (default): each bagan independently takes its most profitable
  qualifying site. Two bagans can be sent to the same site, and total fleet
  profit is not guaranteed to be maximal.
- ``exclusive``: a one-to-one maximum-profit assignment solved with
  ``scipy.optimize.linear_sum_assignment``. A site receives at most one bagan.

A site qualifies for a bagan when the move is worth it and its net profit
is strictly above ``min_profit_threshold``.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np
from scipy.optimize import linear_sum_assignment

from src.optimization.catch import estimate_catch
from src.optimization.models import (
    ACTION_MOVE,
    ACTION_STAY,
    Bagan,
    CandidateSite,
    MoveAnalysis,
    Recommendation,
)
from src.optimization.move_decision import should_move
from src.optimization.optimizer_config import OptimizerConfig

logger = logging.getLogger(__name__)

REASON_NOT_PROFITABLE = "Not profitable enough"
REASON_NO_SPOT = "No better spot found"
REASON_SITE_TAKEN = "Site already assigned to another bagan"


def _qualifies(analysis: MoveAnalysis, config: OptimizerConfig) -> bool:
    return analysis.worth_it and analysis.net_profit > config.min_profit_threshold


def _stay(bagan: Bagan, reason: str) -> Recommendation:
    return Recommendation(
        bagan=bagan,
        action=ACTION_STAY,
        reason=reason,
        current_catch=estimate_catch(bagan.score),
    )


def _stay_reason(analyses: Sequence[MoveAnalysis]) -> str:
    # Distinguishes "reachable but unprofitable" from "nothing reachable";
    # a plain "No better spot found" for both would hide the first case.
    if any(a.in_range for a in analyses):
        return REASON_NOT_PROFITABLE
    return REASON_NO_SPOT


def plan_assignments(
    bagans: Sequence[Bagan],
    sites: Sequence[CandidateSite],
    config: OptimizerConfig,
) -> List[Recommendation]:
    """Recommend a move or stay for every bagan, in input order."""
    matrix = [[should_move(bagan, site, config) for site in sites] for bagan in bagans]

    if config.assignment_strategy == "exclusive":
        recommendations = _plan_exclusive(bagans, sites, matrix, config)
    else:
        recommendations = _plan_greedy(bagans, sites, matrix, config)

    moving = sum(1 for r in recommendations if r.is_move)
    logger.info(
        f"Assignment ({config.assignment_strategy}): {moving}/{len(bagans)} bagan(s) "
        f"worth moving across {len(sites)} candidate site(s)"
    )
    return recommendations


def _plan_greedy(
    bagans: Sequence[Bagan],
    sites: Sequence[CandidateSite],
    matrix: List[List[MoveAnalysis]],
    config: OptimizerConfig,
) -> List[Recommendation]:
    recommendations = []
    for bagan, analyses in zip(bagans, matrix):
        best_index: Optional[int] = None
        for j, analysis in enumerate(analyses):
            if not _qualifies(analysis, config):
                continue
            # Strict comparison keeps the first site on ties
            if best_index is None or analysis.net_profit > analyses[best_index].net_profit:
                best_index = j

        if best_index is None:
            recommendations.append(_stay(bagan, _stay_reason(analyses)))
        else:
            recommendations.append(Recommendation(
                bagan=bagan,
                action=ACTION_MOVE,
                target_site=sites[best_index],
                analysis=analyses[best_index],
            ))
    return recommendations


def _plan_exclusive(
    bagans: Sequence[Bagan],
    sites: Sequence[CandidateSite],
    matrix: List[List[MoveAnalysis]],
    config: OptimizerConfig,
) -> List[Recommendation]:
    if not bagans or not sites:
        return [_stay(b, _stay_reason(row)) for b, row in zip(bagans, matrix)]

    qualifying = np.array(
        [[_qualifies(a, config) for a in row] for row in matrix], dtype=bool
    )
    profit = np.zeros(qualifying.shape, dtype=float)
    for i, row in enumerate(matrix):
        for j, analysis in enumerate(row):
            if qualifying[i, j]:
                profit[i, j] = analysis.net_profit

    rows, cols = linear_sum_assignment(profit, maximize=True)
    assigned = {
        int(i): int(j) for i, j in zip(rows, cols) if qualifying[i, j]
    }

    recommendations = []
    for i, bagan in enumerate(bagans):
        j = assigned.get(i)
        if j is not None:
            recommendations.append(Recommendation(
                bagan=bagan,
                action=ACTION_MOVE,
                target_site=sites[j],
                analysis=matrix[i][j],
            ))
        elif qualifying[i].any():
            recommendations.append(_stay(bagan, REASON_SITE_TAKEN))
        else:
            recommendations.append(_stay(bagan, _stay_reason(matrix[i])))
    return recommendations
