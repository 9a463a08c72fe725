"""
Expected catch from a suitability score.

A linear proxy: a 0-100 score maps to a 0.6x-0.9x kilogram range. It can be
replaced by a learned model as long as ``estimate_catch`` keeps its
signature and return type.
"""

from dataclasses import dataclass

from src.optimization.geo import round_half_up

CATCH_MIN_FACTOR = 0.6
CATCH_MAX_FACTOR = 0.9


@dataclass(frozen=True)
class CatchEstimate:
    """Expected catch range for one night, in kg."""
    min: int
    max: int
    avg: int


def estimate_catch(score: float) -> CatchEstimate:
    """Map a suitability score to an expected catch range."""
    base_min = score * CATCH_MIN_FACTOR
    base_max = score * CATCH_MAX_FACTOR
    return CatchEstimate(
        min=int(round_half_up(base_min)),
        max=int(round_half_up(base_max)),
        avg=int(round_half_up((base_min + base_max) / 2)),
    )
