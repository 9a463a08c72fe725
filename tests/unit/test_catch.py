"""Tests for the score-to-catch proxy."""

from src.optimization.catch import estimate_catch


def test_score_89():
    """53.4 / 80.1 / 66.75 rounded half up."""
    est = estimate_catch(89)
    assert (est.min, est.max, est.avg) == (53, 80, 67)


def test_average_uses_unrounded_bounds():
    """Score 75: 45 / 67.5 / 56.25. Averaging the rounded 45 and 68 would give 57."""
    est = estimate_catch(75)
    assert (est.min, est.max, est.avg) == (45, 68, 56)


def test_zero_and_full_score():
    assert estimate_catch(0).avg == 0
    full = estimate_catch(100)
    assert (full.min, full.max, full.avg) == (60, 90, 75)


def test_monotone_in_score():
    avgs = [estimate_catch(s).avg for s in range(0, 101)]
    assert avgs == sorted(avgs)
