"""Tests for the calendar moon phase."""

from datetime import date, datetime

import pytest

from src.scoring.moon import PHASE_NAMES, julian_day, moon_phase, phase_name


def test_julian_day_of_reference_new_moon():
    assert julian_day(2000, 1, 6) == 2451549.5


def test_reference_date_is_new_moon():
    moon = moon_phase("2000-01-06")
    assert moon.illumination == 0
    assert moon.phase_name == "New Moon"
    assert moon.quality == "excellent"
    assert moon.source == "Calculated"


def test_half_cycle_is_full_moon():
    """15 days after the reference: 15 / 29.53 = 0.508 -> 51%."""
    moon = moon_phase(date(2000, 1, 21))
    assert moon.illumination == 51
    assert moon.phase_name == "Full Moon"
    assert moon.quality == "good"


def test_accepts_str_date_and_datetime():
    assert moon_phase("2025-06-01") == moon_phase(date(2025, 6, 1))
    assert moon_phase(datetime(2025, 6, 1, 22, 30)) == moon_phase(date(2025, 6, 1))


def test_illumination_range_over_a_year():
    for day in range(1, 366):
        d = date.fromordinal(date(2025, 1, 1).toordinal() + day - 1)
        moon = moon_phase(d)
        assert 0 <= moon.illumination <= 99
        assert moon.phase_name in PHASE_NAMES



def test_illumination_repeats_every_two_synodic_months():
    """59 days is 0.06 short of two 29.53-day cycles, well inside rounding."""
    start = date(2024, 1, 1).toordinal()
    for offset in range(0, 730, 3):
        d = date.fromordinal(start + offset)
        later = date.fromordinal(start + offset + 59)
        diff = abs(moon_phase(d).illumination - moon_phase(later).illumination)
        assert min(diff, 100 - diff) <= 1, d


@pytest.mark.parametrize("illumination,name", [
    (0, "New Moon"),
    (6, "New Moon"),
    (7, "Waxing Crescent"),
    (25, "First Quarter"),
    (50, "Full Moon"),
    (75, "Last Quarter"),
    (94, "Waning Crescent"),
    (99, "Waning Crescent"),
])
def test_phase_name_bands(illumination, name):
    assert phase_name(illumination) == name


def test_quality_bands():
    qualities = {moon_phase(date(2000, 1, 6 + d)).quality for d in range(30)}
    assert qualities == {"excellent", "good", "poor"}


def test_invalid_date_raises():
    with pytest.raises(ValueError):
        moon_phase("not-a-date")
