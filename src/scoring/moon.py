"""
Moon phase from the calendar date.

Self-contained: days since a reference new moon (JD 2451549.5, 2000-01-06)
divided by the synodic month gives the phase fraction. The "illumination"
value is that fraction as a percentage, so it runs 0-99 across the cycle
rather than peaking at full moon.
"""

import math
from datetime import date as date_type, datetime
from typing import Union

from src.optimization.geo import round_half_up
from src.scoring.readings import MoonPhase

REFERENCE_NEW_MOON_JD = 2451549.5
SYNODIC_MONTH_DAYS = 29.53

PHASE_NAMES = (
    "New Moon",
    "Waxing Crescent",
    "First Quarter",
    "Waxing Gibbous",
    "Full Moon",
    "Waning Gibbous",
    "Last Quarter",
    "Waning Crescent",
)


def julian_day(year: int, month: int, day: int) -> float:
    """Julian Day at 0h UT for a Gregorian date (valid 1901-2099)."""
    return (367 * year
            - math.floor(7 * (year + math.floor((month + 9) / 12)) / 4)
            + math.floor(275 * month / 9)
            + day + 1721013.5)


def _as_date(value: Union[str, date_type, datetime]) -> date_type:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date_type):
        return value
    return date_type.fromisoformat(str(value)[:10])


def phase_name(illumination: float) -> str:
    """Name of one of 8 equal bands, with New Moon centred on 0%."""
    index = int(math.floor((illumination + 6.25) / 12.5))
    return PHASE_NAMES[min(index, len(PHASE_NAMES) - 1)]


def moon_phase(value: Union[str, date_type, datetime]) -> MoonPhase:
    """Compute the moon phase for a date ("YYYY-MM-DD", date or datetime)."""
    d = _as_date(value)
    days_since_new = julian_day(d.year, d.month, d.day) - REFERENCE_NEW_MOON_JD
    cycles = days_since_new / SYNODIC_MONTH_DAYS
    phase = cycles - math.floor(cycles)
    # A fraction just below 1.0 rounds to the next new moon
    illumination = int(round_half_up(phase * 100)) % 100

    if illumination < 30:
        quality = "excellent"
    elif illumination < 60:
        quality = "good"
    else:
        quality = "poor"

    return MoonPhase(
        illumination=illumination,
        phase_name=phase_name(illumination),
        quality=quality,
    )
