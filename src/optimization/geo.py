"""
Geodesy helpers for bagan relocation.

Great-circle distances use the Haversine formula on a sphere of radius
6371 km. No datum correction is applied; at the few-kilometre scale of a
tow the error is negligible.
"""

import math
from dataclasses import dataclass
from typing import Tuple

EARTH_RADIUS_KM = 6371.0
KM_TO_NM = 0.539957
KM_PER_DEGREE_LAT = 111.0


@dataclass(frozen=True)
class GeoPoint:
    """Immutable (lat, lng) position in degrees."""
    lat: float
    lng: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.lat, self.lng)


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points in kilometres."""
    dlat = math.radians(b.lat - a.lat)
    dlng = math.radians(b.lng - a.lng)
    h = (math.sin(dlat / 2) ** 2
         + math.cos(math.radians(a.lat)) * math.cos(math.radians(b.lat))
         * math.sin(dlng / 2) ** 2)
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def travel_time_minutes(distance: float, speed_knots: float) -> float:
    """Time to cover *distance* km at *speed_knots*, in minutes."""
    return distance * KM_TO_NM / speed_knots * 60


def degree_steps(center: GeoPoint, step_km: float) -> Tuple[float, float]:
    """Degree offsets (lat, lng) equivalent to *step_km* around *center*."""
    km_per_degree_lng = KM_PER_DEGREE_LAT * math.cos(math.radians(center.lat))
    return step_km / KM_PER_DEGREE_LAT, step_km / km_per_degree_lng


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves away from the lower neighbour (2.5 -> 3, -2.5 -> -2)."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor
