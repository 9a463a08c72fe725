"""
Environmental readings and tagged fetch results.

Every provider fetch yields either ``Live(reading)`` or
``Fallback(reading, cause)``. Both expose ``.reading`` so scoring code does
not care which it got, while callers and tests can still tell degraded
results from nominal ones. Fallback readings carry ``source="Estimated"``.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

ESTIMATED_SOURCE = "Estimated"


@dataclass(frozen=True)
class Chlorophyll:
    value: float                 # mg/m³
    quality: str
    source: str
    unit: str = "mg/m³"


@dataclass(frozen=True)
class SeaSurfaceTemperature:
    value: float                 # °C
    quality: str
    source: str
    unit: str = "°C"


@dataclass(frozen=True)
class WaveHeight:
    value: float                 # m
    quality: str
    source: str
    direction_deg: float = 0.0
    period_s: float = 0.0
    unit: str = "m"


@dataclass(frozen=True)
class WindSpeed:
    value: float                 # m/s
    quality: str
    source: str
    direction_deg: float = 0.0
    gust: Optional[float] = None
    unit: str = "m/s"


@dataclass(frozen=True)
class MoonPhase:
    illumination: int            # 0-99 %
    phase_name: str
    quality: str
    source: str = "Calculated"


Reading = Union[Chlorophyll, SeaSurfaceTemperature, WaveHeight, WindSpeed, MoonPhase]


@dataclass(frozen=True)
class Live:
    """Reading fetched from its provider."""
    reading: Reading

    is_fallback = False

    @property
    def error(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class Fallback:
    """Documented default substituted after a failed fetch."""
    reading: Reading
    cause: str

    is_fallback = True

    @property
    def error(self) -> Optional[str]:
        return self.cause


FetchResult = Union[Live, Fallback]


@dataclass(frozen=True)
class ReadingBundle:
    """Readings available for one point and date. Missing factors are None."""
    chlorophyll: Optional[FetchResult] = None
    sst: Optional[FetchResult] = None
    wave: Optional[FetchResult] = None
    wind: Optional[FetchResult] = None
    moon: Optional[FetchResult] = None

    def results(self) -> dict:
        return {
            name: result
            for name, result in (
                ("chlorophyll", self.chlorophyll),
                ("sst", self.sst),
                ("moon", self.moon),
                ("wave", self.wave),
                ("wind", self.wind),
            )
            if result is not None
        }

    @property
    def degraded(self) -> bool:
        return any(r.is_fallback for r in self.results().values())

    @property
    def errors(self) -> dict:
        return {name: r.error for name, r in self.results().items() if r.is_fallback}
