"""
Environmental data client for bagan site scoring.

Fetches, per point and date:
- Chlorophyll-a (NOAA CoastWatch ERDDAP, VIIRS SNPP daily)
- Sea surface temperature (ERDDAP, JPL MUR SST)
- Wave height/direction/period (Open-Meteo Marine)
- Wind speed/direction/gust (OpenWeather current weather)
- Moon phase (computed locally)

Every fetch returns ``Live`` or ``Fallback``; nothing raises to the caller.
A failed provider yields its documented default tagged ``source="Estimated"``
together with the error text.

Supports two modes:
- mock: deterministic pseudo-random readings for offline work and tests
- live: HTTP requests with retry and a per-provider circuit breaker

Usage:
    client = EnvironmentalDataClient(mock_mode=True)
    bundle = asyncio.run(client.fetch_bundle(GeoPoint(-6.75, 105.52), "2025-06-01"))
    print(bundle.chlorophyll.reading.value)
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import date as date_type, datetime
from typing import Any, Callable, Dict, Optional, Union

import numpy as np
import requests

from src.data.resilience import CircuitBreaker, register_circuit_breaker, with_retry
from src.optimization.errors import UpstreamDataError
from src.optimization.geo import GeoPoint
from src.scoring.moon import moon_phase
from src.scoring.readings import (
    ESTIMATED_SOURCE,
    Chlorophyll,
    Fallback,
    FetchResult,
    Live,
    MoonPhase,
    ReadingBundle,
    SeaSurfaceTemperature,
    WaveHeight,
    WindSpeed,
)

logger = logging.getLogger(__name__)

DateLike = Union[str, date_type, datetime]

DEFAULT_ERDDAP_URL = "https://coastwatch.pfeg.noaa.gov/erddap"
DEFAULT_MARINE_URL = "https://marine-api.open-meteo.com/v1/marine"
DEFAULT_OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"

CHLOROPHYLL_DATASET = "nesdisCWViirsSNPPChloDailyNRT"
SST_DATASET = "jplMURSST41"

# Documented fallbacks
FALLBACK_CHLOROPHYLL = 0.35
FALLBACK_SST_C = 28.5
FALLBACK_WAVE_M = 0.8
FALLBACK_WAVE_DIR = 90.0
FALLBACK_WAVE_PERIOD_S = 5.0
FALLBACK_WIND_MS = 4.5
FALLBACK_WIND_DIR = 90.0
FALLBACK_MOON_ILLUMINATION = 25


def iso_date(value: DateLike) -> str:
    """Normalize a date-like value to YYYY-MM-DD."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date_type):
        return value.isoformat()
    return date_type.fromisoformat(str(value)[:10]).isoformat()


def chlorophyll_quality(value: float) -> str:
    return "high" if value > 0.5 else "medium" if value > 0.3 else "low"


def sst_quality(value: float) -> str:
    return "optimal" if 27 <= value <= 30 else "suboptimal"


def wave_quality(value: float) -> str:
    return "calm" if value < 1.5 else "moderate" if value < 2.5 else "rough"


def wind_quality(value: float) -> str:
    return "calm" if value < 5 else "moderate" if value < 10 else "strong"


class EnvironmentalDataSource(ABC):
    """Anything that can produce a reading bundle for a point and date."""

    @abstractmethod
    async def fetch_bundle(self, point: GeoPoint, date: DateLike) -> ReadingBundle:
        """Return all factor readings for *point* on *date*. Must not raise."""
        ...


class EnvironmentalDataClient(EnvironmentalDataSource):
    """Client for chlorophyll, SST, marine weather and wind providers."""

    def __init__(
        self,
        mock_mode: bool = True,
        erddap_url: str = DEFAULT_ERDDAP_URL,
        marine_url: str = DEFAULT_MARINE_URL,
        openweather_url: str = DEFAULT_OPENWEATHER_URL,
        openweather_api_key: Optional[str] = None,
        timeout: float = 10.0,
        retries: int = 2,
        retry_wait: float = 1.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            mock_mode: If True, return simulated readings without network access
            erddap_url: ERDDAP base URL for chlorophyll and SST
            marine_url: Open-Meteo marine endpoint
            openweather_url: OpenWeather current-weather endpoint
            openweather_api_key: OpenWeather key; wind falls back when missing
            timeout: Per-request timeout in seconds
            retries: Retries after the first failed attempt
            retry_wait: Minimum backoff between retries in seconds
            session: Optional requests session (injected in tests)
        """
        self.mock_mode = mock_mode
        self.erddap_url = erddap_url.rstrip("/")
        self.marine_url = marine_url
        self.openweather_url = openweather_url
        self.openweather_api_key = openweather_api_key
        self.timeout = timeout
        self.session = session or requests.Session()

        self._get_json = with_retry(
            max_attempts=retries + 1,
            min_wait=retry_wait,
            max_wait=max(retry_wait, 1.0) * 4,
            exceptions=(requests.RequestException,),
        )(self._get_json_once)

        self._breakers: Dict[str, CircuitBreaker] = {
            name: register_circuit_breaker(CircuitBreaker(name=name, failure_threshold=5))
            for name in ("erddap_chlorophyll", "erddap_sst", "open_meteo_marine", "openweather")
        }

    # -------------------------------------------------------------------
    # Public fetchers
    # -------------------------------------------------------------------

    async def get_chlorophyll(self, point: GeoPoint, date: DateLike) -> FetchResult:
        return await self._fetch(
            "erddap_chlorophyll", self._fetch_chlorophyll, point, date,
            fallback=Chlorophyll(
                value=FALLBACK_CHLOROPHYLL,
                quality=chlorophyll_quality(FALLBACK_CHLOROPHYLL),
                source=ESTIMATED_SOURCE,
            ),
        )

    async def get_sst(self, point: GeoPoint, date: DateLike) -> FetchResult:
        return await self._fetch(
            "erddap_sst", self._fetch_sst, point, date,
            fallback=SeaSurfaceTemperature(
                value=FALLBACK_SST_C,
                quality=sst_quality(FALLBACK_SST_C),
                source=ESTIMATED_SOURCE,
            ),
        )

    async def get_marine_weather(self, point: GeoPoint, date: DateLike = None) -> FetchResult:
        return await self._fetch(
            "open_meteo_marine", self._fetch_marine, point, date,
            fallback=WaveHeight(
                value=FALLBACK_WAVE_M,
                quality=wave_quality(FALLBACK_WAVE_M),
                source=ESTIMATED_SOURCE,
                direction_deg=FALLBACK_WAVE_DIR,
                period_s=FALLBACK_WAVE_PERIOD_S,
            ),
        )

    async def get_wind(self, point: GeoPoint, date: DateLike = None) -> FetchResult:
        return await self._fetch(
            "openweather", self._fetch_wind, point, date,
            fallback=WindSpeed(
                value=FALLBACK_WIND_MS,
                quality=wind_quality(FALLBACK_WIND_MS),
                source=ESTIMATED_SOURCE,
                direction_deg=FALLBACK_WIND_DIR,
            ),
        )

    @staticmethod
    def get_moon(date: DateLike) -> FetchResult:
        try:
            return Live(moon_phase(date))
        except (TypeError, ValueError) as e:
            logger.warning(f"Moon phase calculation failed for {date!r}: {e}")
            return Fallback(
                MoonPhase(
                    illumination=FALLBACK_MOON_ILLUMINATION,
                    phase_name="Waxing Crescent",
                    quality="excellent",
                    source=ESTIMATED_SOURCE,
                ),
                cause=str(e),
            )

    async def fetch_bundle(self, point: GeoPoint, date: DateLike) -> ReadingBundle:
        """Fetch all factors for one point concurrently."""
        chlorophyll, sst, wave, wind = await asyncio.gather(
            self.get_chlorophyll(point, date),
            self.get_sst(point, date),
            self.get_marine_weather(point, date),
            self.get_wind(point, date),
        )
        return ReadingBundle(
            chlorophyll=chlorophyll,
            sst=sst,
            wave=wave,
            wind=wind,
            moon=self.get_moon(date),
        )

    def circuit_status(self) -> dict:
        return {name: b.get_status() for name, b in self._breakers.items()}

    def close(self) -> None:
        self.session.close()

    # -------------------------------------------------------------------
    # Fetch plumbing
    # -------------------------------------------------------------------

    async def _fetch(
        self,
        provider: str,
        fetcher: Callable[[GeoPoint, Optional[str]], Any],
        point: GeoPoint,
        date: DateLike,
        fallback,
    ) -> FetchResult:
        try:
            day = iso_date(date) if date is not None else None
            if self.mock_mode:
                return Live(self._mock_reading(provider, point, day))
            reading = await asyncio.to_thread(self._breakers[provider].call, fetcher, point, day)
            return Live(reading)
        except Exception as e:
            logger.warning(
                f"{provider} fetch failed for ({point.lat:.4f}, {point.lng:.4f}), "
                f"using estimate: {e}"
            )
            return Fallback(fallback, cause=str(e))

    def _get_json_once(self, url: str, params: Optional[dict] = None) -> dict:
        response = self.session.get(url, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    @staticmethod
    def _erddap_value(provider: str, data: dict) -> float:
        rows = (data.get("table") or {}).get("rows") or []
        if not rows or rows[0][3] is None:
            raise UpstreamDataError(provider, "no data available")
        return float(rows[0][3])

    def _fetch_chlorophyll(self, point: GeoPoint, day: str) -> Chlorophyll:
        url = (f"{self.erddap_url}/griddap/{CHLOROPHYLL_DATASET}.json?"
               f"chlor_a[({day}T12:00:00Z)][({point.lat})][({point.lng})]")
        value = self._erddap_value("erddap_chlorophyll", self._get_json(url))
        return Chlorophyll(value=value, quality=chlorophyll_quality(value), source="NASA VIIRS")

    def _fetch_sst(self, point: GeoPoint, day: str) -> SeaSurfaceTemperature:
        url = (f"{self.erddap_url}/griddap/{SST_DATASET}.json?"
               f"analysed_sst[({day}T09:00:00Z)][({point.lat})][({point.lng})]")
        raw = self._erddap_value("erddap_sst", self._get_json(url))
        # Some ERDDAP mirrors serve MUR in Kelvin
        celsius = raw - 273.15 if raw > 100 else raw
        celsius = round(celsius, 2)
        return SeaSurfaceTemperature(value=celsius, quality=sst_quality(celsius), source="NOAA MUR SST")

    def _fetch_marine(self, point: GeoPoint, day: Optional[str]) -> WaveHeight:
        data = self._get_json(self.marine_url, params={
            "latitude": point.lat,
            "longitude": point.lng,
            "current": "wave_height,wave_direction,wave_period",
            "timezone": "Asia/Jakarta",
        })
        current = data.get("current")
        if not current:
            raise UpstreamDataError("open_meteo_marine", "no marine weather data available")
        height = float(current.get("wave_height") or 0.0)
        return WaveHeight(
            value=height,
            quality=wave_quality(height),
            source="Open-Meteo Marine",
            direction_deg=float(current.get("wave_direction") or 0.0),
            period_s=float(current.get("wave_period") or 0.0),
        )

    def _fetch_wind(self, point: GeoPoint, day: Optional[str]) -> WindSpeed:
        if not self.openweather_api_key:
            raise UpstreamDataError("openweather", "API key not configured")
        data = self._get_json(self.openweather_url, params={
            "lat": point.lat,
            "lon": point.lng,
            "appid": self.openweather_api_key,
            "units": "metric",
        })
        wind = data.get("wind")
        if not wind:
            raise UpstreamDataError("openweather", "no wind data available")
        speed = float(wind.get("speed") or 0.0)
        return WindSpeed(
            value=speed,
            quality=wind_quality(speed),
            source="OpenWeather",
            direction_deg=float(wind.get("deg") or 0.0),
            gust=wind.get("gust"),
        )

    # -------------------------------------------------------------------
    # Mock mode
    # -------------------------------------------------------------------

    def _mock_reading(self, provider: str, point: GeoPoint, day: Optional[str]):
        """Deterministic readings typical of the Sunda Strait."""
        ordinal = date_type.fromisoformat(day).toordinal() if day else 0
        offset = {"erddap_chlorophyll": 0, "erddap_sst": 250, "open_meteo_marine": 500, "openweather": 750}
        seed = int((point.lat * 1000 + point.lng * 100 + ordinal + offset[provider]) % 10000)
        rng = np.random.RandomState(seed)

        if provider == "erddap_chlorophyll":
            value = round(0.15 + rng.random() * 0.6, 3)
            return Chlorophyll(value=value, quality=chlorophyll_quality(value), source="mock")
        if provider == "erddap_sst":
            value = round(26.5 + rng.random() * 4.0, 2)
            return SeaSurfaceTemperature(value=value, quality=sst_quality(value), source="mock")
        if provider == "open_meteo_marine":
            value = round(0.3 + rng.random() * 1.5, 2)
            return WaveHeight(
                value=value,
                quality=wave_quality(value),
                source="mock",
                direction_deg=round(float(rng.random() * 360), 0),
                period_s=round(4.0 + value * 1.5, 1),
            )
        value = round(2.0 + rng.random() * 7.0, 1)
        return WindSpeed(
            value=value,
            quality=wind_quality(value),
            source="mock",
            direction_deg=round(float(rng.random() * 360), 0),
        )
