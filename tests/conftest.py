"""
Shared pytest fixtures for SmartBagan tests.

Environment variables are set before any api.* import so the cached
settings object picks up test values (mock environmental data, dev mode).
"""

import os
from datetime import date

import pytest
from fastapi.testclient import TestClient

# ---------------------------------------------------------------------------
# Section 1: Environment setup (before ANY api.* imports)
# ---------------------------------------------------------------------------
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("ENVIRONMENTAL_MOCK_MODE", "true")
os.environ.setdefault("LOG_LEVEL", "warning")

from src.data.environmental_client import EnvironmentalDataClient, EnvironmentalDataSource  # noqa: E402
from src.optimization.geo import GeoPoint  # noqa: E402
from src.optimization.models import ACTION_MOVE, Bagan, CandidateSite, Recommendation  # noqa: E402
from src.optimization.move_decision import should_move  # noqa: E402
from src.optimization.optimizer_config import OptimizerConfig  # noqa: E402
from src.scoring.readings import (  # noqa: E402
    ESTIMATED_SOURCE,
    Chlorophyll,
    Fallback,
    Live,
    MoonPhase,
    ReadingBundle,
    SeaSurfaceTemperature,
    WaveHeight,
    WindSpeed,
)

SCAN_DATE = date(2025, 6, 1)


# ---------------------------------------------------------------------------
# Section 2: Fake environmental data sources
# ---------------------------------------------------------------------------


def build_bundle(
    chlorophyll=0.6,
    sst=28.0,
    wave=0.5,
    wind=3.0,
    illumination=10,
    fallback=(),
):
    """Reading bundle from plain values; names in *fallback* are tagged Estimated.

    Passing None for a factor leaves it out of the bundle.
    """
    def tag(name, reading):
        if name in fallback:
            return Fallback(reading, cause=f"{name} provider down")
        return Live(reading)

    def source(name):
        return ESTIMATED_SOURCE if name in fallback else "test"

    return ReadingBundle(
        chlorophyll=None if chlorophyll is None else tag(
            "chlorophyll", Chlorophyll(chlorophyll, "high", source("chlorophyll"))),
        sst=None if sst is None else tag(
            "sst", SeaSurfaceTemperature(sst, "optimal", source("sst"))),
        wave=None if wave is None else tag(
            "wave", WaveHeight(wave, "calm", source("wave"))),
        wind=None if wind is None else tag(
            "wind", WindSpeed(wind, "calm", source("wind"))),
        moon=None if illumination is None else tag(
            "moon", MoonPhase(illumination, "Waxing Crescent", "excellent", source("moon"))),
    )


class StaticSource(EnvironmentalDataSource):
    """Returns the same bundle for every point and records the calls."""

    def __init__(self, bundle=None):
        self.bundle = bundle if bundle is not None else build_bundle()
        self.calls = []

    async def fetch_bundle(self, point, date):
        self.calls.append((point, date))
        return self.bundle


class FailingSource(EnvironmentalDataSource):
    """Raises for every point, like a source with a broken contract."""

    def __init__(self):
        self.calls = 0

    async def fetch_bundle(self, point, date):
        self.calls += 1
        raise RuntimeError("source unavailable")


class PointSource(EnvironmentalDataSource):
    """Bundle chosen per point by a callable."""

    def __init__(self, bundle_for_point):
        self.bundle_for_point = bundle_for_point

    async def fetch_bundle(self, point, date):
        return self.bundle_for_point(point)


@pytest.fixture
def static_source():
    """Source whose every point scores 100."""
    return StaticSource()


@pytest.fixture
def failing_source():
    return FailingSource()


# ---------------------------------------------------------------------------
# Section 3: Domain fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def config():
    return OptimizerConfig()


@pytest.fixture
def vessel():
    """Service vessel at the safe-zone centre."""
    return GeoPoint(-6.7500, 105.5200)


@pytest.fixture
def bagan_a():
    return Bagan("BGN-001", "Bagan Jaya", GeoPoint(-6.7500, 105.5200), 75)


@pytest.fixture
def site_near():
    """Score-89 site about 0.31 km from bagan_a."""
    return CandidateSite("SPOT_1", "Candidate 1", GeoPoint(-6.7480, 105.5180), 89)


@pytest.fixture
def site_far():
    """Score-95 site about 8 km from bagan_a."""
    return CandidateSite("SPOT_FAR", "Far Spot", GeoPoint(-6.8220, 105.5200), 95)


@pytest.fixture
def make_move(config):
    """Factory for a move recommendation of *bagan* to *site*."""
    def _make(bagan, site, cfg=None):
        analysis = should_move(bagan, site, cfg or config)
        return Recommendation(bagan=bagan, action=ACTION_MOVE, target_site=site, analysis=analysis)
    return _make


# ---------------------------------------------------------------------------
# Section 4: API fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def engine_state():
    """Fresh shared engine state backed by the mock-mode data client."""
    from api.state import EngineState, reset_engine_state

    state = reset_engine_state(EngineState(source=EnvironmentalDataClient(mock_mode=True)))
    yield state
    reset_engine_state()


@pytest.fixture
def client(engine_state):
    """FastAPI TestClient over a fresh engine state."""
    from api.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def fleet_payload():
    """Analyze request body: one bagan worth moving, one without a better spot."""
    return {
        "vesselPosition": {"lat": -6.7500, "lng": 105.5200},
        "bagans": [
            {"id": "BGN-001", "name": "Bagan Jaya", "lat": -6.7500, "lng": 105.5200, "score": 75},
            {"id": "BGN-002", "name": "Bagan Makmur", "lat": -6.7200, "lng": 105.5600, "score": 92},
        ],
        "candidateSites": [
            {"id": "SPOT_1", "name": "Candidate 1", "lat": -6.7480, "lng": 105.5180, "score": 89},
        ],
    }


@pytest.fixture
def make_bundle():
    return build_bundle


@pytest.fixture
def make_source():
    """Factory: a bundle gives a StaticSource, a callable gives a PointSource."""
    def _make(bundle_or_fn=None):
        if callable(bundle_or_fn):
            return PointSource(bundle_or_fn)
        return StaticSource(bundle_or_fn)
    return _make
