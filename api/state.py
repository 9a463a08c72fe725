"""
Thread-safe shared state for the SmartBagan API.

Holds the current optimizer configuration and the environmental data
client. The configuration is an immutable value: readers take a snapshot
and an update swaps in a new value under the lock, so a request that is
already running keeps the configuration it started with.
"""
import threading
import logging
from typing import Any, Dict, Mapping, Optional
from datetime import datetime, timezone

from src.data.environmental_client import EnvironmentalDataClient, EnvironmentalDataSource
from src.optimization.optimizer_config import OptimizerConfig
from src.scoring.zone_recommendations import ZoneRecommendationService

logger = logging.getLogger(__name__)


class EngineState:
    """
    Container for the optimizer configuration and data sources.

    Use get_engine_state() to access the shared instance.
    """

    def __init__(
        self,
        config: Optional[OptimizerConfig] = None,
        source: Optional[EnvironmentalDataSource] = None,
    ):
        self._lock = threading.RLock()
        self._config = config or OptimizerConfig()
        self._source = source
        self._zone_service: Optional[ZoneRecommendationService] = None
        self._startup_time = datetime.now(timezone.utc)

    @property
    def config(self) -> OptimizerConfig:
        """Current configuration snapshot."""
        with self._lock:
            return self._config

    def update_config(self, overrides: Mapping[str, Any]) -> OptimizerConfig:
        """Replace the configuration with one carrying *overrides*.

        Raises ConfigurationError (and leaves the current value in place)
        when an override is invalid.
        """
        with self._lock:
            self._config = self._config.with_overrides(overrides)
            logger.info(f"Optimizer config updated: {sorted(overrides)}")
            return self._config

    def reset_config(self) -> OptimizerConfig:
        with self._lock:
            self._config = OptimizerConfig()
            return self._config

    @property
    def source(self) -> EnvironmentalDataSource:
        """Environmental data source (created lazily from settings)."""
        with self._lock:
            if self._source is None:
                self._source = _build_client()
            return self._source

    def set_source(self, source: EnvironmentalDataSource) -> None:
        with self._lock:
            self._source = source
            self._zone_service = None

    @property
    def zone_service(self) -> ZoneRecommendationService:
        from api.config import settings

        with self._lock:
            if self._zone_service is None:
                self._zone_service = ZoneRecommendationService(self.source, settings.fishing_zones)
            return self._zone_service

    @property
    def uptime_seconds(self) -> float:
        return (datetime.now(timezone.utc) - self._startup_time).total_seconds()

    def health_check(self) -> Dict[str, Any]:
        with self._lock:
            source = self._source
        status = {
            "optimizer_config": "healthy",
            "environmental_data": "not_initialized" if source is None else "healthy",
            "uptime_seconds": self.uptime_seconds,
        }
        if isinstance(source, EnvironmentalDataClient):
            status["environmental_mode"] = "mock" if source.mock_mode else "live"
        return status


def _build_client() -> EnvironmentalDataClient:
    from api.config import settings

    logger.info(
        f"Environmental data client initialized (mock_mode={settings.environmental_mock_mode})"
    )
    return EnvironmentalDataClient(
        mock_mode=settings.environmental_mock_mode,
        erddap_url=settings.nasa_base_url,
        marine_url=settings.marine_api_url,
        openweather_url=settings.openweather_url,
        openweather_api_key=settings.openweather_api_key,
        timeout=settings.provider_timeout_seconds,
        retries=settings.provider_retries,
    )


_state: Optional[EngineState] = None
_state_lock = threading.Lock()


def get_engine_state() -> EngineState:
    """Get the shared engine state, creating it on first use."""
    global _state
    if _state is None:
        with _state_lock:
            if _state is None:
                _state = EngineState()
    return _state


def reset_engine_state(state: Optional[EngineState] = None) -> EngineState:
    """Replace the shared engine state (used by tests and the CLI)."""
    global _state
    with _state_lock:
        _state = state or EngineState()
    return _state
