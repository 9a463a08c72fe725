"""
Configuration management for the SmartBagan API.
Loads environment variables and provides typed configuration.
"""
from typing import Dict, List, Optional
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.optimization.geo import GeoPoint
from src.scoring.zone_recommendations import FishingZone


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ========================================================================
    # API Configuration
    # ========================================================================
    api_host: str = "0.0.0.0"
    api_port: int = 5000

    # ========================================================================
    # CORS Configuration
    # ========================================================================
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ========================================================================
    # Application Configuration
    # ========================================================================
    environment: str = "development"
    log_level: str = "info"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    # ========================================================================
    # Environmental Data Providers
    # ========================================================================
    environmental_mock_mode: bool = True
    nasa_base_url: str = "https://coastwatch.pfeg.noaa.gov/erddap"
    marine_api_url: str = "https://marine-api.open-meteo.com/v1/marine"
    openweather_url: str = "https://api.openweathermap.org/data/2.5/weather"
    openweather_api_key: Optional[str] = None
    provider_timeout_seconds: float = 10.0
    provider_retries: int = 2

    # ========================================================================
    # Scanning
    # ========================================================================
    default_scan_radius_km: float = 5.0
    scan_max_concurrency: int = 16

    # ========================================================================
    # Fixed fishing zones
    # ========================================================================
    zone_a_lat: float = -6.9456
    zone_a_lng: float = 105.6234
    zone_b_lat: float = -6.9123
    zone_b_lng: float = 105.6789
    zone_c_lat: float = -6.8900
    zone_c_lng: float = 105.7000

    @property
    def fishing_zones(self) -> Dict[str, FishingZone]:
        return {
            "A": FishingZone("A", "Zona A", GeoPoint(self.zone_a_lat, self.zone_a_lng)),
            "B": FishingZone("B", "Zona B", GeoPoint(self.zone_b_lat, self.zone_b_lng)),
            "C": FishingZone("C", "Zona C", GeoPoint(self.zone_c_lat, self.zone_c_lng)),
        }

    # ========================================================================
    # Pydantic Settings Configuration
    # ========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings
    """
    return Settings()


# Convenience exports
settings = get_settings()
