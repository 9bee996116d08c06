"""Configuration management using pydantic-settings."""
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Commercial geocoding (optional - enables the Google provider)
    google_maps_api_key: Optional[str] = None
    google_geocode_url: str = "https://maps.googleapis.com/maps/api/geocode/json"

    # Free community geocoding (OpenStreetMap Nominatim)
    nominatim_base_url: str = "https://nominatim.openstreetmap.org"
    geocoder_user_agent: str = "plantswap-geocoder/0.1"

    # Per-provider network timeout
    geocoding_timeout_seconds: float = 5.0

    # Pause between provider lookups when re-geocoding many trades
    geocode_batch_delay_seconds: float = 0.1

    # Zip -> coordinate cache lifetime (24 hours)
    geocode_cache_ttl_ms: int = 24 * 60 * 60 * 1000

    # API response cache
    cache_enabled: bool = True
    cache_sweep_interval_seconds: float = 300.0

    # Database
    database_url: str = "sqlite:///./plantswap.db"

    # Nearby trade search defaults
    default_search_radius_miles: float = 50.0
    default_search_limit: int = 20

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
