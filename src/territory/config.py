"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="TERRITORY_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Territory Engine API"
    api_prefix: str = "/api"
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://localhost:3001",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Footprint registry (OpenStreetMap Overpass)
    overpass_url: str = Field(
        default="https://overpass-api.de/api/interpreter",
        description="Overpass API interpreter endpoint used to look up building footprints.",
    )
    overpass_timeout_seconds: float = Field(default=30.0, gt=0.0)
    footprint_max_attempts: int = Field(default=3, ge=1)
    footprint_backoff_seconds: float = Field(default=0.8, ge=0.0)

    # Reverse geocoding (Google Maps)
    google_maps_api_key: Optional[str] = Field(
        default=None,
        description="Google Maps API key. Without it, buildings are labelled with their coordinates.",
    )
    google_geocode_url: str = Field(default="https://maps.googleapis.com/maps/api/geocode/json")
    geocode_timeout_seconds: float = Field(default=10.0, gt=0.0)
    geocode_max_attempts: int = Field(default=2, ge=1)
    geocode_backoff_seconds: float = Field(default=0.4, ge=0.0)
    geocode_max_workers: int = Field(
        default=1,
        ge=1,
        description="Concurrent reverse-geocoding requests per detection run (1 = sequential).",
    )

    # Building detection heuristics
    square_meters_per_lot: float = Field(default=400.0, gt=0.0)
    min_target_buildings: int = Field(default=3, ge=1)
    max_target_buildings: int = Field(default=25, ge=1)
    simulation_max_attempts: int = Field(default=30, ge=1)

    # Route sequencing
    route_default_max_stops: int = Field(default=50, ge=1)
    route_max_stops_ceiling: int = Field(default=100, ge=1)
    route_default_minutes_per_stop: int = Field(default=15, ge=0)

    @field_validator("google_maps_api_key", mode="before")
    @classmethod
    def _blank_key_is_none(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
