"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from ask4rent.domain.geo import GeoPoint, ViewportDefaults

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    api_base_url: str = "http://localhost:8000"
    places_base_url: str = "https://nominatim.openstreetmap.org"
    places_country_codes: str = "nz"
    places_user_agent: str = "ask4rent-client"
    http_timeout_seconds: float = 15.0
    session_store_path: str = ".ask4rent/store.json"
    session_ttl_seconds: float = 300.0
    session_renew_debounce_seconds: float = 1.0
    session_sweep_interval_seconds: float = 60.0
    session_activity_write_interval_seconds: float = 1.0
    places_debounce_seconds: float = 0.3
    default_center_lat: float = -36.8485
    default_center_lng: float = 174.7633
    default_zoom: int = 12
    territorial_overview_zoom: int = 6
    commute_overview_zoom: int = 11
    zone_zoom: int = 12
    school_zoom: int = 15
    school_empty_zoom: int = 14
    property_focus_zoom: int = 14
    commute_origin_zoom: int = 13
    fallback_zone_radius_km: float = 3.0
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def viewport_defaults(settings: Settings) -> ViewportDefaults:
    """Build the viewport constants used by the search orchestrator."""
    return ViewportDefaults(
        center=GeoPoint(lat=settings.default_center_lat, lng=settings.default_center_lng),
        zoom=settings.default_zoom,
        territorial_overview_zoom=settings.territorial_overview_zoom,
        commute_overview_zoom=settings.commute_overview_zoom,
        zone_zoom=settings.zone_zoom,
        school_zoom=settings.school_zoom,
        school_empty_zoom=settings.school_empty_zoom,
        property_focus_zoom=settings.property_focus_zoom,
        commute_origin_zoom=settings.commute_origin_zoom,
        fallback_zone_radius_km=settings.fallback_zone_radius_km,
    )
