"""Centralized configuration for environment variables and external APIs.

This module is the single source of truth for configuration used across the
application. Import getters from here rather than calling os.getenv directly
in multiple places.
"""

from __future__ import annotations

import os
from typing import Final

from dotenv import load_dotenv

from core.exceptions import ValidationException
from interaction.settings import ControllerSettings

# Load environment variables from .env if present
load_dotenv()


# --- Self-hosted service defaults ---
DEFAULT_NOMINATIM_BASE_URL: Final[str] = "http://nominatim:8080"
DEFAULT_NOMINATIM_USER_AGENT: Final[str] = "Wayfinder/1.0"
DEFAULT_VALHALLA_BASE_URL: Final[str] = "http://valhalla:8002"
DEFAULT_MAPILLARY_GRAPH_URL: Final[str] = "https://graph.mapillary.com"

# --- Controller defaults ---
DEFAULT_ORIGIN_LAT: Final[float] = 37.3346
DEFAULT_ORIGIN_LON: Final[float] = -122.0090
DEFAULT_REGION_METERS: Final[float] = 10000.0


def _env(name: str, default: str) -> str:
    value = os.getenv(name, "").strip()
    return value or default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        msg = f"{name} must be a number"
        raise ValidationException(msg, {"name": name, "value": raw}) from exc


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        msg = f"{name} must be an integer"
        raise ValidationException(msg, {"name": name, "value": raw}) from exc


# --- Nominatim ---


def get_nominatim_base_url() -> str:
    return _env("NOMINATIM_BASE_URL", DEFAULT_NOMINATIM_BASE_URL).rstrip("/")


def get_nominatim_search_url() -> str:
    return f"{get_nominatim_base_url()}/search"


def get_nominatim_user_agent() -> str:
    return _env("NOMINATIM_USER_AGENT", DEFAULT_NOMINATIM_USER_AGENT)


# --- Valhalla ---


def get_valhalla_base_url() -> str:
    return _env("VALHALLA_BASE_URL", DEFAULT_VALHALLA_BASE_URL).rstrip("/")


def get_valhalla_route_url() -> str:
    return f"{get_valhalla_base_url()}/route"


def get_valhalla_costing() -> str:
    return _env("VALHALLA_COSTING", "auto")


# --- Mapillary (street-level previews) ---


def get_mapillary_graph_url() -> str:
    return _env("MAPILLARY_GRAPH_URL", DEFAULT_MAPILLARY_GRAPH_URL).rstrip("/")


def get_mapillary_access_token() -> str:
    return os.getenv("MAPILLARY_ACCESS_TOKEN", "").strip()


def get_preview_radius_m() -> float:
    return _env_float("PREVIEW_RADIUS_M", 50.0)


# --- Provider behaviour ---


def get_search_result_limit() -> int:
    return _env_int("SEARCH_RESULT_LIMIT", 10)


def get_provider_timeout_seconds() -> float:
    return _env_float("PROVIDER_TIMEOUT_SECONDS", 15.0)


def get_cors_allowed_origins() -> list[str]:
    raw = os.getenv("CORS_ALLOWED_ORIGINS", "")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def load_controller_settings() -> ControllerSettings:
    """Build controller settings from the environment.

    The fixed routing origin and the default camera region are explicit
    values handed to the controller at construction time.
    """
    origin_lat = _env_float("ORIGIN_LAT", DEFAULT_ORIGIN_LAT)
    origin_lon = _env_float("ORIGIN_LON", DEFAULT_ORIGIN_LON)
    region_meters = _env_float("DEFAULT_REGION_METERS", DEFAULT_REGION_METERS)
    try:
        return ControllerSettings.from_origin(
            lat=origin_lat,
            lon=origin_lon,
            region_meters=region_meters,
            provider_timeout_seconds=get_provider_timeout_seconds(),
        )
    except ValueError as exc:
        msg = "Invalid controller settings"
        raise ValidationException(msg, {"error": str(exc)}) from exc


__all__ = [
    "get_cors_allowed_origins",
    "get_mapillary_access_token",
    "get_mapillary_graph_url",
    "get_nominatim_base_url",
    "get_nominatim_search_url",
    "get_nominatim_user_agent",
    "get_preview_radius_m",
    "get_provider_timeout_seconds",
    "get_search_result_limit",
    "get_valhalla_base_url",
    "get_valhalla_costing",
    "get_valhalla_route_url",
    "load_controller_settings",
]
