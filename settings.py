from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


DEFAULT_PROVIDER_URL = (
    "http://api.openweathermap.org/data/2.5/weather"
    "?lat={latitude}&lon={longitude}&APPID={api_key}&units=metric"
)

_LATITUDE_ENV = "WEATHER_LATITUDE"
_LONGITUDE_ENV = "WEATHER_LONGITUDE"
_API_KEY_ENV = "WEATHER_API_KEY"
_PROVIDER_URL_ENV = "WEATHER_PROVIDER_URL"
_INTERVAL_ENV = "WEATHER_UPDATE_INTERVAL_SECONDS"
_TIMEOUT_ENV = "WEATHER_REQUEST_TIMEOUT_SECONDS"
_PERSISTENCE_PATH_ENV = "WEATHER_PERSISTENCE_PATH"
_TEMPERATURE_THRESHOLD_ENV = "WEATHER_TEMPERATURE_THRESHOLD"
_HUMIDITY_THRESHOLD_ENV = "WEATHER_HUMIDITY_THRESHOLD"
_SCHEDULER_ENABLED_ENV = "WEATHER_SCHEDULER_ENABLED"
_FETCH_ON_STARTUP_ENV = "WEATHER_FETCH_ON_STARTUP"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    latitude: float
    longitude: float
    api_key: str
    provider_url: str
    update_interval_seconds: float
    request_timeout_seconds: float
    persistence_path: Optional[str]
    temperature_threshold: float
    humidity_threshold: float
    scheduler_enabled: bool
    fetch_on_startup: bool
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_float_env(name: str, default: float, positive: bool = False) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    if positive and parsed <= 0:
        return default
    if not positive and parsed < 0:
        return default
    return parsed


def _read_coordinate(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value.strip())
    except ValueError:
        return default


def _read_bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUE_VALUES:
        return True
    if candidate in _FALSE_VALUES:
        return False
    return default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        latitude=_read_coordinate(_LATITUDE_ENV, 0.0),
        longitude=_read_coordinate(_LONGITUDE_ENV, 0.0),
        api_key=_read_str_env(_API_KEY_ENV, ""),
        provider_url=_read_str_env(_PROVIDER_URL_ENV, DEFAULT_PROVIDER_URL),
        update_interval_seconds=_read_float_env(_INTERVAL_ENV, 150.0, positive=True),
        request_timeout_seconds=_read_float_env(_TIMEOUT_ENV, 10.0, positive=True),
        persistence_path=_read_optional_env(
            _PERSISTENCE_PATH_ENV, "./tmp/weather_station.json"
        ),
        temperature_threshold=_read_float_env(_TEMPERATURE_THRESHOLD_ENV, 0.15),
        humidity_threshold=_read_float_env(_HUMIDITY_THRESHOLD_ENV, 0.15),
        scheduler_enabled=_read_bool_env(_SCHEDULER_ENABLED_ENV, True),
        fetch_on_startup=_read_bool_env(_FETCH_ON_STARTUP_ENV, True),
        log_level=_read_log_level("INFO"),
    )
