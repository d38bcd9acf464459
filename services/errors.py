"""Exception hierarchy for the weather station cache."""

from __future__ import annotations

from typing import Optional


class WeatherStationError(Exception):
    """Base exception for all weather station errors."""


class FetchError(WeatherStationError):
    """The provider request failed (network, timeout, non-2xx, invalid JSON)."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class PayloadError(WeatherStationError, ValueError):
    """A payload is missing required fields or carries invalid values."""


class PersistenceError(WeatherStationError):
    """The persisted snapshot could not be read or written."""
