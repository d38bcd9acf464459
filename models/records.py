"""Domain models shared across services."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, time
from enum import Enum
from typing import Optional


_TIME_OF_DAY_PATTERN = re.compile(
    r"^(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::(?P<second>\d{2})(?:\.(?P<fraction>\d{1,6}))?)?$"
)


class Freshness(str, Enum):
    """Where the currently cached values came from."""

    uninitialized = "uninitialized"
    persisted_stale = "persisted_stale"
    fresh = "fresh"


@dataclass(frozen=True, slots=True)
class WeatherReading:
    """Typed values decoded from one provider payload."""

    temperature: float
    humidity: float
    sunrise: time
    sunset: time


@dataclass(frozen=True, slots=True)
class ManualOverride:
    """Values supplied by an operator in place of a provider fetch."""

    temperature: float
    humidity: float
    sunrise: time
    sunset: time


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Immutable view of the cache, swapped as a whole on every update."""

    temperature: float = 0.0
    humidity: float = 0.0
    sunrise: time = time(0, 0)
    sunset: time = time(0, 0)
    last_fetched: Optional[datetime] = None


def parse_time_of_day(value: str) -> time:
    """Parse ``H:MM``, ``HH:MM:SS`` or ``HH:MM:SS.ffffff`` into a :class:`time`."""
    match = _TIME_OF_DAY_PATTERN.match(value.strip())
    if match is None:
        raise ValueError(f"Invalid time of day {value!r}; expected HH:MM[:SS].")

    fraction = match.group("fraction") or ""
    try:
        return time(
            hour=int(match.group("hour")),
            minute=int(match.group("minute")),
            second=int(match.group("second") or 0),
            microsecond=int(fraction.ljust(6, "0")) if fraction else 0,
        )
    except ValueError as exc:
        raise ValueError(f"Invalid time of day {value!r}: {exc}") from exc


def format_time_of_day(value: time) -> str:
    rendered = value.strftime("%H:%M:%S")
    if value.microsecond:
        rendered = f"{rendered}.{value.microsecond:06d}"
    return rendered
