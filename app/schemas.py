"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

import math
from datetime import datetime, time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator

from models.records import (
    Freshness,
    ManualOverride,
    Snapshot,
    format_time_of_day,
    parse_time_of_day,
)


class WeatherStationStatus(BaseModel):
    """Current cached readings as returned by ``GET /weatherStation``."""

    model_config = ConfigDict(populate_by_name=True)

    temperature: float
    humidity: float
    last_fetched: Optional[datetime] = Field(
        default=None,
        alias="lastFetched",
        description="When the values were last fetched or overridden; null if only loaded from disk.",
    )
    sunrise: str = Field(..., description="Local time of day, HH:MM:SS.")
    sunset: str = Field(..., description="Local time of day, HH:MM:SS.")
    freshness: Freshness

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot, freshness: Freshness) -> "WeatherStationStatus":
        return cls(
            temperature=snapshot.temperature,
            humidity=snapshot.humidity,
            last_fetched=snapshot.last_fetched,
            sunrise=format_time_of_day(snapshot.sunrise),
            sunset=format_time_of_day(snapshot.sunset),
            freshness=freshness,
        )


class WeatherStationOverride(BaseModel):
    """Body of ``POST /weatherStation``."""

    model_config = ConfigDict(extra="ignore")

    temperature: StrictFloat | StrictInt
    humidity: StrictFloat | StrictInt
    sunrise: time
    sunset: time

    @field_validator("temperature", "humidity")
    @classmethod
    def _require_finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("must be a finite number")
        return value

    @field_validator("sunrise", "sunset", mode="before")
    @classmethod
    def _parse_time_of_day(cls, value: object) -> time:
        if not isinstance(value, str):
            raise ValueError("must be a time of day string such as '06:15:00'")
        return parse_time_of_day(value)

    def to_override(self) -> ManualOverride:
        return ManualOverride(
            temperature=float(self.temperature),
            humidity=float(self.humidity),
            sunrise=self.sunrise,
            sunset=self.sunset,
        )


class NotificationEntry(BaseModel):
    """A warning published by a background component."""

    level: str
    source: str
    message: str
    created_at: datetime


class NotificationList(BaseModel):
    items: List[NotificationEntry] = Field(default_factory=list)
