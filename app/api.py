"""HTTP route definitions for the service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import (
    NotificationEntry,
    NotificationList,
    WeatherStationOverride,
    WeatherStationStatus,
)
from models.records import Freshness
from services.errors import PersistenceError
from services.notifications import NotificationLog, build_default_notifications
from services.weather_station import WeatherStationService, build_default_station

router = APIRouter()


def get_station() -> WeatherStationService:
    return build_default_station()


def get_notifications() -> NotificationLog:
    return build_default_notifications()


def _status_of(station: WeatherStationService) -> WeatherStationStatus:
    snapshot, freshness = station.read()
    return WeatherStationStatus.from_snapshot(snapshot, freshness)


@router.get(
    "/weatherStation",
    response_model=WeatherStationStatus,
    summary="Return the cached weather readings.",
)
async def get_weather_station(
    station: WeatherStationService = Depends(get_station),
) -> WeatherStationStatus:
    return _status_of(station)


@router.post(
    "/weatherStation",
    response_model=WeatherStationStatus,
    status_code=status.HTTP_200_OK,
    summary="Manually override the cached weather readings.",
)
def override_weather_station(
    body: WeatherStationOverride,
    station: WeatherStationService = Depends(get_station),
) -> WeatherStationStatus:
    try:
        snapshot = station.apply_override(body.to_override())
    except PersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Override could not be persisted: {exc}",
        ) from exc
    return WeatherStationStatus.from_snapshot(snapshot, Freshness.fresh)


@router.get(
    "/notifications",
    response_model=NotificationList,
    summary="List recent warnings published by background jobs.",
)
async def list_notifications(
    limit: int = Query(20, ge=1, le=200),
    notifications: NotificationLog = Depends(get_notifications),
) -> NotificationList:
    items = [
        NotificationEntry(
            level=note.level,
            source=note.source,
            message=note.message,
            created_at=note.created_at,
        )
        for note in notifications.recent(limit)
    ]
    return NotificationList(items=items)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck(
    station: WeatherStationService = Depends(get_station),
) -> dict[str, str]:
    return {"status": "ok", "freshness": station.freshness.value}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
