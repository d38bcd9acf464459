from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.schemas import WeatherStationStatus
from models.records import Freshness
from services.notifications import NotificationLog, build_default_notifications
from services.weather_station import WeatherStationService, build_default_station


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def get_station() -> WeatherStationService:
    return build_default_station()


def get_notifications() -> NotificationLog:
    return build_default_notifications()


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    request: Request,
    station: WeatherStationService = Depends(get_station),
    notifications: NotificationLog = Depends(get_notifications),
) -> HTMLResponse:
    weather = WeatherStationStatus.from_snapshot(*station.read())
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "weather": weather,
            "is_fresh": weather.freshness is Freshness.fresh,
            "notifications": notifications.recent(10),
        },
    )
