from __future__ import annotations
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from app.api import router
from app.web import router as web_router
from logging_config import configure_logging
from services.fetcher import build_default_fetcher
from services.notifications import build_default_notifications
from services.scheduler import PeriodicScheduler
from services.weather_station import build_default_station
from settings import get_settings
from storage.snapshot_store import build_default_store


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    station = build_default_station()
    station.load_persisted()

    scheduler = PeriodicScheduler(
        interval=settings.update_interval_seconds,
        callback=station.update,
        name="weather-station-update",
        run_immediately=settings.fetch_on_startup,
    )
    app.state.scheduler = scheduler
    if settings.scheduler_enabled:
        scheduler.start()
    try:
        yield
    finally:
        # Let an in-flight update finish before its HTTP client is closed.
        scheduler.stop(timeout=settings.request_timeout_seconds + 1.0)
        station.fetcher.close()
        build_default_station.cache_clear()
        build_default_fetcher.cache_clear()
        build_default_store.cache_clear()
        build_default_notifications.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Weather Station Cache",
        description="Periodically synchronized cache of provider weather readings.",
        version="0.1.0",
        lifespan=lifespan,
    )
    static_dir = Path(__file__).resolve().parent.parent / "static"
    app.mount("/static", StaticFiles(directory=static_dir), name="static")
    app.include_router(router)
    app.include_router(web_router)
    return app

app = create_app()
