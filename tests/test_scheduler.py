from __future__ import annotations

import threading
import time
from datetime import timezone

import pytest

from services.notifications import NotificationLog
from services.scheduler import PeriodicScheduler
from services.weather_station import WeatherStationService
from storage.snapshot_store import SnapshotStore


def test_tick_while_in_flight_is_dropped() -> None:
    release = threading.Event()
    started = threading.Event()
    calls: list[int] = []

    def slow_update() -> None:
        calls.append(1)
        started.set()
        release.wait(timeout=5)

    scheduler = PeriodicScheduler(interval=60, callback=slow_update)
    try:
        first = scheduler.tick()
        assert first is not None
        assert started.wait(timeout=5)

        assert scheduler.busy is True
        assert scheduler.tick() is None
        assert scheduler.skipped_ticks == 1

        release.set()
        first.result(timeout=5)
        assert calls == [1]

        follow_up = scheduler.tick()
        assert follow_up is not None
        follow_up.result(timeout=5)
        assert calls == [1, 1]
    finally:
        release.set()
        scheduler.stop()


def test_callback_errors_do_not_escape_or_block() -> None:
    calls: list[int] = []

    def broken() -> None:
        calls.append(1)
        raise RuntimeError("boom")

    scheduler = PeriodicScheduler(interval=60, callback=broken)
    try:
        scheduler.tick().result(timeout=5)
        scheduler.tick().result(timeout=5)
    finally:
        scheduler.stop()

    assert calls == [1, 1]
    assert scheduler.busy is False


def test_started_scheduler_fires_periodically() -> None:
    fired = threading.Event()
    calls: list[float] = []

    def update() -> None:
        calls.append(time.monotonic())
        if len(calls) >= 3:
            fired.set()

    scheduler = PeriodicScheduler(interval=0.05, callback=update, run_immediately=True)
    scheduler.start()
    try:
        assert scheduler.running is True
        assert fired.wait(timeout=5)
    finally:
        scheduler.stop(timeout=1)

    assert scheduler.running is False
    assert len(calls) >= 3


def test_tick_after_stop_is_ignored() -> None:
    scheduler = PeriodicScheduler(interval=60, callback=lambda: None)
    scheduler.stop()

    assert scheduler.tick() is None
    assert scheduler.busy is False


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        PeriodicScheduler(interval=0, callback=lambda: None)


def test_overlapping_station_tick_performs_no_request() -> None:
    release = threading.Event()
    in_request = threading.Event()

    class BlockingFetcher:
        calls = 0

        def fetch(self) -> dict:
            BlockingFetcher.calls += 1
            in_request.set()
            release.wait(timeout=5)
            return {
                "main": {"temp": 21.5, "humidity": 40},
                "sys": {"sunrise": 1500000000, "sunset": 1500030000},
            }

        def close(self) -> None:
            pass

    station = WeatherStationService(
        fetcher=BlockingFetcher(),  # type: ignore[arg-type]
        store=SnapshotStore(),
        notifications=NotificationLog(),
        tz=timezone.utc,
    )
    scheduler = PeriodicScheduler(interval=60, callback=station.update)
    try:
        first = scheduler.tick()
        assert in_request.wait(timeout=5)

        assert scheduler.tick() is None
        assert BlockingFetcher.calls == 1
        assert station.snapshot.last_fetched is None

        release.set()
        first.result(timeout=5)
    finally:
        release.set()
        scheduler.stop()

    assert BlockingFetcher.calls == 1
    assert station.snapshot.temperature == 21.5


def test_stop_waits_for_in_flight_tick() -> None:
    started = threading.Event()
    finished = threading.Event()

    def slow_update() -> None:
        started.set()
        time.sleep(0.2)
        finished.set()

    scheduler = PeriodicScheduler(interval=60, callback=slow_update)
    scheduler.tick()
    assert started.wait(timeout=5)

    scheduler.stop(timeout=5)

    assert finished.is_set()
    assert scheduler.busy is False


def test_stop_gives_up_after_timeout() -> None:
    release = threading.Event()
    started = threading.Event()

    def stuck_update() -> None:
        started.set()
        release.wait(timeout=5)

    scheduler = PeriodicScheduler(interval=60, callback=stuck_update)
    try:
        scheduler.tick()
        assert started.wait(timeout=5)

        began = time.monotonic()
        scheduler.stop(timeout=0.1)

        assert time.monotonic() - began < 2
        assert scheduler.busy is True
    finally:
        release.set()
