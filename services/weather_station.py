"""Cache orchestration: fetch, persist, seed from disk and manual overrides."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, time, timezone, tzinfo
from functools import lru_cache
from threading import Lock
from typing import Any, Callable, Dict, Optional, Tuple

from models.records import (
    Freshness,
    ManualOverride,
    Snapshot,
    WeatherReading,
    format_time_of_day,
    parse_time_of_day,
)
from models.sensors import SensorValue
from services.errors import FetchError, PayloadError, PersistenceError
from services.fetcher import WeatherFetcher, build_default_fetcher, parse_provider_payload
from services.notifications import NotificationLog, build_default_notifications
from settings import get_settings
from storage.snapshot_store import SnapshotStore, build_default_store

logger = logging.getLogger(__name__)

SOURCE_NAME = "weather-station"

# Synthesized override payloads also carry the local times verbatim, since an
# epoch round trip loses fractional seconds and DST-gap times.
_OVERRIDE_KEY = "override"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WeatherStationService:
    """Coordinates the sensors, the snapshot store and the provider fetcher.

    Every mutation (scheduled fetch, manual override, startup load) goes
    through :meth:`_commit`, which holds one lock across persisting the
    payload, updating both sensors and swapping in a new :class:`Snapshot`.
    Readers only ever see a complete snapshot; :meth:`read` returns the
    snapshot together with its freshness.
    """

    def __init__(
        self,
        fetcher: WeatherFetcher,
        store: SnapshotStore,
        notifications: NotificationLog,
        temperature: Optional[SensorValue] = None,
        humidity: Optional[SensorValue] = None,
        clock: Callable[[], datetime] = _utc_now,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self.fetcher = fetcher
        self.store = store
        self.notifications = notifications
        self.temperature = temperature or SensorValue("temperature")
        self.humidity = humidity or SensorValue("humidity")
        self.clock = clock
        self.tz = tz
        self._lock = Lock()
        self._state: Tuple[Snapshot, Freshness] = (Snapshot(), Freshness.uninitialized)

    def read(self) -> Tuple[Snapshot, Freshness]:
        return self._state

    @property
    def snapshot(self) -> Snapshot:
        return self._state[0]

    @property
    def freshness(self) -> Freshness:
        return self._state[1]

    def load_persisted(self) -> bool:
        """Seed the sensors from the persisted payload without marking them fresh."""
        try:
            payload = self.store.load()
            if payload is None:
                logger.info("No persisted snapshot found; starting uninitialized")
                return False
            reading = self._decode(payload)
        except (PersistenceError, PayloadError) as exc:
            self.notifications.publish_warning(
                SOURCE_NAME, f"Could not load persisted weather values. {exc}"
            )
            return False

        with self._lock:
            if self.freshness is Freshness.fresh:
                # A fetch or override already won; the disk copy is older.
                return False
            self._apply(reading, last_fetched=None)
        logger.info(
            "Persisted weather values loaded",
            extra={
                "temperature": reading.temperature,
                "humidity": reading.humidity,
                "freshness": self.freshness.value,
            },
        )
        return True

    def update(self) -> bool:
        """Scheduled job: fetch, persist and apply. Never raises."""
        try:
            payload = self.fetcher.fetch()
            reading = parse_provider_payload(payload, self.tz)
            snapshot = self._commit(reading, payload)
        except (FetchError, PayloadError, PersistenceError) as exc:
            self.notifications.publish_warning(
                SOURCE_NAME, f"Could not fetch weather information. {exc}"
            )
            return False

        logger.info(
            "Weather information updated",
            extra={
                "temperature": snapshot.temperature,
                "humidity": snapshot.humidity,
                "last_fetched": snapshot.last_fetched,
            },
        )
        return True

    def apply_override(self, override: ManualOverride) -> Snapshot:
        """Apply operator-supplied values as if they had been fetched.

        Raises :class:`PersistenceError` when the payload cannot be written; in
        that case nothing is changed.
        """
        reading = WeatherReading(
            temperature=override.temperature,
            humidity=override.humidity,
            sunrise=override.sunrise,
            sunset=override.sunset,
        )
        snapshot = self._commit(reading, self._synthesize_payload(override))
        logger.info(
            "Manual weather override applied",
            extra={"temperature": snapshot.temperature, "humidity": snapshot.humidity},
        )
        return snapshot

    def _commit(self, reading: WeatherReading, payload: Dict[str, Any]) -> Snapshot:
        with self._lock:
            self.store.save(payload)
            return self._apply(reading, last_fetched=self.clock())

    def _apply(self, reading: WeatherReading, last_fetched: Optional[datetime]) -> Snapshot:
        snapshot = Snapshot(
            temperature=reading.temperature,
            humidity=reading.humidity,
            sunrise=reading.sunrise,
            sunset=reading.sunset,
            last_fetched=last_fetched,
        )
        freshness = Freshness.persisted_stale if last_fetched is None else Freshness.fresh
        # Swap first so subscribers observe the snapshot they are notified about.
        self._state = (snapshot, freshness)
        self.temperature.update_value(reading.temperature)
        self.humidity.update_value(reading.humidity)
        return snapshot

    def _decode(self, payload: Dict[str, Any]) -> WeatherReading:
        reading = parse_provider_payload(payload, self.tz)
        override = payload.get(_OVERRIDE_KEY)
        if override is None:
            return reading
        if not isinstance(override, dict):
            raise PayloadError("Persisted override times must be an object.")
        try:
            return replace(
                reading,
                sunrise=parse_time_of_day(override["sunrise"]),
                sunset=parse_time_of_day(override["sunset"]),
            )
        except (AttributeError, KeyError, ValueError) as exc:
            raise PayloadError(f"Persisted override times are invalid: {exc}") from exc

    def _synthesize_payload(self, override: ManualOverride) -> Dict[str, Any]:
        """Build a provider-shaped payload that decodes back to ``override``."""
        today = self.clock().astimezone(self.tz).date()

        def to_epoch(value: time) -> int:
            moment = datetime.combine(today, value, tzinfo=self.tz)
            return int(moment.timestamp())

        return {
            "main": {"temp": override.temperature, "humidity": override.humidity},
            "sys": {"sunrise": to_epoch(override.sunrise), "sunset": to_epoch(override.sunset)},
            _OVERRIDE_KEY: {
                "sunrise": format_time_of_day(override.sunrise),
                "sunset": format_time_of_day(override.sunset),
            },
            "source": "manual",
        }


@lru_cache
def build_default_station() -> WeatherStationService:
    """Factory that wires the station with the configured collaborators."""
    settings = get_settings()
    return WeatherStationService(
        fetcher=build_default_fetcher(),
        store=build_default_store(),
        notifications=build_default_notifications(),
        temperature=SensorValue("temperature", settings.temperature_threshold),
        humidity=SensorValue("humidity", settings.humidity_threshold),
    )
