"""Hysteresis-gated sensor values with synchronous change notification."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Callable, List

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ValueChange:
    old_value: float
    new_value: float

    @property
    def delta(self) -> float:
        return self.new_value - self.old_value


ChangeCallback = Callable[[ValueChange], None]


class SensorValue:
    """Holds one scalar reading and notifies subscribers on significant change.

    The stored value always follows the latest update. Subscribers are only
    called when the absolute difference to the previous value is strictly
    greater than ``change_threshold``. Callbacks run inline, in registration
    order, on the thread that called :meth:`update_value`. A callback that
    raises is logged and skipped; the remaining callbacks still run.
    """

    def __init__(self, name: str, change_threshold: float = 0.15) -> None:
        if change_threshold < 0:
            raise ValueError("change_threshold must not be negative.")
        self.name = name
        self.change_threshold = change_threshold
        self._value = 0.0
        self._subscribers: List[ChangeCallback] = []
        self._subscribers_lock = Lock()

    @property
    def value(self) -> float:
        return self._value

    def subscribe(self, callback: ChangeCallback) -> None:
        with self._subscribers_lock:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: ChangeCallback) -> None:
        with self._subscribers_lock:
            try:
                self._subscribers.remove(callback)
            except ValueError:
                pass

    def update_value(self, new_value: float) -> bool:
        """Store ``new_value`` and return whether subscribers were notified."""
        old_value = self._value
        self._value = new_value

        if abs(new_value - old_value) <= self.change_threshold:
            return False

        with self._subscribers_lock:
            subscribers = list(self._subscribers)

        change = ValueChange(old_value=old_value, new_value=new_value)
        for callback in subscribers:
            try:
                callback(change)
            except Exception:
                logger.exception(
                    "Change subscriber failed", extra={"source": self.name}
                )
        return True

    def __repr__(self) -> str:
        return (
            f"SensorValue(name={self.name!r}, value={self._value!r}, "
            f"change_threshold={self.change_threshold!r})"
        )
