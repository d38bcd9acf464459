"""In-memory notification log for operator-facing warnings."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from threading import Lock
from typing import Deque, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    level: str
    source: str
    message: str
    created_at: datetime


class NotificationLog:
    """Capped log of published notifications, newest first."""

    def __init__(self, max_items: int = 50) -> None:
        self.max_items = max_items
        self._items: Deque[Notification] = deque(maxlen=max_items)
        self._lock = Lock()

    def publish_warning(self, source: str, message: str) -> Notification:
        note = Notification(
            level="warning",
            source=source,
            message=message,
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._items.appendleft(note)
        logger.warning(message, extra={"source": source})
        return note

    def recent(self, limit: Optional[int] = None) -> List[Notification]:
        with self._lock:
            items = list(self._items)
        if limit is None:
            return items
        return items[: max(limit, 0)]


@lru_cache
def build_default_notifications() -> NotificationLog:
    return NotificationLog()
