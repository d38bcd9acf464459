from __future__ import annotations

import json
import logging
import os
import tempfile
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional

from services.errors import PersistenceError
from settings import get_settings

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Keeps the last good provider payload in a single JSON file.

    Without a ``path`` the store only remembers the payload in memory.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path
        self._memory: Optional[Dict[str, Any]] = None
        self._lock = Lock()

    def save(self, payload: Dict[str, Any]) -> None:
        """Overwrite the persisted payload."""
        try:
            serialized = json.dumps(payload, indent=2, sort_keys=True)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"Payload is not JSON serializable: {exc}") from exc

        with self._lock:
            if self.path is not None:
                try:
                    self._write_atomic(self.path, serialized)
                except OSError as exc:
                    raise PersistenceError(
                        f"Could not write snapshot to {self.path}: {exc}"
                    ) from exc
            self._memory = json.loads(serialized)

    def load(self) -> Optional[Dict[str, Any]]:
        """Return the persisted payload, or ``None`` when nothing was saved yet."""
        with self._lock:
            if self.path is None:
                return None if self._memory is None else json.loads(json.dumps(self._memory))

            if not self.path.exists():
                return None

            try:
                raw = self.path.read_text(encoding="utf-8")
                data = json.loads(raw)
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
                raise PersistenceError(
                    f"Could not read snapshot from {self.path}: {exc}"
                ) from exc

        if not isinstance(data, dict):
            raise PersistenceError(f"Snapshot in {self.path} is not a JSON object.")
        return data

    def _write_atomic(self, path: Path, serialized: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(serialized)
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Snapshot persisted", extra={"path": str(path)})


@lru_cache
def build_default_store(path: Optional[str] = None) -> SnapshotStore:
    settings = get_settings()
    store_path = settings.persistence_path if path is None else path
    return SnapshotStore(path=Path(store_path) if store_path else None)
