"""Fixed-interval, non-reentrant tick scheduler."""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from threading import Event, Lock, Thread
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicScheduler:
    """Runs ``callback`` every ``interval`` seconds on a single worker thread.

    At most one callback is in flight. A tick that comes due while the
    previous one is still running is dropped; it is neither queued nor
    retried before the next regular tick.
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[], Any],
        name: str = "periodic-scheduler",
        run_immediately: bool = False,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive.")
        self.interval = interval
        self.callback = callback
        self.name = name
        self.run_immediately = run_immediately
        self.executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._in_flight = Lock()
        self._stop_event = Event()
        self._thread: Optional[Thread] = None
        self._current: Optional[Future[None]] = None
        self.skipped_ticks = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def busy(self) -> bool:
        return self._in_flight.locked()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.info("Scheduler started", extra={"interval": self.interval})

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop the timing loop and wait up to ``timeout`` for an in-flight tick.

        Collaborators used by the callback can be closed once this returns,
        unless the tick outlived ``timeout``, which is logged.
        """
        self._stop_event.set()
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
        self._thread = None
        current = self._current
        if current is not None:
            _, pending = wait([current], timeout=timeout)
            if pending:
                logger.warning("In-flight tick still running at shutdown")
        self.executor.shutdown(wait=False, cancel_futures=True)
        logger.info("Scheduler stopped")

    def tick(self) -> Optional[Future[None]]:
        """Fire one tick now; return ``None`` when the previous tick is still running."""
        if not self._in_flight.acquire(blocking=False):
            self.skipped_ticks += 1
            logger.debug("Tick skipped; previous update still in flight")
            return None
        try:
            future = self.executor.submit(self._invoke)
        except RuntimeError:
            # Executor already shut down.
            self._in_flight.release()
            return None
        self._current = future
        return future

    def _invoke(self) -> None:
        try:
            self.callback()
        except Exception:  # pragma: no cover - scheduled jobs must never raise
            logger.exception("Scheduled callback raised")
        finally:
            self._in_flight.release()

    def _run(self) -> None:
        next_due = time.monotonic()
        if self.run_immediately:
            self.tick()
        next_due += self.interval
        while not self._stop_event.wait(max(0.0, next_due - time.monotonic())):
            self.tick()
            next_due += self.interval
            now = time.monotonic()
            if next_due <= now:
                # Fell behind (suspended host); realign instead of bursting.
                next_due = now + self.interval
