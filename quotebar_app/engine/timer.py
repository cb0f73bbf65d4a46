"""Fixed-rate periodic timer running its callback on a daemon thread."""

import math
import threading
import time
from typing import Callable, Optional

import structlog

logger = structlog.get_logger(__name__)


class PeriodicTimer:
    """
    Calls a function every ``interval`` seconds, measured from the start of
    the previous call.

    Calls never overlap: a deadline that passes while the callback is still
    running is skipped, not queued.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        callback: Callable[[], object],
        run_immediately: bool = True,
        clock: Callable[[], float] = time.monotonic
    ):
        if not math.isfinite(interval) or interval <= 0:
            raise ValueError(f"Timer interval must be positive and finite, got {interval}")
        self.name = name
        self.interval = interval
        self.callback = callback
        self.run_immediately = run_immediately
        self._clock = clock
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.skipped_ticks = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop_event.is_set()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def stop(self, join_timeout: Optional[float] = None) -> None:
        """
        Stop scheduling further calls.

        Args:
            join_timeout: Wait up to this long for the thread to exit; None
                returns without waiting
        """
        self._stop_event.set()
        thread = self._thread
        if join_timeout is not None and thread is not None and thread is not threading.current_thread():
            thread.join(join_timeout)

    def next_deadline(self, tick_start: float, now: float) -> float:
        """First deadline after ``now`` on the grid anchored at ``tick_start``."""
        periods = max(1, math.ceil((now - tick_start) / self.interval))
        return tick_start + periods * self.interval

    def _run(self) -> None:
        next_run = self._clock() if self.run_immediately else self._clock() + self.interval

        while not self._stop_event.is_set():
            delay = next_run - self._clock()
            if delay > 0 and self._stop_event.wait(delay):
                break

            tick_start = self._clock()
            try:
                self.callback()
            except Exception:
                logger.exception("Timer callback failed", timer=self.name)

            now = self._clock()
            next_run = self.next_deadline(tick_start, now)
            missed = int((next_run - tick_start) / self.interval) - 1
            if missed > 0:
                self.skipped_ticks += missed
                logger.debug("Skipped ticks while callback was running",
                             timer=self.name, skipped=missed)
