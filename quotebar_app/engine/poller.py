"""
Per-instrument poller.

Each poller owns one recurring fetch for one instrument and is the only
writer of that instrument's QuoteState.
"""

import threading
from enum import Enum
from typing import Optional

from ..config.settings import Configuration
from ..errors import FetchError, StateTransitionError
from ..logging.config import get_poller_logger
from ..provider.client import QuoteProviderClient
from ..provider.models import FetchResult
from ..quotes.store import QuoteStore
from .timer import PeriodicTimer


class PollerState(str, Enum):
    """Poller lifecycle states."""
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class SymbolPoller:
    """Fetches one instrument on a fixed cadence and records the outcome."""

    def __init__(
        self,
        code: str,
        token: str,
        use_proxy: bool,
        refresh_interval: float,
        client: QuoteProviderClient,
        store: QuoteStore
    ):
        self.code = code
        self.token = token
        self.use_proxy = use_proxy
        self.refresh_interval = refresh_interval
        self.client = client
        self.store = store
        self.logger = get_poller_logger(__name__, code)

        self._state = PollerState.IDLE
        self._state_lock = threading.Lock()     # Guards _state and store writes
        self._inflight = threading.Lock()       # Held for the duration of a fetch
        self._timer: Optional[PeriodicTimer] = None

        self.last_result: Optional[FetchResult] = None
        self._fetch_count = 0
        self._failure_count = 0
        self._skip_count = 0

    @classmethod
    def from_config(cls, code: str, config: Configuration,
                    client: QuoteProviderClient, store: QuoteStore) -> "SymbolPoller":
        """Create a poller capturing the connection settings of config."""
        return cls(
            code=code,
            token=config.token,
            use_proxy=config.use_system_proxy,
            refresh_interval=config.refresh_interval,
            client=client,
            store=store,
        )

    @staticmethod
    def settings_key(config: Configuration) -> tuple[str, bool, float]:
        """Settings a poller captures at start; a change requires a restart."""
        return (config.token, config.use_system_proxy, config.refresh_interval)

    @property
    def captured_settings(self) -> tuple[str, bool, float]:
        return (self.token, self.use_proxy, self.refresh_interval)

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._inflight.locked()

    def take_over_from(self, previous: "SymbolPoller") -> None:
        """
        Share the in-flight guard of the poller this one replaces.

        Must be called before start(). Ticks are skipped until a fetch the
        previous poller still has in flight completes.
        """
        if self._state is not PollerState.IDLE:
            raise StateTransitionError(
                f"Poller for {self.code} cannot take over once started",
                current_state=self._state.value,
                attempted_transition="take_over"
            )
        self._inflight = previous._inflight

    def start(self) -> None:
        """Begin polling: one fetch now, then one every refresh_interval."""
        with self._state_lock:
            if self._state is not PollerState.IDLE:
                raise StateTransitionError(
                    f"Poller for {self.code} cannot start from {self._state.value}",
                    current_state=self._state.value,
                    attempted_transition="start"
                )
            self.store.ensure(self.code)
            self._state = PollerState.RUNNING
            self._timer = self._schedule()

        self.logger.info("Poller started", refresh_interval=self.refresh_interval,
                         use_proxy=self.use_proxy)

    def _schedule(self) -> Optional[PeriodicTimer]:
        timer = PeriodicTimer(
            name=f"poller-{self.code}",
            interval=self.refresh_interval,
            callback=self.poll_once,
            run_immediately=True
        )
        timer.start()
        return timer

    def stop(self) -> None:
        """Stop polling. Idempotent; no store writes happen after it returns."""
        with self._state_lock:
            if self._state is PollerState.STOPPED:
                return
            self._state = PollerState.STOPPED
            timer, self._timer = self._timer, None

        if timer is not None:
            timer.stop()
        self.logger.info("Poller stopped")

    def poll_once(self) -> Optional[FetchResult]:
        """
        Run one fetch and record it.

        Returns None without fetching when the poller is not running, when
        no token is configured, or when a fetch is already in flight.
        """
        if not self._inflight.acquire(blocking=False):
            self._skip_count += 1
            self.logger.debug("Fetch still in flight, skipping tick")
            return None

        try:
            if self._state is not PollerState.RUNNING:
                return None
            if not self.token:
                self.logger.debug("No token configured, not fetching")
                return None

            try:
                result = self.client.fetch_quote(self.code, self.token, self.use_proxy)
            except Exception as e:
                self.logger.exception("Unexpected error from quote client")
                result = FetchResult.failure(
                    self.code,
                    FetchError(f"Unexpected fetch failure: {e}", code=self.code,
                               context={"exception": type(e).__name__})
                )
            self._record(result)
            return result
        finally:
            self._inflight.release()

    def refresh_now(self) -> threading.Thread:
        """Fetch out of band on a worker thread without moving the timer phase."""
        worker = threading.Thread(
            target=self.poll_once,
            name=f"refresh-{self.code}",
            daemon=True
        )
        worker.start()
        return worker

    def _record(self, result: FetchResult) -> None:
        with self._state_lock:
            if self._state is not PollerState.RUNNING:
                self.logger.debug("Discarding result of stopped poller", ok=result.ok)
                return

            self.last_result = result
            self._fetch_count += 1
            if result.ok:
                quote = result.quote
                self.store.update(
                    self.code,
                    lambda current: current.with_success(quote.price, quote.timestamp)
                )
            else:
                self._failure_count += 1
                self.store.update(self.code, lambda current: current.with_failure())

        if not result.ok:
            error = result.error
            self.logger.warning(
                "Quote fetch failed, marking stale",
                error_kind=error.kind.value if error else None,
                error=str(error)
            )

    def get_stats(self) -> dict[str, object]:
        """Fetch statistics for diagnostics."""
        return {
            "code": self.code,
            "state": self._state.value,
            "fetch_count": self._fetch_count,
            "failure_count": self._failure_count,
            "skipped_count": self._skip_count + (self._timer.skipped_ticks if self._timer else 0),
        }
