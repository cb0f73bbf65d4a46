"""Thread-safe keyed store of QuoteState."""

import threading
from typing import Callable, Optional, Set

from .models import QuoteState


class QuoteStore:
    """
    Maps instrument code to its latest QuoteState.

    Every operation is atomic; no operation spans more than one key. Each
    key has a single writer, its instrument's poller.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._states: dict[str, QuoteState] = {}

    def get(self, code: str) -> Optional[QuoteState]:
        with self._lock:
            return self._states.get(code)

    def set(self, code: str, state: QuoteState) -> None:
        with self._lock:
            self._states[code] = state

    def remove(self, code: str) -> Optional[QuoteState]:
        with self._lock:
            return self._states.pop(code, None)

    def codes(self) -> Set[str]:
        with self._lock:
            return set(self._states)

    def ensure(self, code: str) -> QuoteState:
        """Return the state for code, creating an empty one if absent."""
        with self._lock:
            state = self._states.get(code)
            if state is None:
                state = QuoteState()
                self._states[code] = state
            return state

    def update(self, code: str, fn: Callable[[QuoteState], QuoteState]) -> QuoteState:
        """Atomically replace the state for code with fn(current)."""
        with self._lock:
            new_state = fn(self._states.get(code) or QuoteState())
            self._states[code] = new_state
            return new_state

    def snapshot(self) -> dict[str, QuoteState]:
        with self._lock:
            return dict(self._states)

    def __contains__(self, code: object) -> bool:
        with self._lock:
            return code in self._states

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)
