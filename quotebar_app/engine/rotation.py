"""
Rotation controllers decide which instrument the tray shows.

Fixed mode always shows one instrument. Rotate mode cycles through the
configured instruments on its own timer, unsynchronized with the pollers.
"""

import threading
from typing import Optional, Sequence, Union

import structlog

from ..config.settings import Configuration, DisplayMode
from .timer import PeriodicTimer

logger = structlog.get_logger(__name__)


class FixedRotation:
    """Shows the configured fixed instrument, or the first one."""

    mode = DisplayMode.FIXED

    def __init__(self, config: Configuration):
        self._displayed_code = self._resolve(config)

    @staticmethod
    def _resolve(config: Configuration) -> Optional[str]:
        code = config.effective_fixed_instrument()
        if config.fixed_instrument and code != config.fixed_instrument:
            logger.warning(
                "Fixed instrument not configured, showing first instrument",
                fixed_instrument=config.fixed_instrument,
                fallback=code
            )
        return code

    @property
    def displayed_code(self) -> Optional[str]:
        return self._displayed_code

    def retarget(self, config: Configuration) -> None:
        self._displayed_code = self._resolve(config)

    def start(self) -> None:
        pass

    def stop(self) -> None:
        pass


class RotatingRotation:
    """Cycles the displayed instrument every ``interval`` seconds."""

    mode = DisplayMode.ROTATE

    def __init__(self, codes: Sequence[str], interval: float, start_index: int = 0):
        self.interval = interval
        self._lock = threading.Lock()
        self._codes = list(codes)
        self._index = self._clamp(start_index, len(self._codes))
        self._timer: Optional[PeriodicTimer] = None

    @staticmethod
    def _clamp(index: int, count: int) -> int:
        if count == 0:
            return 0
        return min(max(index, 0), count - 1)

    @property
    def index(self) -> int:
        with self._lock:
            return self._index

    @property
    def codes(self) -> list[str]:
        with self._lock:
            return list(self._codes)

    @property
    def displayed_code(self) -> Optional[str]:
        with self._lock:
            return self._codes[self._index] if self._codes else None

    def advance(self) -> Optional[str]:
        """Move to the next instrument, wrapping after the last one."""
        with self._lock:
            if not self._codes:
                return None
            self._index = (self._index + 1) % len(self._codes)
            return self._codes[self._index]

    def retarget(self, config: Configuration) -> None:
        """
        Adopt a new instrument list.

        Keeps showing the current instrument if it is still configured;
        otherwise the index is clamped into the new range.
        """
        new_codes = config.codes
        with self._lock:
            current = self._codes[self._index] if self._codes else None
            if current in new_codes:
                self._index = new_codes.index(current)
            else:
                self._index = self._clamp(self._index, len(new_codes))
            self._codes = new_codes

    def start(self) -> None:
        if self._timer is not None:
            return
        self._timer = PeriodicTimer(
            name="rotation",
            interval=self.interval,
            callback=self.advance,
            run_immediately=False
        )
        self._timer.start()

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None


RotationController = Union[FixedRotation, RotatingRotation]


def build_rotation(config: Configuration) -> RotationController:
    """Create the rotation controller for a configuration's display mode."""
    if config.display_mode is DisplayMode.FIXED:
        return FixedRotation(config)
    return RotatingRotation(config.codes, config.rotate_interval)
