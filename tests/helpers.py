"""Test doubles and builders shared across the test suite."""

from collections import defaultdict, deque
from datetime import datetime
from typing import Any, Optional

from quotebar_app.config.settings import Configuration, DisplayMode, InstrumentConfig
from quotebar_app.engine.poller import SymbolPoller
from quotebar_app.engine.rotation import FixedRotation, RotatingRotation
from quotebar_app.errors import NetworkError
from quotebar_app.provider.models import FetchResult, Quote
from quotebar_app.surfaces.base import TraySurface


def local_time(hour: int, minute: int, second: int) -> datetime:
    """Aware datetime that formats as HH:MM:SS in the local timezone."""
    return datetime(2024, 5, 1, hour, minute, second).astimezone()


_DEFAULT_TIMESTAMP = object()


def kline_payload(close_price: Any = "2345.10", timestamp: Any = _DEFAULT_TIMESTAMP,
                  ret: Any = 200, code: str = "XAUUSD") -> dict[str, Any]:
    """Provider response envelope with a single kline; timestamp=None is sent as null."""
    if timestamp is _DEFAULT_TIMESTAMP:
        timestamp = str(int(local_time(14, 3, 21).timestamp()))
    return {
        "ret": ret,
        "msg": "ok",
        "data": {
            "code": code,
            "kline_type": 1,
            "kline_list": [{"timestamp": timestamp, "close_price": close_price}],
        },
    }


class FakeClient:
    """Provider client returning queued results per code."""

    def __init__(self):
        self.results: dict[str, deque] = defaultdict(deque)
        self.calls: list[tuple[str, str, bool]] = []

    def queue_quote(self, code: str, price: float, timestamp: datetime) -> None:
        self.results[code].append(FetchResult.success(code, Quote(price=price, timestamp=timestamp)))

    def queue_failure(self, code: str, message: str = "connection refused") -> None:
        self.results[code].append(FetchResult.failure(code, NetworkError(message, code=code)))

    def fetch_quote(self, code: str, token: str, use_proxy: bool = True) -> FetchResult:
        self.calls.append((code, token, use_proxy))
        if self.results[code]:
            return self.results[code].popleft()
        return FetchResult.failure(code, NetworkError("no queued result", code=code))


class ManualPoller(SymbolPoller):
    """Poller without a timer; tests drive it with poll_once."""

    def _schedule(self):
        return None


class ManualRotation(RotatingRotation):
    """Rotation without a timer; tests drive it with advance."""

    def start(self) -> None:
        pass


def manual_rotation(config: Configuration):
    if config.display_mode is DisplayMode.FIXED:
        return FixedRotation(config)
    return ManualRotation(config.codes, config.rotate_interval)


class RecordingTray(TraySurface):
    """Tray surface that records every call."""

    def __init__(self):
        self.titles: list[str] = []
        self.tooltips: list[str] = []

    @property
    def title(self) -> Optional[str]:
        return self.titles[-1] if self.titles else None

    def set_title(self, title: str) -> None:
        self.titles.append(title)

    def set_tooltip(self, tooltip: str) -> None:
        self.tooltips.append(tooltip)


def make_config(*codes: str, **overrides: Any) -> Configuration:
    """Configuration with a token and the given instrument codes."""
    params: dict[str, Any] = {"token": "test-token"}
    params.update(overrides)
    return Configuration(
        instruments=tuple(InstrumentConfig(code=code) for code in codes),
        **params
    )


