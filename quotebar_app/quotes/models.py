"""
Quote state data model.

QuoteState is immutable; pollers replace it with the result of
with_success or with_failure so last-good values cannot be lost.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional


class Trend(str, Enum):
    """Direction of the latest price relative to the one before it."""
    UP = "up"
    DOWN = "down"
    FLAT = "flat"


@dataclass(frozen=True)
class QuoteState:
    """Latest known quote for one instrument."""

    last_good_price: Optional[float] = None
    last_good_timestamp: Optional[datetime] = None
    stale: bool = False
    previous_price: Optional[float] = None           # Last good price before the current one

    @property
    def has_quote(self) -> bool:
        return self.last_good_price is not None and self.last_good_timestamp is not None

    @property
    def trend(self) -> Trend:
        if self.last_good_price is None or self.previous_price is None:
            return Trend.FLAT
        if self.last_good_price > self.previous_price:
            return Trend.UP
        if self.last_good_price < self.previous_price:
            return Trend.DOWN
        return Trend.FLAT

    def with_success(self, price: float, timestamp: datetime) -> "QuoteState":
        """State after a successful fetch."""
        return QuoteState(
            last_good_price=price,
            last_good_timestamp=timestamp,
            stale=False,
            previous_price=self.last_good_price,
        )

    def with_failure(self) -> "QuoteState":
        """State after a failed fetch; last-good values are kept."""
        return replace(self, stale=True)
