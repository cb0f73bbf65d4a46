"""Normalized provider results."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..errors import FetchError


@dataclass(frozen=True)
class Quote:
    """Latest close for an instrument."""
    price: float
    timestamp: datetime


@dataclass(frozen=True)
class FetchResult:
    """Result of one fetch attempt: a quote or the reason there is none."""
    code: str
    quote: Optional[Quote] = None
    error: Optional[FetchError] = None
    elapsed_ms: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.quote is not None

    @classmethod
    def success(cls, code: str, quote: Quote, elapsed_ms: Optional[int] = None) -> "FetchResult":
        return cls(code=code, quote=quote, elapsed_ms=elapsed_ms)

    @classmethod
    def failure(cls, code: str, error: FetchError, elapsed_ms: Optional[int] = None) -> "FetchResult":
        return cls(code=code, error=error, elapsed_ms=elapsed_ms)
