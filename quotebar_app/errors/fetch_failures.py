"""
Quote fetch failure classifications.

A failed fetch is never fatal: pollers turn every one of these into a stale
flag on the instrument's quote state.
"""

from enum import Enum
from typing import Any, Optional

from .recovery import RecoverableError


class FetchErrorKind(str, Enum):
    """Coarse failure categories reported by the provider client."""
    NETWORK = "network"
    BAD_RESPONSE = "bad_response"
    BAD_PAYLOAD = "bad_payload"


class FetchError(RecoverableError):
    """Base class for a failed quote fetch."""

    kind: FetchErrorKind = FetchErrorKind.NETWORK

    def __init__(self, message: str, code: Optional[str] = None,
                 context: Optional[dict[str, Any]] = None):
        super().__init__(message, context=context)
        self.code = code


class NetworkError(FetchError):
    """Transport failure: DNS, connect, timeout or HTTP status error."""

    kind = FetchErrorKind.NETWORK


class ProviderError(FetchError):
    """Provider answered but reported a non-success status."""

    kind = FetchErrorKind.BAD_RESPONSE

    def __init__(self, message: str, ret: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.ret = ret


class PayloadError(FetchError):
    """Success envelope with missing or non-numeric price fields."""

    kind = FetchErrorKind.BAD_PAYLOAD
