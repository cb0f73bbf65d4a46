"""
Error classification for quote fetching, configuration and persistence.
"""

from .fetch_failures import (
    FetchError,
    FetchErrorKind,
    NetworkError,
    ProviderError,
    PayloadError,
)
from .system_failures import (
    SystemFailureError,
    PersistenceError,
    ConfigError,
    StateTransitionError,
)
from .recovery import (
    RecoverableError,
    GracefulDegradationError,
)

__all__ = [
    # Fetch failures
    "FetchError",
    "FetchErrorKind",
    "NetworkError",
    "ProviderError",
    "PayloadError",
    # System failures
    "SystemFailureError",
    "PersistenceError",
    "ConfigError",
    "StateTransitionError",
    # Recovery categories
    "RecoverableError",
    "GracefulDegradationError",
]
