"""
Configuration and persistence error classifications.

None of these reach the pollers: configuration problems degrade to a
fallback and persistence problems are reported to the settings surface.
"""

from typing import Any, Optional

from .recovery import GracefulDegradationError


class SystemFailureError(Exception):
    """Base class for failures outside the polling path."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class PersistenceError(SystemFailureError):
    """Settings or token file could not be read or written."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target


class ConfigError(GracefulDegradationError):
    """Invalid configuration value that the engine works around."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value


class StateTransitionError(SystemFailureError):
    """Lifecycle method called in a state that does not allow it."""

    def __init__(self, message: str, current_state: Optional[str] = None,
                 attempted_transition: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.current_state = current_state
        self.attempted_transition = attempted_transition
