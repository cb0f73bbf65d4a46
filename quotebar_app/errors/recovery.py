"""
Recovery strategy classifications for error handling.

These mixins categorize errors by how the engine recovers from them.
"""

from typing import Any, Optional


class RecoverableError(Exception):
    """Errors the engine recovers from on its own, typically on the next tick."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class GracefulDegradationError(Exception):
    """Errors that allow continued operation with a fallback behaviour."""

    def __init__(self, message: str, degraded_functionality: Optional[str] = None,
                 fallback_strategy: Optional[str] = None, **kwargs):
        super().__init__(message)
        self.degraded_functionality = degraded_functionality
        self.fallback_strategy = fallback_strategy
        self.allows_degradation = True
