"""
Per-instrument quote state and the store the renderer reads from.
"""
from .models import QuoteState, Trend
from .store import QuoteStore

__all__ = ["QuoteState", "QuoteStore", "Trend"]
