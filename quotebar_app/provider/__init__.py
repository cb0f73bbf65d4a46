"""
Quote provider client and its result types.
"""
from .client import QuoteProviderClient, parse_quote
from .models import FetchResult, Quote

__all__ = ["QuoteProviderClient", "parse_quote", "FetchResult", "Quote"]
