"""HTTP client for the AllTick kline quote endpoint."""

import json
import math
import socket
import time
from http.client import HTTPException
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import OpenerDirector, ProxyHandler, Request, build_opener

import structlog

from ..config.defaults import ProviderParams, get_default_config
from ..errors import FetchError, NetworkError, PayloadError, ProviderError
from ..utils.time import from_unix_seconds
from .models import FetchResult, Quote

logger = structlog.get_logger(__name__)

SUCCESS_RET = 200


def _first_kline(payload: Any) -> Optional[dict[str, Any]]:
    data = payload.get("data") if isinstance(payload, dict) else None
    klines = data.get("kline_list") if isinstance(data, dict) else None
    if not isinstance(klines, list) or not klines or not isinstance(klines[0], dict):
        return None
    return klines[0]


def _to_finite(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_quote(payload: Any) -> Optional[Quote]:
    """
    Extract the latest close from a provider response envelope.

    Total: any shape other than a success envelope whose first kline has
    finite close_price and timestamp yields None.
    """
    if not isinstance(payload, dict) or payload.get("ret") != SUCCESS_RET:
        return None

    kline = _first_kline(payload)
    if kline is None:
        return None

    price = _to_finite(kline.get("close_price"))
    ts = _to_finite(kline.get("timestamp"))
    if price is None or ts is None:
        return None

    try:
        return Quote(price=price, timestamp=from_unix_seconds(ts))
    except ValueError:
        return None


class QuoteProviderClient:
    """Fetches one quote per call; no caching and no retries."""

    def __init__(self, params: Optional[ProviderParams] = None):
        self.params = params or get_default_config().provider
        self._proxied = build_opener(ProxyHandler())
        self._direct = build_opener(ProxyHandler({}))

    def _opener(self, use_proxy: bool) -> OpenerDirector:
        return self._proxied if use_proxy else self._direct

    def build_url(self, code: str, token: str) -> str:
        """Kline request URL asking for the single most recent candle."""
        query = json.dumps({
            "data": {
                "code": code,
                "kline_type": self.params.kline_type,
                "kline_timestamp_end": "0",
                "query_kline_num": "1",
                "adjust_type": "0",
            }
        }, separators=(",", ":"))
        return f"{self.params.base_url}?{urlencode({'token': token, 'query': query})}"

    def fetch_quote(self, code: str, token: str, use_proxy: bool = True) -> FetchResult:
        """
        Fetch the latest quote for one instrument.

        Args:
            code: Provider instrument code
            token: Bearer token passed as the provider's query parameter
            use_proxy: Route through the system proxy

        Returns:
            FetchResult carrying either a Quote or a FetchError
        """
        start_time = time.monotonic()
        try:
            quote = self._fetch(code, token, use_proxy)
        except FetchError as e:
            elapsed = int((time.monotonic() - start_time) * 1000)
            logger.debug(
                "Quote fetch failed",
                code=code,
                error_kind=e.kind.value,
                error=str(e),
                elapsed_ms=elapsed
            )
            return FetchResult.failure(code, e, elapsed_ms=elapsed)

        elapsed = int((time.monotonic() - start_time) * 1000)
        logger.debug("Quote fetched", code=code, price=quote.price, elapsed_ms=elapsed)
        return FetchResult.success(code, quote, elapsed_ms=elapsed)

    def _fetch(self, code: str, token: str, use_proxy: bool) -> Quote:
        req = Request(
            self.build_url(code, token),
            headers={
                "Accept": "application/json",
                "Cache-Control": "no-cache",
                "Pragma": "no-cache",
                "User-Agent": self.params.user_agent,
            },
            method="GET"
        )

        try:
            with self._opener(use_proxy).open(req, timeout=self.params.timeout_seconds) as response:
                raw = response.read()
        except HTTPError as e:
            raise NetworkError(f"HTTP {e.code}: {e.reason}", code=code,
                               context={"status": e.code}) from e
        except (OSError, URLError, socket.timeout, HTTPException) as e:
            raise NetworkError(f"Network error: {e}", code=code) from e

        try:
            body = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProviderError("Response is not UTF-8", code=code,
                                context={"body": raw[:200].hex()}) from e

        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            raise ProviderError("Response is not JSON", code=code,
                                context={"body": body[:200]}) from e

        if not isinstance(payload, dict) or payload.get("ret") != SUCCESS_RET:
            ret = payload.get("ret") if isinstance(payload, dict) else None
            msg = payload.get("msg") if isinstance(payload, dict) else None
            raise ProviderError(f"Provider returned ret={ret}: {msg}", ret=ret, code=code)

        quote = parse_quote(payload)
        if quote is None:
            raise PayloadError("Missing or non-numeric kline fields", code=code,
                               context={"kline": _first_kline(payload)})
        return quote
