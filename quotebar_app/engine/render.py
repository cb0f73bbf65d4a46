"""
Title rendering.

Pure functions from quote state to the strings shown in the tray and copied
to the clipboard.
"""

from typing import Optional

from ..config.defaults import get_default_config
from ..quotes.models import QuoteState, Trend
from ..utils.time import format_clock_time

_DISPLAY = get_default_config().display

STALE_MARKER = _DISPLAY.stale_marker
EMPTY_PRICE = _DISPLAY.empty_price
NO_INSTRUMENT_TITLE = f"Quotebar {EMPTY_PRICE}"

TREND_MARKERS = {
    Trend.UP: "🟢",
    Trend.DOWN: "🔴",
    Trend.FLAT: "⚪",
}


def mark_stale(title: str) -> str:
    """Append the stale marker once."""
    return title if title.endswith(STALE_MARKER) else f"{title}{STALE_MARKER}"


def render_title(code: str, state: Optional[QuoteState], show_trend: bool = False) -> str:
    """
    Render the tray title for one instrument.

    Args:
        code: Instrument code shown as the title prefix
        state: Current quote state, or None if the poller has not started
        show_trend: Prefix the title with an up/down/flat marker

    Returns:
        ``"{code} {price:.2f} {HH:MM:SS}"``, a ``"{code} --"`` placeholder
        before the first quote, with a single trailing marker when stale
    """
    if state is None or not state.has_quote:
        title = f"{code} {EMPTY_PRICE}"
    else:
        title = f"{code} {state.last_good_price:.2f} {format_clock_time(state.last_good_timestamp)}"
        if show_trend:
            title = f"{TREND_MARKERS[state.trend]} {title}"

    if state is not None and state.stale:
        title = mark_stale(title)
    return title


def render_missing_token(code: Optional[str]) -> str:
    """Title shown while no provider token is configured."""
    return f"{code or 'Quotebar'} {EMPTY_PRICE} (set token)"


def render_copy_text(label: str, state: Optional[QuoteState]) -> Optional[str]:
    """Clipboard text ``"{label} {price:.2f} @ {HH:MM:SS}"``, None before any quote."""
    if state is None or not state.has_quote:
        return None
    return f"{label} {state.last_good_price:.2f} @ {format_clock_time(state.last_good_timestamp)}"


def render_tooltip(labels: list[str]) -> str:
    """Tray tooltip listing the configured instruments."""
    return " / ".join(labels) if labels else "Quotebar"
