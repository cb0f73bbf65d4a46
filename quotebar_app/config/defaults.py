"""Default configuration parameters for the quote display engine."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class IntervalLimits:
    """Bounds applied to user-supplied intervals (seconds)."""
    min_refresh: float = 10.0
    min_rotate: float = 3.0
    max_rotate: float = 3600.0


@dataclass(frozen=True)
class DisplayParams:
    """Display defaults."""
    display_mode: str = "rotate"                     # rotate | fixed
    refresh_interval: float = 10.0                   # Per-instrument poll cadence
    rotate_interval: float = 5.0                     # Rotation cadence
    render_interval: float = 1.0                     # Tray title refresh cadence
    show_trend: bool = False                         # Prefix up/down marker
    stale_marker: str = "*"
    empty_price: str = "--"


@dataclass(frozen=True)
class ProviderParams:
    """Quote provider defaults."""
    base_url: str = "https://quote.alltick.io/quote-b-api/kline"
    timeout_seconds: float = 10.0
    kline_type: str = "1"                            # 1-minute candles
    use_system_proxy: bool = True
    user_agent: str = "quotebar/0.1"


@dataclass(frozen=True)
class InstrumentDefault:
    """An instrument preset."""
    code: str
    label: str


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    limits: IntervalLimits
    display: DisplayParams
    provider: ProviderParams
    instruments: tuple[InstrumentDefault, ...] = field(default_factory=tuple)


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        limits=IntervalLimits(),
        display=DisplayParams(),
        provider=ProviderParams(),
        instruments=(InstrumentDefault(code="XAUUSD", label="XAU"),),
    )
