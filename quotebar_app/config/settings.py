"""
User configuration model.

A Configuration is replaced wholesale on every load or save; the engine
only ever reads it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .defaults import get_default_config


class DisplayMode(str, Enum):
    """How the tray picks the instrument to show."""
    ROTATE = "rotate"
    FIXED = "fixed"


@dataclass(frozen=True)
class InstrumentConfig:
    """One quoted instrument."""
    code: str
    label: str = ""

    def __post_init__(self) -> None:
        code = self.code.strip()
        object.__setattr__(self, "code", code)
        object.__setattr__(self, "label", self.label.strip() or code)

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "label": self.label}


def _default_instruments() -> tuple[InstrumentConfig, ...]:
    return tuple(
        InstrumentConfig(code=preset.code, label=preset.label)
        for preset in get_default_config().instruments
    )


_DISPLAY = get_default_config().display


@dataclass(frozen=True)
class Configuration:
    """Complete user configuration."""
    token: str = ""
    instruments: tuple[InstrumentConfig, ...] = field(default_factory=_default_instruments)
    display_mode: DisplayMode = DisplayMode(_DISPLAY.display_mode)
    refresh_interval: float = _DISPLAY.refresh_interval
    rotate_interval: float = _DISPLAY.rotate_interval
    fixed_instrument: Optional[str] = None
    use_system_proxy: bool = get_default_config().provider.use_system_proxy
    show_trend: bool = _DISPLAY.show_trend

    @property
    def codes(self) -> list[str]:
        """Configured instrument codes in display order."""
        return [inst.code for inst in self.instruments]

    def instrument(self, code: str) -> Optional[InstrumentConfig]:
        """Look up an instrument by code."""
        for inst in self.instruments:
            if inst.code == code:
                return inst
        return None

    def label_for(self, code: str) -> str:
        inst = self.instrument(code)
        return inst.label if inst else code

    def effective_fixed_instrument(self) -> Optional[str]:
        """
        Code shown in fixed mode.

        Falls back to the first instrument when the configured one is unset
        or no longer in the instrument list.
        """
        if self.fixed_instrument and self.instrument(self.fixed_instrument):
            return self.fixed_instrument
        return self.instruments[0].code if self.instruments else None

    def to_dict(self) -> dict[str, Any]:
        """Persistable mapping."""
        return {
            "token": self.token,
            "instruments": [inst.to_dict() for inst in self.instruments],
            "display_mode": self.display_mode.value,
            "refresh_interval": self.refresh_interval,
            "rotate_interval": self.rotate_interval,
            "fixed_instrument": self.fixed_instrument,
            "use_system_proxy": self.use_system_proxy,
            "show_trend": self.show_trend,
        }
