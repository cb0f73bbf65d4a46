"""Configuration validation and normalization."""

import math
from dataclasses import dataclass
from typing import Any, Optional

import structlog

from ..errors import ConfigError
from .defaults import IntervalLimits, get_default_config
from .settings import Configuration, DisplayMode, InstrumentConfig

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


class ConfigValidator:
    """Validates and normalizes persisted settings mappings."""

    @staticmethod
    def validate_instruments(instruments: Any) -> list[ValidationError]:
        """Validate the instrument list."""
        errors = []

        if not isinstance(instruments, list):
            errors.append(ValidationError(
                field="instruments",
                message="Must be a list of instruments",
                value=instruments
            ))
            return errors

        seen: set[str] = set()
        for index, entry in enumerate(instruments):
            code = entry.get("code") if isinstance(entry, dict) else entry
            if not isinstance(code, str) or not code.strip():
                errors.append(ValidationError(
                    field=f"instruments[{index}].code",
                    message="Must be a non-empty string",
                    value=code
                ))
                continue
            if code.strip() in seen:
                errors.append(ValidationError(
                    field=f"instruments[{index}].code",
                    message="Duplicate instrument code",
                    value=code
                ))
            seen.add(code.strip())

        return errors

    @staticmethod
    def validate_intervals(params: dict[str, Any],
                           limits: Optional[IntervalLimits] = None) -> list[ValidationError]:
        """Validate refresh and rotate intervals."""
        limits = limits or get_default_config().limits
        errors = []

        if "refresh_interval" in params:
            value = params["refresh_interval"]
            if not _is_number(value) or value < limits.min_refresh:
                errors.append(ValidationError(
                    field="refresh_interval",
                    message=f"Must be a number >= {limits.min_refresh:g}",
                    value=value
                ))

        if "rotate_interval" in params:
            value = params["rotate_interval"]
            if not _is_number(value) or not limits.min_rotate <= value <= limits.max_rotate:
                errors.append(ValidationError(
                    field="rotate_interval",
                    message=f"Must be a number between {limits.min_rotate:g} and {limits.max_rotate:g}",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_settings(settings: dict[str, Any]) -> list[ValidationError]:
        """Validate a complete settings mapping."""
        errors = []

        if "token" in settings and not isinstance(settings["token"], str):
            errors.append(ValidationError(
                field="token",
                message="Must be a string",
                value=settings["token"]
            ))

        if "instruments" in settings:
            errors.extend(ConfigValidator.validate_instruments(settings["instruments"]))

        if "display_mode" in settings:
            value = settings["display_mode"]
            if value not in [mode.value for mode in DisplayMode]:
                errors.append(ValidationError(
                    field="display_mode",
                    message="Must be 'rotate' or 'fixed'",
                    value=value
                ))

        errors.extend(ConfigValidator.validate_intervals(settings))

        for flag in ("use_system_proxy", "show_trend"):
            if flag in settings and not isinstance(settings[flag], bool):
                errors.append(ValidationError(
                    field=flag,
                    message="Must be a boolean",
                    value=settings[flag]
                ))

        fixed = settings.get("fixed_instrument")
        if fixed is not None:
            codes = [
                (entry.get("code") if isinstance(entry, dict) else entry)
                for entry in settings.get("instruments") or []
            ]
            codes = [c.strip() for c in codes if isinstance(c, str)]
            if not isinstance(fixed, str) or fixed.strip() not in codes:
                errors.append(ValidationError(
                    field="fixed_instrument",
                    message="Must reference a configured instrument",
                    value=fixed
                ))

        return errors


def normalize_settings(settings: Any) -> Configuration:
    """
    Build a Configuration from a persisted mapping.

    Recoverable problems are repaired in place: blank and duplicate codes are
    dropped, intervals are clamped into range, unknown enum values fall back
    to defaults and a fixed instrument that is not configured is cleared.

    Raises:
        ConfigError: If the mapping has the wrong overall shape
    """
    defaults = get_default_config()
    limits = defaults.limits
    base = Configuration()

    if settings is None:
        return base
    if not isinstance(settings, dict):
        raise ConfigError("Settings must be a mapping", field="<root>", value=settings,
                          fallback_strategy="defaults")

    problems = ConfigValidator.validate_settings(settings)
    for problem in problems:
        logger.warning(
            "Repairing invalid setting",
            field=problem.field,
            reason=problem.message,
            value=problem.value
        )

    raw_instruments = settings.get("instruments")
    if raw_instruments is None:
        instruments = base.instruments
    elif isinstance(raw_instruments, list):
        collected: list[InstrumentConfig] = []
        seen: set[str] = set()
        for entry in raw_instruments:
            if isinstance(entry, dict):
                code, label = entry.get("code"), entry.get("label") or ""
            else:
                code, label = entry, ""
            if not isinstance(code, str) or not code.strip() or code.strip() in seen:
                continue
            inst = InstrumentConfig(code=code, label=label if isinstance(label, str) else "")
            seen.add(inst.code)
            collected.append(inst)
        instruments = tuple(collected)
    else:
        raise ConfigError("Instruments must be a list", field="instruments",
                          value=raw_instruments, fallback_strategy="defaults")

    try:
        display_mode = DisplayMode(settings.get("display_mode", base.display_mode.value))
    except ValueError:
        display_mode = base.display_mode

    refresh = settings.get("refresh_interval", base.refresh_interval)
    if not _is_number(refresh):
        refresh = base.refresh_interval
    refresh = max(float(refresh), limits.min_refresh)

    rotate = settings.get("rotate_interval", base.rotate_interval)
    if not _is_number(rotate):
        rotate = base.rotate_interval
    rotate = min(max(float(rotate), limits.min_rotate), limits.max_rotate)

    fixed = settings.get("fixed_instrument")
    fixed = fixed.strip() if isinstance(fixed, str) else None
    if fixed not in [inst.code for inst in instruments]:
        fixed = None

    token = settings.get("token", "")
    token = token.strip() if isinstance(token, str) else ""

    use_proxy = settings.get("use_system_proxy", base.use_system_proxy)
    show_trend = settings.get("show_trend", base.show_trend)

    return Configuration(
        token=token,
        instruments=instruments,
        display_mode=display_mode,
        refresh_interval=refresh,
        rotate_interval=rotate,
        fixed_instrument=fixed,
        use_system_proxy=use_proxy if isinstance(use_proxy, bool) else base.use_system_proxy,
        show_trend=show_trend if isinstance(show_trend, bool) else base.show_trend,
    )
