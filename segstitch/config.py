"""
Configuration for segstitch.

Settings are frozen dataclasses read from environment variables. Values that
cannot be parsed, or that fall outside their valid range, are replaced by the
default and a warning is logged.

Environment:
    SEGSTITCH_BOUNDARY_SLACK_SECONDS: Slack added to every boundary wake-up.
    SEGSTITCH_GAP_RECHECK_SECONDS: Re-check delay while playback is between events.
    SEGSTITCH_USE_COLOR: Whether terminal output is colorized.
    SEGSTITCH_TIME_PRECISION: Fractional digits in rendered times.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_BOUNDARY_SLACK_SECONDS = 0.005
DEFAULT_GAP_RECHECK_SECONDS = 0.25
DEFAULT_TIME_PRECISION = 2

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class SchedulerConfig:
    """Timing controls of the boundary scheduler."""

    slack_seconds: float = DEFAULT_BOUNDARY_SLACK_SECONDS
    gap_recheck_seconds: float = DEFAULT_GAP_RECHECK_SECONDS


@dataclass(frozen=True)
class DisplayConfig:
    """Terminal rendering controls."""

    use_color: bool = True
    time_precision: int = DEFAULT_TIME_PRECISION


@dataclass(frozen=True)
class AppConfig:
    """Top-level application settings."""

    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)


def _env_float(name: str, default: float, *, minimum: float, strict: bool) -> float:
    """Reads a float variable, falling back to ``default`` when invalid."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number.", name, raw)
        return default
    if not math.isfinite(value) or value < minimum or (strict and value == minimum):
        logger.warning("Ignoring %s=%r: out of range.", name, raw)
        return default
    return value


def _env_int(name: str, default: int, *, minimum: int) -> int:
    """Reads an integer variable, falling back to ``default`` when invalid."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer.", name, raw)
        return default
    if value < minimum:
        logger.warning("Ignoring %s=%r: out of range.", name, raw)
        return default
    return value


def _env_bool(name: str, default: bool) -> bool:
    """Reads a boolean variable, falling back to ``default`` when invalid."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    logger.warning("Ignoring %s=%r: not a boolean.", name, raw)
    return default


def _load_settings() -> AppConfig:
    return AppConfig(
        scheduler=SchedulerConfig(
            slack_seconds=_env_float(
                "SEGSTITCH_BOUNDARY_SLACK_SECONDS",
                DEFAULT_BOUNDARY_SLACK_SECONDS,
                minimum=0.0,
                strict=False,
            ),
            gap_recheck_seconds=_env_float(
                "SEGSTITCH_GAP_RECHECK_SECONDS",
                DEFAULT_GAP_RECHECK_SECONDS,
                minimum=0.0,
                strict=True,
            ),
        ),
        display=DisplayConfig(
            use_color=_env_bool("SEGSTITCH_USE_COLOR", True),
            time_precision=_env_int(
                "SEGSTITCH_TIME_PRECISION", DEFAULT_TIME_PRECISION, minimum=0
            ),
        ),
    )


_SETTINGS: AppConfig | None = None


def get_settings() -> AppConfig:
    """Returns cached settings, loading them on first use."""
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = _load_settings()
    return _SETTINGS


def reload_settings() -> AppConfig:
    """Re-reads settings from the environment and replaces the cache."""
    global _SETTINGS
    _SETTINGS = _load_settings()
    return _SETTINGS
