"""Environment-driven settings for the scorecard engine."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

DEFAULT_MIN_GROUP_SIZE = 5
DEFAULT_TOP_MOVERS = 8
DEFAULT_PARSE_ERROR_THRESHOLD = 0.01
DEFAULT_PERIOD = "2024-Q4"

_PERIOD_PATTERN = re.compile(r"^\d{4}-Q[1-4]$")
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    min_group_size: int = DEFAULT_MIN_GROUP_SIZE
    top_movers: int = DEFAULT_TOP_MOVERS
    floor_negative: bool = False
    parse_error_threshold: float = DEFAULT_PARSE_ERROR_THRESHOLD
    default_period: str = DEFAULT_PERIOD


def _positive_int(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid {name}: {raw}") from exc
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")
    return value


def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    text = raw.strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid {name}: {raw}")


def _ratio(name: str, default: float) -> float:
    raw = os.getenv(name, str(default))
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid {name}: {raw}") from exc
    if value < 0 or value > 1:
        raise ValueError(f"{name} must be in [0, 1], got {value}")
    return value


def _period(name: str, default: str) -> str:
    raw = os.getenv(name, default).strip()
    if not _PERIOD_PATTERN.match(raw):
        raise ValueError(f"{name} must look like YYYY-Qn, got {raw}")
    return raw


def load_settings() -> Settings:
    """Read SCORECARD_* variables; invalid values raise ValueError naming the variable."""
    return Settings(
        min_group_size=_positive_int("SCORECARD_MIN_GROUP_SIZE", DEFAULT_MIN_GROUP_SIZE),
        top_movers=_positive_int("SCORECARD_TOP_MOVERS", DEFAULT_TOP_MOVERS),
        floor_negative=_flag("SCORECARD_FLOOR_NEGATIVE", False),
        parse_error_threshold=_ratio("SCORECARD_PARSE_ERROR_THRESHOLD", DEFAULT_PARSE_ERROR_THRESHOLD),
        default_period=_period("SCORECARD_DEFAULT_PERIOD", DEFAULT_PERIOD),
    )
