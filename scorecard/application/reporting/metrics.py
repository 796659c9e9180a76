"""Shared numeric/formatting utilities for scorecard output."""

from __future__ import annotations

from typing import Any


def to_float(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    return float(value)


def safe_ratio(num: float, den: float) -> float | None:
    if den <= 0:
        return None
    return num / den


def round_score(value: float | None, digits: int = 2) -> float | None:
    """Presentation rounding only; engine values stay unrounded."""
    if value is None:
        return None
    return round(value, digits)


def fmt_score(value: float | None) -> str:
    if value is None:
        return "N/A"
    return f"{value:.1f}"


def fmt_delta(value: float | None) -> str:
    if value is None:
        return "N/A"
    return f"{value:+.1f}p"


def fmt_money(value: float | None) -> str:
    if value is None:
        return "0 TL"
    abs_value = abs(value)
    if abs_value >= 1_000_000:
        return f"{abs_value / 1_000_000:.1f}M TL"
    if abs_value >= 1_000:
        return f"{abs_value / 1_000:.0f}K TL"
    return f"{abs_value:.0f} TL"


def fmt_efficiency(value: float | None) -> str:
    if value is None:
        return "N/A"
    return f"{value:.6f}"
