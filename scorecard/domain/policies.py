"""Named scoring policies: weight normalization, achievement and fallbacks.

Each fallback (missing weight, missing target, unmatched sector share) is a
function of its own so the chosen default can be tested branch by branch.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Sequence

DEFAULT_TARGET = 100.0
DEFAULT_WEIGHT = 1.0
MAX_ACHIEVEMENT = 100.0
ACHIEVED_THRESHOLD = 80.0


def _is_valid_weight(value: float | None) -> bool:
    return value is not None and math.isfinite(value) and value >= 0


def normalize_weights(values: Sequence[float | None]) -> List[float]:
    """Scale raw scores to a distribution summing to 1, uniform when degenerate."""
    count = len(values)
    if count == 0:
        return []
    cleaned = [float(value) if _is_valid_weight(value) else 0.0 for value in values]
    total = sum(cleaned)
    if total <= 0:
        return [1.0 / count] * count
    return [value / total for value in cleaned]


def weight_or_default(weight: float | None) -> float:
    """A missing stored weight counts as 1 so an all-missing group normalizes to uniform."""
    if weight is None:
        return DEFAULT_WEIGHT
    return weight


def resolve_target(target: float | None) -> float:
    """Missing, zero or NaN targets resolve to 100."""
    if target is None or not math.isfinite(target) or target == 0:
        return DEFAULT_TARGET
    return target


def achievement(value: float, target: float | None, floor_negative: bool = False) -> float:
    """Percentage of target reached, capped at 100; no floor unless requested."""
    score = min(MAX_ACHIEVEMENT, (value / resolve_target(target)) * 100.0)
    if floor_negative:
        return max(0.0, score)
    return score


def mean_value(values: Iterable[float]) -> float | None:
    items = list(values)
    if not items:
        return None
    return sum(items) / len(items)


def kpi_achievement(values: Sequence[float], target: float | None, floor_negative: bool = False) -> float | None:
    """Average the raw values first, then score the average."""
    average = mean_value(values)
    if average is None:
        return None
    return achievement(average, target, floor_negative=floor_negative)


def weighted_mean_or_plain(values: Sequence[float], weights: Sequence[float]) -> tuple[float | None, bool]:
    """Weighted mean when the weights carry mass, else the plain mean.

    Returns the mean and whether the weighted path was taken.
    """
    total_weight = sum(weights)
    if total_weight > 0:
        weighted_sum = sum(value * weight for value, weight in zip(values, weights))
        return weighted_sum / total_weight, True
    return mean_value(values), False


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def performance_tier(score: float) -> str:
    if score >= 90:
        return "platinum"
    if score >= 80:
        return "gold"
    if score >= 70:
        return "silver"
    return "bronze"


def trend_direction(delta: float | None) -> str:
    if delta is None:
        return "stable"
    if delta > 0:
        return "up"
    if delta < 0:
        return "down"
    return "stable"
