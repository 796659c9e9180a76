"""Alert rule conditions over a single KPI submission.

Rules themselves (cooldowns, recipients, delivery) live outside the engine; this
module only decides whether one condition holds for a value and its target.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence, Tuple

from scorecard.domain.models import _to_optional_float, _to_optional_str
from scorecard.domain.policies import resolve_target
from scorecard.errors import InvalidModeError

CONDITION_TYPES: Tuple[str, ...] = ("threshold", "target_miss", "no_data", "trend", "anomaly")
OPERATORS: Tuple[str, ...] = ("<", ">", "<=", ">=", "=")
COMPARISONS: Tuple[str, ...] = ("absolute", "percentage")
EQUALITY_TOLERANCE = 0.01
DEFAULT_NO_DATA_MINUTES = 60.0


def _choice(raw: Any, allowed: Tuple[str, ...], name: str, default: str | None = None) -> str | None:
    text = _to_optional_str(raw)
    if text is None:
        return default
    normalized = text.lower()
    if normalized not in allowed:
        raise InvalidModeError(f"{name} must be one of {allowed}, got {raw!r}")
    return normalized


@dataclass(frozen=True)
class AlertCondition:
    type: str
    kpi_id: str | None = None
    operator: str | None = None
    value: float | None = None
    duration_minutes: float | None = None
    comparison: str = "absolute"

    def __post_init__(self) -> None:
        if self.type not in CONDITION_TYPES:
            raise InvalidModeError(f"type must be one of {CONDITION_TYPES}, got {self.type!r}")
        if self.operator is not None and self.operator not in OPERATORS:
            raise InvalidModeError(f"operator must be one of {OPERATORS}, got {self.operator!r}")
        if self.comparison not in COMPARISONS:
            raise InvalidModeError(f"comparison must be one of {COMPARISONS}, got {self.comparison!r}")

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "AlertCondition":
        return cls(
            type=_choice(row.get("type"), CONDITION_TYPES, "type") or "",
            kpi_id=_to_optional_str(row.get("kpi_id")),
            operator=_choice(row.get("operator"), OPERATORS, "operator"),
            value=_to_optional_float(row.get("value")),
            duration_minutes=_to_optional_float(row.get("duration_minutes")),
            comparison=_choice(row.get("comparison"), COMPARISONS, "comparison", default="absolute") or "absolute",
        )

    def applies_to(self, kpi_id: str) -> bool:
        return self.kpi_id is None or self.kpi_id == kpi_id


def percent_of_target(value: float, target: float | None) -> float:
    """Uncapped share of target, using the same target fallback as achievement."""
    return value / resolve_target(target) * 100.0


def _compare(left: float, operator: str, right: float) -> bool:
    if operator == "<":
        return left < right
    if operator == ">":
        return left > right
    if operator == "<=":
        return left <= right
    if operator == ">=":
        return left >= right
    return abs(left - right) < EQUALITY_TOLERANCE


def evaluate(
    condition: AlertCondition,
    value: float | None,
    target: float | None,
    age_minutes: float | None = None,
) -> bool:
    """Whether ``condition`` holds for the latest submission of a KPI.

    ``value`` is None when the factory has not submitted the KPI at all and
    ``age_minutes`` is the time since the latest submission. Trend and anomaly
    conditions need a series, not one submission, so they never hold here.
    """
    if condition.type == "threshold":
        if value is None or condition.value is None or condition.operator is None:
            return False
        compared = percent_of_target(value, target) if condition.comparison == "percentage" else value
        return _compare(compared, condition.operator, condition.value)

    if condition.type == "target_miss":
        if value is None or condition.value is None:
            return False
        return percent_of_target(value, target) < condition.value

    if condition.type == "no_data":
        if value is None:
            return True
        if age_minutes is None:
            return False
        limit = DEFAULT_NO_DATA_MINUTES if condition.duration_minutes is None else condition.duration_minutes
        return age_minutes > limit

    return False


def any_condition_met(
    conditions: Sequence[AlertCondition],
    kpi_id: str,
    value: float | None,
    target: float | None,
    age_minutes: float | None = None,
) -> bool:
    """A rule fires when any of its conditions holds for the KPI."""
    return any(
        evaluate(condition, value, target, age_minutes=age_minutes)
        for condition in conditions
        if condition.applies_to(kpi_id)
    )
