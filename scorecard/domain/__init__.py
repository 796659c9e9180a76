"""Domain layer package."""

from .alerts import AlertCondition, any_condition_met, evaluate
from .models import (
    AccessScope,
    Action,
    ActionBudget,
    ActionKpi,
    ActionStep,
    EvidenceRecord,
    Factory,
    Kpi,
    KpiValue,
    SectorShare,
    StrategicGoal,
    StrategicTarget,
    TargetWeightOverride,
)
from .periods import parse_period, period_window, previous_period, sort_periods
from .policies import achievement, kpi_achievement, normalize_weights, resolve_target

__all__ = [
    "AlertCondition",
    "any_condition_met",
    "evaluate",
    "AccessScope",
    "Action",
    "ActionBudget",
    "ActionKpi",
    "ActionStep",
    "EvidenceRecord",
    "Factory",
    "Kpi",
    "KpiValue",
    "SectorShare",
    "StrategicGoal",
    "StrategicTarget",
    "TargetWeightOverride",
    "parse_period",
    "period_window",
    "previous_period",
    "sort_periods",
    "achievement",
    "kpi_achievement",
    "normalize_weights",
    "resolve_target",
]
