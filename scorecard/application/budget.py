"""Budget efficiency: action effect scores per unit of planned spend at SH/SA level."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence, Tuple

from scorecard.application.reporting.metrics import safe_ratio
from scorecard.domain.models import Action, ActionBudget, ActionKpi, ActionStep, Kpi, KpiValue, StrategicTarget
from scorecard.domain.policies import kpi_achievement
from scorecard.errors import InvalidModeError

MODES: Tuple[str, ...] = ("gap", "delta")
DEFAULT_IMPACT_SCORE = 0.5


def validate_mode(mode: str) -> str:
    normalized = str(mode or "").strip().lower()
    if normalized not in MODES:
        raise InvalidModeError(f"mode must be one of {MODES}, got {mode!r}")
    return normalized


def impact_effect(
    impact_score: float,
    completion_percent: float,
    current_achievement: float,
    previous_achievement: float,
    mode: str,
) -> float:
    """Effect of one impact link; achievements are fractions of target in [.., 1]."""
    completion = completion_percent / 100.0
    if mode == "delta":
        return impact_score * completion * max(0.0, current_achievement - previous_achievement)
    return impact_score * completion * (1.0 - current_achievement)


def achievement_fraction(values: Sequence[float], target: float | None, floor_negative: bool = False) -> float:
    """Achievement of the averaged values as a fraction; no submissions count as 0."""
    score = kpi_achievement(values, target, floor_negative=floor_negative)
    return 0.0 if score is None else score / 100.0


def resolve_costs(
    steps: Sequence[ActionStep],
    budgets: Sequence[ActionBudget],
    period: str,
) -> Tuple[float, float]:
    """Period-scoped step costs when they sum above zero, else the action-level budget.

    Steps without a period apply to every period.
    """
    scoped = [step for step in steps if step.period is None or step.period == period]
    step_planned = sum(step.planned_cost for step in scoped)
    step_actual = sum(step.actual_cost for step in scoped)
    budget = budgets[0] if budgets else None
    planned = step_planned if step_planned > 0 else (budget.planned_amount if budget else 0.0)
    actual = step_actual if step_actual > 0 else (budget.actual_amount if budget else 0.0)
    return planned, actual


@dataclass(frozen=True)
class ActionEffect:
    action_id: str
    strategic_target_id: str
    planned: float
    actual: float
    effect_score: float
    impact_links: int


@dataclass(frozen=True)
class BudgetLine:
    code: str
    total_planned: float
    total_actual: float
    total_effect: float
    action_count: int

    @property
    def efficiency(self) -> float | None:
        """Effect per planned currency unit; None (not 0) when nothing was planned."""
        return safe_ratio(self.total_effect, self.total_planned)


def score_action(
    action: Action,
    links: Sequence[ActionKpi],
    kpis: Mapping[str, Kpi],
    current_values: Mapping[str, Sequence[float]],
    previous_values: Mapping[str, Sequence[float]],
    steps: Sequence[ActionStep],
    budgets: Sequence[ActionBudget],
    period: str,
    mode: str,
    floor_negative: bool = False,
) -> ActionEffect:
    effects: List[float] = []
    for link in links:
        kpi = kpis.get(link.kpi_id)
        target = kpi.target_value if kpi is not None else None
        current = achievement_fraction(current_values.get(link.kpi_id, ()), target, floor_negative)
        previous = achievement_fraction(previous_values.get(link.kpi_id, ()), target, floor_negative)
        impact = DEFAULT_IMPACT_SCORE if link.impact_score is None else link.impact_score
        effects.append(impact_effect(impact, action.completion_percent, current, previous, mode))

    effect = sum(effects) / len(effects) if effects else 0.0
    planned, actual = resolve_costs(steps, budgets, period)
    return ActionEffect(
        action_id=action.id,
        strategic_target_id=action.strategic_target_id,
        planned=planned,
        actual=actual,
        effect_score=effect,
        impact_links=len(effects),
    )


def _values_by_kpi(values: Sequence[KpiValue], period: str) -> Dict[str, List[float]]:
    grouped: Dict[str, List[float]] = {}
    for value in values:
        if value.period == period:
            grouped.setdefault(value.kpi_id, []).append(value.value)
    return grouped


def score_actions(
    actions: Sequence[Action],
    action_kpis: Sequence[ActionKpi],
    action_budgets: Sequence[ActionBudget],
    action_steps: Sequence[ActionStep],
    kpis: Sequence[Kpi],
    values: Sequence[KpiValue],
    period: str,
    previous_period: str,
    mode: str = "gap",
    floor_negative: bool = False,
) -> List[ActionEffect]:
    mode = validate_mode(mode)
    kpi_index = {kpi.id: kpi for kpi in kpis}
    current_values = _values_by_kpi(values, period)
    previous_values = _values_by_kpi(values, previous_period)

    links: Dict[str, List[ActionKpi]] = {}
    for link in action_kpis:
        links.setdefault(link.action_id, []).append(link)
    budgets: Dict[str, List[ActionBudget]] = {}
    for budget in action_budgets:
        budgets.setdefault(budget.action_id, []).append(budget)
    steps: Dict[str, List[ActionStep]] = {}
    for step in action_steps:
        steps.setdefault(step.action_id, []).append(step)

    return [
        score_action(
            action,
            links.get(action.id, []),
            kpi_index,
            current_values,
            previous_values,
            steps.get(action.id, []),
            budgets.get(action.id, []),
            period,
            mode,
            floor_negative,
        )
        for action in actions
    ]


def _sum_lines(groups: Mapping[str, List[ActionEffect]]) -> List[BudgetLine]:
    return [
        BudgetLine(
            code=code,
            total_planned=sum(item.planned for item in effects),
            total_actual=sum(item.actual for item in effects),
            total_effect=sum(item.effect_score for item in effects),
            action_count=len(effects),
        )
        for code, effects in sorted(groups.items())
    ]


def aggregate_effects(
    effects: Sequence[ActionEffect],
    targets: Sequence[StrategicTarget],
    goal_codes: Mapping[str, str],
) -> Tuple[List[BudgetLine], List[BudgetLine]]:
    """Plain sums per SA and per SH; actions under an unknown target are skipped."""
    target_index = {target.id: target for target in targets}
    by_goal: Dict[str, List[ActionEffect]] = {}
    by_target: Dict[str, List[ActionEffect]] = {}
    for effect in effects:
        target = target_index.get(effect.strategic_target_id)
        if target is None:
            continue
        goal_code = goal_codes.get(target.strategic_goal_id)
        if goal_code is None:
            continue
        by_goal.setdefault(goal_code, []).append(effect)
        by_target.setdefault(target.code, []).append(effect)
    return _sum_lines(by_goal), _sum_lines(by_target)
