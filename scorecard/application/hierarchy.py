"""KPI -> Strategic Target (SH) -> Strategic Goal (SA) weighted roll-up, one period at a time."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence

from scorecard.application.sector_adjuster import adjusted_mean
from scorecard.domain.models import Kpi, KpiValue, StrategicGoal, StrategicTarget
from scorecard.domain.policies import achievement, normalize_weights, weight_or_default


@dataclass(frozen=True)
class KpiScore:
    kpi_id: str
    number: int
    strategic_target_id: str
    period: str
    achievement: float | None
    raw_value: float | None
    value_count: int
    sector_weighted: bool = False

    @property
    def score(self) -> float:
        """Contribution to the parent; a KPI without a value in the period counts as 0."""
        return 0.0 if self.achievement is None else self.achievement


@dataclass(frozen=True)
class TargetScore:
    target_id: str
    code: str
    title: str
    strategic_goal_id: str
    period: str
    score: float
    override: float | None
    kpi_scores: tuple[KpiScore, ...]


@dataclass(frozen=True)
class GoalScore:
    goal_id: str
    code: str
    title: str
    period: str
    score: float
    target_scores: tuple[TargetScore, ...]


@dataclass(frozen=True)
class HierarchySnapshot:
    period: str
    goals: tuple[GoalScore, ...]

    def target_scores(self) -> List[TargetScore]:
        return [target for goal in self.goals for target in goal.target_scores]

    def kpi_scores(self) -> List[KpiScore]:
        return [kpi for target in self.target_scores() for kpi in target.kpi_scores]

    def goal(self, code: str) -> GoalScore | None:
        return next((goal for goal in self.goals if goal.code == code), None)

    def target(self, code: str) -> TargetScore | None:
        return next((target for target in self.target_scores() if target.code == code), None)


def weighted_score(scores: Sequence[float], raw_weights: Sequence[float | None]) -> float:
    """Sum of scores times normalized weights; no children scores 0."""
    if not scores:
        return 0.0
    weights = normalize_weights([weight_or_default(weight) for weight in raw_weights])
    return sum(score * weight for score, weight in zip(scores, weights))


class HierarchyAggregator:
    """Stateless roll-up over a fixed goal/target/KPI tree."""

    def __init__(
        self,
        goals: Sequence[StrategicGoal],
        targets: Sequence[StrategicTarget],
        kpis: Sequence[Kpi],
        floor_negative: bool = False,
    ) -> None:
        self.goals = list(goals)
        self.floor_negative = floor_negative
        self._targets_by_goal: Dict[str, List[StrategicTarget]] = {}
        for target in targets:
            self._targets_by_goal.setdefault(target.strategic_goal_id, []).append(target)
        self._kpis_by_target: Dict[str, List[Kpi]] = {}
        for kpi in kpis:
            self._kpis_by_target.setdefault(kpi.strategic_target_id, []).append(kpi)

    def targets_of(self, goal_id: str) -> List[StrategicTarget]:
        return self._targets_by_goal.get(goal_id, [])

    def kpis_of(self, target_id: str) -> List[Kpi]:
        return self._kpis_by_target.get(target_id, [])

    def score_kpi(
        self,
        kpi: Kpi,
        period: str,
        values: Sequence[KpiValue],
        shares: Mapping[str, float] | None = None,
    ) -> KpiScore:
        adjusted = adjusted_mean(values, shares)
        score = None
        if adjusted.value is not None:
            score = achievement(adjusted.value, kpi.target_value, floor_negative=self.floor_negative)
        return KpiScore(
            kpi_id=kpi.id,
            number=kpi.number,
            strategic_target_id=kpi.strategic_target_id,
            period=period,
            achievement=score,
            raw_value=adjusted.value,
            value_count=len(values),
            sector_weighted=adjusted.weighted,
        )

    def score_target(
        self,
        target: StrategicTarget,
        period: str,
        values_by_kpi: Mapping[str, Sequence[KpiValue]],
        shares: Mapping[str, float] | None = None,
        override: float | None = None,
    ) -> TargetScore:
        kpis = self.kpis_of(target.id)
        kpi_scores = tuple(self.score_kpi(kpi, period, values_by_kpi.get(kpi.id, ()), shares) for kpi in kpis)
        score = weighted_score([item.score for item in kpi_scores], [kpi.sh_weight for kpi in kpis])
        if override is not None:
            # applied after normalization, so it can lift the SH above 100
            score *= override
        return TargetScore(
            target_id=target.id,
            code=target.code,
            title=target.title,
            strategic_goal_id=target.strategic_goal_id,
            period=period,
            score=score,
            override=override,
            kpi_scores=kpi_scores,
        )

    def score_goal(
        self,
        goal: StrategicGoal,
        period: str,
        values_by_kpi: Mapping[str, Sequence[KpiValue]],
        shares: Mapping[str, float] | None = None,
        overrides: Mapping[str, float] | None = None,
    ) -> GoalScore:
        overrides = overrides or {}
        targets = self.targets_of(goal.id)
        target_scores = tuple(
            self.score_target(target, period, values_by_kpi, shares, overrides.get(target.id)) for target in targets
        )
        score = weighted_score([item.score for item in target_scores], [target.goal_weight for target in targets])
        return GoalScore(
            goal_id=goal.id,
            code=goal.code,
            title=goal.title,
            period=period,
            score=score,
            target_scores=target_scores,
        )

    def snapshot(
        self,
        period: str,
        values: Sequence[KpiValue],
        shares: Mapping[str, float] | None = None,
        overrides: Mapping[str, float] | None = None,
    ) -> HierarchySnapshot:
        """Score every goal for one period; values from other periods are ignored."""
        values_by_kpi: Dict[str, List[KpiValue]] = {}
        for value in values:
            if value.period == period:
                values_by_kpi.setdefault(value.kpi_id, []).append(value)
        goals = tuple(self.score_goal(goal, period, values_by_kpi, shares, overrides) for goal in self.goals)
        return HierarchySnapshot(period=period, goals=goals)
