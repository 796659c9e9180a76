"""Application services: fetch a snapshot through the data-access layer, then score it."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from scorecard.application.benchmark import (
    BenchmarkStats,
    FactoryBenchmark,
    ThemeScore,
    benchmark_stats,
    rank_factories,
    strongest_and_weakest,
    theme_comparison,
)
from scorecard.application.budget import ActionEffect, BudgetLine, aggregate_effects, score_actions, validate_mode
from scorecard.application.evidence import EvidenceGroup, aggregate_evidence, effective_min_n, validate_group_by
from scorecard.application.hierarchy import HierarchyAggregator, HierarchySnapshot, KpiScore, TargetScore
from scorecard.application.reporting.metrics import round_score
from scorecard.application.sector_adjuster import shares_by_sector
from scorecard.application.trend import Movers, TrendSeries, goal_series, kpi_series, target_movers, target_series
from scorecard.config import Settings, load_settings
from scorecard.domain.models import AccessScope, Factory, KpiValue
from scorecard.domain.periods import parse_period, period_window, sort_periods
from scorecard.domain.periods import previous_period as quarter_before
from scorecard.domain.policies import ACHIEVED_THRESHOLD, trend_direction
from scorecard.domain.weighting import WeightingResult, compute_weights
from scorecard.errors import MissingSelectorError, NotFoundError
from scorecard.infrastructure.repository import DataAccess, fetch

logger = logging.getLogger(__name__)

TIMELINE_PERIODS = 6
CRITICAL_KPI_LIMIT = 5


def _series_dict(series: TrendSeries) -> Dict[str, Any]:
    return {
        "level": series.level,
        "key": series.key,
        "title": series.title,
        "values": [round_score(value) for value in series.values],
        "windowTrend": round_score(series.window_trend),
        "previousTrend": round_score(series.previous_trend),
        "direction": series.direction,
    }


def _snapshot_dict(snapshot: HierarchySnapshot) -> Dict[str, Any]:
    return {
        "period": snapshot.period,
        "goals": [
            {
                "code": goal.code,
                "title": goal.title,
                "score": round_score(goal.score),
                "targets": [
                    {
                        "code": target.code,
                        "title": target.title,
                        "score": round_score(target.score),
                        "override": target.override,
                        "kpis": [
                            {
                                "kpiId": kpi.kpi_id,
                                "number": kpi.number,
                                "achievement": round_score(kpi.achievement),
                                "value": round_score(kpi.raw_value),
                                "sectorWeighted": kpi.sector_weighted,
                            }
                            for kpi in target.kpi_scores
                        ],
                    }
                    for target in goal.target_scores
                ],
            }
            for goal in snapshot.goals
        ],
    }


@dataclass(frozen=True)
class ScorecardResult:
    periods: tuple[str, ...]
    factory_id: str | None
    theme: str | None
    kpi_id: str | None
    snapshots: tuple[HierarchySnapshot, ...]
    goal_trends: tuple[TrendSeries, ...]
    target_trends: tuple[TrendSeries, ...]
    kpi_trends: tuple[TrendSeries, ...]
    movers: Movers
    ranking: tuple[FactoryBenchmark, ...]
    stats: BenchmarkStats

    def to_dict(self) -> Dict[str, Any]:
        return {
            "periods": list(self.periods),
            "factoryId": self.factory_id,
            "theme": self.theme or "all",
            "kpiId": self.kpi_id,
            "snapshots": [_snapshot_dict(snapshot) for snapshot in self.snapshots],
            "saSeries": [_series_dict(series) for series in self.goal_trends],
            "shSeries": [_series_dict(series) for series in self.target_trends],
            "kpiSeries": [_series_dict(series) for series in self.kpi_trends],
            "improving": [
                {"code": move.code, "title": move.title, "change": round_score(move.change)}
                for move in self.movers.improving
            ],
            "declining": [
                {"code": move.code, "title": move.title, "change": round_score(move.change)}
                for move in self.movers.declining
            ],
            "ranking": [
                {
                    "factoryId": item.factory_id,
                    "factoryCode": item.factory_code,
                    "factoryName": item.factory_name,
                    "region": item.region,
                    "averageScore": round_score(item.average_score),
                    "achievedKpis": item.achieved_count,
                    "totalKpis": item.total_kpis,
                    "achievementRate": item.achievement_rate,
                    "performanceLevel": item.tier,
                    "rank": item.rank,
                    "percentile": item.percentile,
                }
                for item in self.ranking
            ],
            "stats": {
                "totalFactories": self.stats.total_factories,
                "averageScore": round_score(self.stats.average_score),
                "topPerformers": self.stats.top_performers,
                "kpiCount": self.stats.kpi_count,
            },
        }


@dataclass(frozen=True)
class BudgetEfficiencyResult:
    period: str
    previous_period: str
    mode: str
    goals: tuple[BudgetLine, ...]
    targets: tuple[BudgetLine, ...]
    actions: tuple[ActionEffect, ...]

    def to_dict(self) -> Dict[str, Any]:
        def _line(line: BudgetLine) -> Dict[str, Any]:
            return {
                "code": line.code,
                "totalPlanned": line.total_planned,
                "totalActual": line.total_actual,
                "totalEffectScore": line.total_effect,
                "efficiency": line.efficiency,
                "actionCount": line.action_count,
            }

        return {
            "period": self.period,
            "previousPeriod": self.previous_period,
            "mode": self.mode,
            "goals": [_line(line) for line in self.goals],
            "targets": [_line(line) for line in self.targets],
        }


@dataclass(frozen=True)
class EvidenceSummary:
    period: str
    factory_id: str | None
    group_by: str
    min_n: int
    total_records: int
    groups: tuple[EvidenceGroup, ...]

    @property
    def suppressed_records(self) -> int:
        return self.total_records - sum(group.count for group in self.groups)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "factoryId": self.factory_id,
            "groupBy": self.group_by,
            "minN": self.min_n,
            "rows": [
                {
                    "key": group.key,
                    "count": group.count,
                    "employees": group.employees,
                    "revenue": group.revenue,
                    "firms": group.firms,
                    "exporters": group.exporters,
                }
                for group in self.groups
            ],
        }


@dataclass(frozen=True)
class PeriodAverage:
    period: str
    average: float | None
    kpi_count: int

    @classmethod
    def of(cls, snapshot: HierarchySnapshot) -> "PeriodAverage":
        scored = [kpi.achievement for kpi in snapshot.kpi_scores() if kpi.achievement is not None]
        average = sum(scored) / len(scored) if scored else None
        return cls(period=snapshot.period, average=average, kpi_count=len(scored))


@dataclass(frozen=True)
class FactoryPerformance:
    factory: Factory
    period: str
    previous_period: str
    current: HierarchySnapshot
    previous: HierarchySnapshot
    themes: tuple[ThemeScore, ...]
    timeline: tuple[HierarchySnapshot, ...] = ()

    @staticmethod
    def overall(snapshot: HierarchySnapshot) -> float:
        """Unweighted mean of the SA scores; 0 without goals."""
        if not snapshot.goals:
            return 0.0
        return sum(goal.score for goal in snapshot.goals) / len(snapshot.goals)

    @property
    def current_score(self) -> float:
        return self.overall(self.current)

    @property
    def previous_score(self) -> float:
        return self.overall(self.previous)

    @property
    def trend(self) -> float:
        return self.current_score - self.previous_score

    @property
    def direction(self) -> str:
        return trend_direction(self.trend)

    @property
    def sector_weighted_kpis(self) -> int:
        return sum(1 for kpi in self.current.kpi_scores() if kpi.sector_weighted)

    @property
    def critical_kpis(self) -> List[tuple[TargetScore, KpiScore]]:
        """Current-period KPIs below the achieved threshold, weakest first."""
        rows = [
            (target, kpi)
            for target in self.current.target_scores()
            for kpi in target.kpi_scores
            if kpi.achievement is not None and kpi.achievement < ACHIEVED_THRESHOLD
        ]
        return sorted(rows, key=lambda row: row[1].achievement)

    @property
    def period_averages(self) -> List[PeriodAverage]:
        return [PeriodAverage.of(snapshot) for snapshot in self.timeline]

    @property
    def theme_extremes(self) -> tuple[ThemeScore | None, ThemeScore | None]:
        return strongest_and_weakest(self.themes)

    def to_dict(self) -> Dict[str, Any]:
        strongest, weakest = self.theme_extremes
        return {
            "factory": {"id": self.factory.id, "code": self.factory.code, "name": self.factory.name},
            "period": self.period,
            "previousPeriod": self.previous_period,
            "performance": {
                "currentScore": round_score(self.current_score),
                "previousScore": round_score(self.previous_score),
                "trend": round_score(self.trend),
                "trendDirection": self.direction,
                "sectorWeightedKpis": self.sector_weighted_kpis,
            },
            "goals": _snapshot_dict(self.current)["goals"],
            "themes": [
                {
                    "theme": item.theme,
                    "themeName": item.theme_name,
                    "factoryScore": round_score(item.factory_score),
                    "industryAverage": round_score(item.industry_average),
                    "percentile": item.percentile,
                    "kpiCount": item.kpi_count,
                    "performance": item.performance,
                    "gap": round_score(item.gap),
                }
                for item in self.themes
            ],
            "strongestTheme": strongest.theme if strongest else None,
            "weakestTheme": weakest.theme if weakest else None,
            "criticalKpis": [
                {
                    "kpiId": kpi.kpi_id,
                    "number": kpi.number,
                    "targetCode": target.code,
                    "value": round_score(kpi.raw_value),
                    "achievement": round_score(kpi.achievement),
                }
                for target, kpi in self.critical_kpis[:CRITICAL_KPI_LIMIT]
            ],
            "timeline": [
                {"period": item.period, "average": round_score(item.average), "kpiCount": item.kpi_count}
                for item in self.period_averages
            ],
        }


def _visible_factories(repo: DataAccess, scope: AccessScope) -> List[Factory]:
    factories = fetch("list_factories", lambda: repo.list_factories(scope.factory_ids))
    return [factory for factory in factories if scope.allows(factory.id)]


def _value_filter(scope: AccessScope) -> frozenset[str] | None:
    return None if scope.is_unrestricted else scope.factory_ids


def _factory_inputs(
    repo: DataAccess, factory_id: str | None
) -> tuple[Dict[str, float] | None, Dict[str, float]]:
    if factory_id is None:
        return None, {}
    shares = fetch("list_sector_shares", lambda: repo.list_sector_shares(factory_id))
    overrides = fetch("list_weight_overrides", lambda: repo.list_weight_overrides(factory_id))
    return shares_by_sector(shares), {row.strategic_target_id: row.weight for row in overrides}


def _aggregator(repo: DataAccess, settings: Settings) -> HierarchyAggregator:
    goals = fetch("list_goals", repo.list_goals)
    targets = fetch("list_targets", repo.list_targets)
    kpis = fetch("list_kpis", lambda: repo.list_kpis())
    return HierarchyAggregator(goals, targets, kpis, floor_negative=settings.floor_negative)


def _require_factory(repo: DataAccess, scope: AccessScope, factory_id: str | None) -> Factory:
    if not factory_id:
        raise MissingSelectorError("factory_id")
    factory = next((item for item in _visible_factories(repo, scope) if item.id == factory_id), None)
    if factory is None:
        raise NotFoundError(f"factory {factory_id!r} not found")
    return factory


def score_periods(
    repo: DataAccess,
    periods: Sequence[str],
    scope: AccessScope = AccessScope.all(),
    factory_id: str | None = None,
    theme: str | None = None,
    kpi_id: str | None = None,
    settings: Settings | None = None,
) -> ScorecardResult:
    """Per-period hierarchy scores, trends and a factory ranking over the window.

    The hierarchy always uses the full KPI tree so stored weights keep their meaning;
    ``theme`` and ``kpi_id`` narrow the KPI set used for benchmarking.
    """
    settings = settings or load_settings()
    window = sort_periods(periods) or [settings.default_period]
    for period in window:
        parse_period(period)
    logger.info("Scoring periods=%s factory=%s theme=%s kpi=%s", window, factory_id, theme, kpi_id)

    if factory_id is not None:
        _require_factory(repo, scope, factory_id)
    view_scope = scope.restrict(factory_id)
    baseline_period = quarter_before(window[0]) if len(window) == 1 else None
    fetch_periods = window + ([baseline_period] if baseline_period else [])

    aggregator = _aggregator(repo, settings)
    values: List[KpiValue] = fetch(
        "list_kpi_values", lambda: repo.list_kpi_values(fetch_periods, _value_filter(view_scope))
    )
    values = [value for value in values if view_scope.allows(value.factory_id)]
    shares, overrides = _factory_inputs(repo, factory_id)
    logger.debug("Fetched %d KPI values for %d periods", len(values), len(fetch_periods))

    snapshots = tuple(aggregator.snapshot(period, values, shares, overrides) for period in window)
    baseline = aggregator.snapshot(baseline_period, values, shares, overrides) if baseline_period else None

    factories = _visible_factories(repo, scope)
    ranking_kpis = fetch("list_kpis", lambda: repo.list_kpis(theme=theme, kpi_id=kpi_id))
    ranking_values: List[KpiValue] = fetch(
        "list_kpi_values",
        lambda: repo.list_kpi_values(window, _value_filter(scope), [kpi.id for kpi in ranking_kpis]),
    )
    ranking_values = [value for value in ranking_values if scope.allows(value.factory_id)]
    ranking = rank_factories(factories, ranking_values, ranking_kpis, floor_negative=settings.floor_negative)

    return ScorecardResult(
        periods=tuple(window),
        factory_id=factory_id,
        theme=theme,
        kpi_id=kpi_id,
        snapshots=snapshots,
        goal_trends=tuple(goal_series(snapshots, baseline)),
        target_trends=tuple(target_series(snapshots, baseline)),
        kpi_trends=tuple(kpi_series(snapshots, baseline)),
        movers=target_movers(snapshots, baseline, top_n=settings.top_movers),
        ranking=tuple(ranking),
        stats=benchmark_stats(ranking),
    )


def budget_efficiency(
    repo: DataAccess,
    period: str,
    scope: AccessScope = AccessScope.all(),
    previous_period: str | None = None,
    mode: str = "gap",
    factory_id: str | None = None,
    settings: Settings | None = None,
) -> BudgetEfficiencyResult:
    """Planned/actual spend and effect score per SA and SH; efficiency is None without plan."""
    settings = settings or load_settings()
    mode = validate_mode(mode)
    parse_period(period)
    previous = previous_period or quarter_before(period)
    parse_period(previous)
    logger.info("Budget efficiency period=%s previous=%s mode=%s factory=%s", period, previous, mode, factory_id)

    if factory_id is not None:
        _require_factory(repo, scope, factory_id)
    view_scope = scope.restrict(factory_id)

    goals = fetch("list_goals", repo.list_goals)
    targets = fetch("list_targets", repo.list_targets)
    kpis = fetch("list_kpis", lambda: repo.list_kpis())
    values: List[KpiValue] = fetch(
        "list_kpi_values", lambda: repo.list_kpi_values([period, previous], _value_filter(view_scope))
    )
    values = [value for value in values if view_scope.allows(value.factory_id)]
    actions = fetch("list_actions", repo.list_actions)
    effects = score_actions(
        actions,
        fetch("list_action_kpis", repo.list_action_kpis),
        fetch("list_action_budgets", repo.list_action_budgets),
        fetch("list_action_steps", repo.list_action_steps),
        kpis,
        values,
        period,
        previous,
        mode=mode,
        floor_negative=settings.floor_negative,
    )
    logger.debug("Scored %d actions", len(effects))

    goal_lines, target_lines = aggregate_effects(effects, targets, {goal.id: goal.code for goal in goals})
    return BudgetEfficiencyResult(
        period=period,
        previous_period=previous,
        mode=mode,
        goals=tuple(goal_lines),
        targets=tuple(target_lines),
        actions=tuple(effects),
    )


def evidence_summary(
    repo: DataAccess,
    period: str,
    scope: AccessScope = AccessScope.all(),
    factory_id: str | None = None,
    group_by: str = "sector",
    min_n: int | None = None,
    settings: Settings | None = None,
) -> EvidenceSummary:
    settings = settings or load_settings()
    group_by = validate_group_by(group_by)
    parse_period(period)
    threshold = effective_min_n(min_n, default=settings.min_group_size)
    logger.info("Evidence summary period=%s factory=%s group_by=%s min_n=%d", period, factory_id, group_by, threshold)
    if factory_id is not None:
        _require_factory(repo, scope, factory_id)

    records = fetch("list_evidence", lambda: repo.list_evidence(period, factory_id))
    records = [record for record in records if scope.allows(record.factory_id)]
    groups = aggregate_evidence(records, group_by=group_by, min_n=threshold)
    summary = EvidenceSummary(
        period=period,
        factory_id=factory_id,
        group_by=group_by,
        min_n=threshold,
        total_records=len(records),
        groups=tuple(groups),
    )
    logger.debug("Suppressed %d of %d evidence records", summary.suppressed_records, summary.total_records)
    return summary


def factory_performance(
    repo: DataAccess,
    period: str,
    scope: AccessScope = AccessScope.all(),
    factory_id: str | None = None,
    settings: Settings | None = None,
) -> FactoryPerformance:
    """Current vs. prior-quarter scores for one factory, sector-weighted where applicable."""
    settings = settings or load_settings()
    parse_period(period)
    factory = _require_factory(repo, scope, factory_id)
    prior = quarter_before(period)
    timeline_periods = period_window(period, TIMELINE_PERIODS)
    logger.info("Factory performance factory=%s period=%s", factory.id, period)

    aggregator = _aggregator(repo, settings)
    values = fetch("list_kpi_values", lambda: repo.list_kpi_values(timeline_periods, [factory.id]))
    shares, overrides = _factory_inputs(repo, factory.id)
    timeline = tuple(aggregator.snapshot(item, values, shares, overrides) for item in timeline_periods)

    factories = _visible_factories(repo, scope)
    kpis = fetch("list_kpis", lambda: repo.list_kpis())
    peer_values: List[KpiValue] = fetch(
        "list_kpi_values", lambda: repo.list_kpi_values([period], _value_filter(scope))
    )
    peer_values = [value for value in peer_values if scope.allows(value.factory_id)]

    return FactoryPerformance(
        factory=factory,
        period=period,
        previous_period=prior,
        current=timeline[-1],
        previous=timeline[-2],
        themes=tuple(
            theme_comparison(factory.id, factories, peer_values, kpis, floor_negative=settings.floor_negative)
        ),
        timeline=timeline,
    )


def recompute_weights(repo: DataAccess) -> WeightingResult:
    """Offline weighting pass over the current tree; persisting the result is up to the caller."""
    targets = fetch("list_targets", repo.list_targets)
    kpis = fetch("list_kpis", lambda: repo.list_kpis())
    result = compute_weights(targets, kpis)
    logger.info("Recomputed weights for %d KPIs and %d targets", len(result.kpis), len(result.targets))
    return result
