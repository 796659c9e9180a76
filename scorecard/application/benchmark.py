"""Factory benchmarking: per-factory averages, ranking, percentile and tier."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

import polars as pl

from scorecard.domain.models import Factory, Kpi, KpiValue
from scorecard.domain.policies import (
    ACHIEVED_THRESHOLD,
    achievement,
    performance_tier,
    round_half_up,
)
from scorecard.domain.themes import THEME_NAMES, THEMES

VALUE_SCHEMA: Dict[str, Any] = {
    "factory_id": pl.Utf8,
    "kpi_id": pl.Utf8,
    "period": pl.Utf8,
    "achievement": pl.Float64,
}


@dataclass(frozen=True)
class FactoryBenchmark:
    factory_id: str
    factory_code: str
    factory_name: str
    region: str | None
    average_score: float
    achieved_count: int
    total_kpis: int
    tier: str
    rank: int
    percentile: int

    @property
    def achievement_rate(self) -> int:
        if self.total_kpis <= 0:
            return 0
        return round_half_up(self.achieved_count / self.total_kpis * 100)


@dataclass(frozen=True)
class BenchmarkStats:
    total_factories: int
    average_score: float
    top_performers: int
    kpi_count: int


@dataclass(frozen=True)
class ThemeScore:
    theme: str
    theme_name: str
    factory_score: float
    industry_average: float
    percentile: int
    kpi_count: int

    @property
    def gap(self) -> float:
        return self.factory_score - self.industry_average

    @property
    def performance(self) -> str:
        return "above" if self.factory_score >= self.industry_average else "below"


def achievement_frame(values: Sequence[KpiValue], kpis: Sequence[Kpi], floor_negative: bool = False) -> pl.DataFrame:
    """One row per submission scored against its KPI target; values of unknown KPIs are dropped."""
    targets = {kpi.id: kpi.target_value for kpi in kpis}
    rows = [
        {
            "factory_id": value.factory_id,
            "kpi_id": value.kpi_id,
            "period": value.period,
            "achievement": achievement(value.value, targets[value.kpi_id], floor_negative=floor_negative),
        }
        for value in values
        if value.kpi_id in targets
    ]
    return pl.DataFrame(rows, schema=VALUE_SCHEMA)


def _factory_aggregates(frame: pl.DataFrame) -> Dict[str, Tuple[float, int, int]]:
    if frame.is_empty():
        return {}
    per_kpi = frame.group_by(["factory_id", "kpi_id"]).agg(pl.col("achievement").mean().alias("kpi_avg"))
    per_factory = per_kpi.group_by("factory_id").agg(
        pl.col("kpi_avg").sum().alias("total_score"),
        pl.len().alias("total_kpis"),
        (pl.col("kpi_avg") >= ACHIEVED_THRESHOLD).sum().alias("achieved"),
    )
    output: Dict[str, Tuple[float, int, int]] = {}
    for row in per_factory.to_dicts():
        total_kpis = int(row["total_kpis"])
        average = row["total_score"] / total_kpis if total_kpis > 0 else 0.0
        output[str(row["factory_id"])] = (average, int(row["achieved"]), total_kpis)
    return output


def rank_factories(
    factories: Sequence[Factory],
    values: Sequence[KpiValue],
    kpis: Sequence[Kpi],
    floor_negative: bool = False,
) -> List[FactoryBenchmark]:
    """Rank by average KPI achievement; ties keep the incoming factory order."""
    aggregates = _factory_aggregates(achievement_frame(values, kpis, floor_negative=floor_negative))
    scored = []
    for factory in factories:
        average, achieved, total = aggregates.get(factory.id, (0.0, 0, 0))
        scored.append((factory, average, achieved, total))
    scored.sort(key=lambda item: -item[1])

    total_factories = len(scored)
    ranked: List[FactoryBenchmark] = []
    for index, (factory, average, achieved, total) in enumerate(scored):
        ranked.append(
            FactoryBenchmark(
                factory_id=factory.id,
                factory_code=factory.code,
                factory_name=factory.name,
                region=factory.region,
                average_score=average,
                achieved_count=achieved,
                total_kpis=total,
                tier=performance_tier(average),
                rank=index + 1,
                percentile=round_half_up((1 - index / total_factories) * 100),
            )
        )
    return ranked


def benchmark_stats(ranking: Sequence[FactoryBenchmark]) -> BenchmarkStats:
    total = len(ranking)
    average = sum(item.average_score for item in ranking) / total if total > 0 else 0.0
    top = sum(1 for item in ranking if item.tier in {"platinum", "gold"})
    return BenchmarkStats(
        total_factories=total,
        average_score=average,
        top_performers=top,
        kpi_count=ranking[0].total_kpis if ranking else 0,
    )


def strongest_and_weakest(themes: Sequence[ThemeScore]) -> Tuple[ThemeScore | None, ThemeScore | None]:
    """Highest and lowest factory score; the earlier theme wins ties."""
    if not themes:
        return None, None
    return max(themes, key=lambda item: item.factory_score), min(themes, key=lambda item: item.factory_score)


def theme_comparison(
    factory_id: str,
    factories: Sequence[Factory],
    values: Sequence[KpiValue],
    kpis: Sequence[Kpi],
    floor_negative: bool = False,
) -> List[ThemeScore]:
    """Compare one factory's per-theme average achievement against every factory."""
    frame = achievement_frame(values, kpis, floor_negative=floor_negative)
    output: List[ThemeScore] = []
    for theme in THEMES:
        theme_kpis = [kpi.id for kpi in kpis if kpi.has_theme(theme)]
        scoped = frame.filter(pl.col("kpi_id").is_in(theme_kpis)) if theme_kpis else frame.clear()
        industry_average = float(scoped["achievement"].mean()) if scoped.height > 0 else 0.0

        per_factory = {
            str(row["factory_id"]): (float(row["avg"]), int(row["n"]))
            for row in scoped.group_by("factory_id")
            .agg(pl.col("achievement").mean().alias("avg"), pl.len().alias("n"))
            .to_dicts()
        }
        factory_score, kpi_count = per_factory.get(factory_id, (0.0, 0))
        all_scores = [per_factory.get(factory.id, (0.0, 0))[0] for factory in factories]
        better_than = sum(1 for score in all_scores if score < factory_score)
        if len(all_scores) > 1:
            percentile = round_half_up(better_than / (len(all_scores) - 1) * 100)
        else:
            percentile = 50

        output.append(
            ThemeScore(
                theme=theme,
                theme_name=THEME_NAMES[theme],
                factory_score=factory_score,
                industry_average=industry_average,
                percentile=percentile,
                kpi_count=kpi_count,
            )
        )
    return output
