"""Text rendering helpers for console summaries."""

from __future__ import annotations

from typing import List, Sequence

from scorecard.application.benchmark import FactoryBenchmark
from scorecard.application.budget import BudgetLine
from scorecard.application.evidence import EvidenceGroup
from scorecard.application.hierarchy import HierarchySnapshot
from scorecard.application.reporting.metrics import fmt_delta, fmt_efficiency, fmt_money, fmt_score
from scorecard.application.trend import Movers, TrendSeries

_DIRECTION_MARKS = {"up": "▲", "down": "▼", "stable": "="}


def snapshot_comment(snapshot: HierarchySnapshot) -> str:
    if not snapshot.goals:
        return f"{snapshot.period}: no strategic goals defined."
    parts = [f"{goal.code} {fmt_score(goal.score)}" for goal in snapshot.goals]
    return f"{snapshot.period}: " + ", ".join(parts)


def trend_comment(series: Sequence[TrendSeries]) -> str:
    if not series:
        return "No trend data."
    lines: List[str] = []
    for item in series:
        mark = _DIRECTION_MARKS.get(item.direction, "=")
        lines.append(f"{item.key} {mark} {fmt_delta(item.window_trend)} (last {fmt_delta(item.previous_trend)})")
    return " | ".join(lines)


def movers_comment(movers: Movers) -> str:
    improving = ", ".join(f"{move.code} {fmt_delta(move.change)}" for move in movers.improving) or "-"
    declining = ", ".join(f"{move.code} {fmt_delta(move.change)}" for move in movers.declining) or "-"
    return f"Improving: {improving}. Declining: {declining}."


def ranking_comment(ranking: Sequence[FactoryBenchmark], limit: int = 3) -> str:
    if not ranking:
        return "No factories to rank."
    lines = [
        f"{item.rank}) {item.factory_name} {fmt_score(item.average_score)} [{item.tier}, p{item.percentile}]"
        for item in ranking[:limit]
    ]
    return " | ".join(lines)


def budget_comment(lines: Sequence[BudgetLine]) -> str:
    if not lines:
        return "No budgeted actions."
    return " | ".join(
        f"{line.code}: plan {fmt_money(line.total_planned)}, actual {fmt_money(line.total_actual)}, "
        f"efficiency {fmt_efficiency(line.efficiency)}"
        for line in lines
    )


def evidence_comment(groups: Sequence[EvidenceGroup], min_n: int) -> str:
    if not groups:
        return f"No group reaches the minimum size of {min_n}."
    return " | ".join(f"{group.key}: n={group.count}, firms={group.firms}" for group in groups)
