"""Period-over-period and window trends at KPI, SH and SA level."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, Tuple

from scorecard.application.hierarchy import HierarchySnapshot
from scorecard.domain.policies import trend_direction

DEFAULT_TOP_N = 8


def window_trend(series: Sequence[float | None]) -> float | None:
    """Last minus first point of the window; None with fewer than two points."""
    points = [value for value in series if value is not None]
    if len(points) < 2:
        return None
    return points[-1] - points[0]


def previous_period_trend(series: Sequence[float | None]) -> float | None:
    points = [value for value in series if value is not None]
    if len(points) < 2:
        return None
    return points[-1] - points[-2]


@dataclass(frozen=True)
class TrendSeries:
    level: str
    key: str
    title: str
    periods: Tuple[str, ...]
    values: Tuple[float | None, ...]
    window_trend: float | None
    previous_trend: float | None

    @property
    def direction(self) -> str:
        return trend_direction(self.window_trend)

    @property
    def previous_direction(self) -> str:
        return trend_direction(self.previous_trend)


@dataclass(frozen=True)
class TargetMove:
    code: str
    title: str
    change: float

    @property
    def direction(self) -> str:
        return trend_direction(self.change)


@dataclass(frozen=True)
class Movers:
    periods: Tuple[str, ...]
    improving: Tuple[TargetMove, ...]
    declining: Tuple[TargetMove, ...]


def _build_series(
    level: str,
    snapshots: Sequence[HierarchySnapshot],
    baseline: HierarchySnapshot | None,
    extract: Callable[[HierarchySnapshot], Dict[str, Tuple[str, float | None]]],
) -> List[TrendSeries]:
    periods = tuple(snapshot.period for snapshot in snapshots)
    per_period = [extract(snapshot) for snapshot in snapshots]
    base = extract(baseline) if baseline is not None else {}

    keys: List[str] = []
    titles: Dict[str, str] = {}
    for mapping in per_period:
        for key, (title, _) in mapping.items():
            if key not in titles:
                keys.append(key)
                titles[key] = title

    output: List[TrendSeries] = []
    for key in keys:
        values = tuple(mapping.get(key, ("", None))[1] for mapping in per_period)
        window = window_trend(values)
        previous = previous_period_trend(values)
        if len(values) == 1 and key in base:
            # single-period view: compare with the canonical prior quarter
            previous = previous_period_trend([base[key][1], values[0]])
            window = previous
        output.append(
            TrendSeries(
                level=level,
                key=key,
                title=titles[key],
                periods=periods,
                values=values,
                window_trend=window,
                previous_trend=previous,
            )
        )
    return output


def goal_series(
    snapshots: Sequence[HierarchySnapshot], baseline: HierarchySnapshot | None = None
) -> List[TrendSeries]:
    return _build_series(
        "SA",
        snapshots,
        baseline,
        lambda snap: {goal.code: (goal.title, goal.score) for goal in snap.goals},
    )


def target_series(
    snapshots: Sequence[HierarchySnapshot], baseline: HierarchySnapshot | None = None
) -> List[TrendSeries]:
    return _build_series(
        "SH",
        snapshots,
        baseline,
        lambda snap: {target.code: (target.title, target.score) for target in snap.target_scores()},
    )


def kpi_series(
    snapshots: Sequence[HierarchySnapshot], baseline: HierarchySnapshot | None = None
) -> List[TrendSeries]:
    """KPI achievements keep None for periods without a submission."""
    return _build_series(
        "KPI",
        snapshots,
        baseline,
        lambda snap: {kpi.kpi_id: (str(kpi.number), kpi.achievement) for kpi in snap.kpi_scores()},
    )


def target_movers(
    snapshots: Sequence[HierarchySnapshot],
    baseline: HierarchySnapshot | None = None,
    top_n: int = DEFAULT_TOP_N,
) -> Movers:
    """SH change across the last two periods of the window, best and worst first.

    A one-period window compares against ``baseline`` when given, else against itself.
    """
    last_two = list(snapshots[-2:])
    if not last_two:
        return Movers(periods=(), improving=(), declining=())
    if len(last_two) == 1 and baseline is not None:
        last_two.insert(0, baseline)

    latest = {target.code: target for target in last_two[-1].target_scores()}
    earlier = {target.code: target.score for target in last_two[0].target_scores()}

    moves = [
        TargetMove(code=code, title=target.title, change=target.score - earlier.get(code, 0.0))
        for code, target in latest.items()
    ]

    improving = sorted(moves, key=lambda move: -move.change)[:top_n]
    declining = sorted(moves, key=lambda move: move.change)[:top_n]
    return Movers(
        periods=tuple(snapshot.period for snapshot in last_two),
        improving=tuple(improving),
        declining=tuple(declining),
    )
