import pytest

from scorecard.application.hierarchy import GoalScore, HierarchySnapshot, TargetScore
from scorecard.application.trend import (
    goal_series,
    previous_period_trend,
    target_movers,
    target_series,
    window_trend,
)


def _snapshot(period, goal_score, target_scores):
    targets = tuple(
        TargetScore(
            target_id=code,
            code=code,
            title=f"Hedef {code}",
            strategic_goal_id="g1",
            period=period,
            score=score,
            override=None,
            kpi_scores=(),
        )
        for code, score in target_scores.items()
    )
    goal = GoalScore(goal_id="g1", code="SA1", title="Verimlilik", period=period, score=goal_score, target_scores=targets)
    return HierarchySnapshot(period=period, goals=(goal,))


def test_window_and_previous_trend():
    series = [60.0, 70.0, 65.0]
    assert window_trend(series) == pytest.approx(5.0)
    assert previous_period_trend(series) == pytest.approx(-5.0)


def test_trend_needs_two_points():
    assert window_trend([60.0]) is None
    assert previous_period_trend([None, 60.0]) is None


def test_goal_series_over_window():
    snapshots = [
        _snapshot("2024-Q2", 60.0, {"SH1.1": 50.0}),
        _snapshot("2024-Q3", 70.0, {"SH1.1": 60.0}),
        _snapshot("2024-Q4", 65.0, {"SH1.1": 70.0}),
    ]
    (series,) = goal_series(snapshots)
    assert series.periods == ("2024-Q2", "2024-Q3", "2024-Q4")
    assert series.window_trend == pytest.approx(5.0)
    assert series.previous_trend == pytest.approx(-5.0)
    assert series.direction == "up"
    assert series.previous_direction == "down"


def test_single_period_compares_with_prior_quarter():
    current = [_snapshot("2024-Q4", 65.0, {"SH1.1": 70.0})]
    baseline = _snapshot("2024-Q3", 70.0, {"SH1.1": 40.0})
    (goal,) = goal_series(current, baseline)
    assert goal.previous_trend == pytest.approx(-5.0)
    assert goal.direction == "down"
    (target,) = target_series(current, baseline)
    assert target.previous_trend == pytest.approx(30.0)


def test_single_period_without_baseline_is_stable():
    (series,) = goal_series([_snapshot("2024-Q4", 65.0, {})])
    assert series.window_trend is None
    assert series.direction == "stable"


def test_target_movers_ranks_last_two_periods():
    snapshots = [
        _snapshot("2024-Q2", 0.0, {"SH1.1": 10.0, "SH1.2": 90.0, "SH1.3": 50.0}),
        _snapshot("2024-Q3", 0.0, {"SH1.1": 20.0, "SH1.2": 80.0, "SH1.3": 50.0}),
        _snapshot("2024-Q4", 0.0, {"SH1.1": 50.0, "SH1.2": 60.0, "SH1.3": 55.0}),
    ]
    movers = target_movers(snapshots, top_n=2)
    assert movers.periods == ("2024-Q3", "2024-Q4")
    assert [move.code for move in movers.improving] == ["SH1.1", "SH1.3"]
    assert [move.code for move in movers.declining] == ["SH1.2", "SH1.3"]
    assert movers.improving[0].change == pytest.approx(30.0)
    assert movers.declining[0].direction == "down"


def test_target_movers_default_keeps_eight():
    scores = {f"SH1.{idx}": float(idx) for idx in range(12)}
    snapshots = [_snapshot("2024-Q3", 0.0, {code: 0.0 for code in scores}), _snapshot("2024-Q4", 0.0, scores)]
    movers = target_movers(snapshots)
    assert len(movers.improving) == 8
    assert movers.improving[0].code == "SH1.11"


def test_target_movers_empty():
    movers = target_movers([])
    assert movers.improving == ()
    assert movers.declining == ()


def test_single_period_movers_use_baseline():
    current = [_snapshot("2024-Q4", 65.0, {"SH1.1": 70.0, "SH1.2": 30.0})]
    baseline = _snapshot("2024-Q3", 70.0, {"SH1.1": 40.0, "SH1.2": 35.0})
    movers = target_movers(current, baseline)
    assert movers.periods == ("2024-Q3", "2024-Q4")
    assert movers.improving[0].code == "SH1.1"
    assert movers.improving[0].change == pytest.approx(30.0)
    assert movers.declining[0].change == pytest.approx(-5.0)


def test_baseline_ignored_for_multi_period_window():
    snapshots = [_snapshot("2024-Q3", 0.0, {"SH1.1": 20.0}), _snapshot("2024-Q4", 0.0, {"SH1.1": 50.0})]
    movers = target_movers(snapshots, _snapshot("2024-Q2", 0.0, {"SH1.1": 0.0}))
    assert movers.periods == ("2024-Q3", "2024-Q4")
    assert movers.improving[0].change == pytest.approx(30.0)


def test_single_period_without_baseline_shows_no_change():
    movers = target_movers([_snapshot("2024-Q4", 0.0, {"SH1.1": 70.0})])
    assert movers.periods == ("2024-Q4",)
    assert movers.improving[0].change == 0.0
