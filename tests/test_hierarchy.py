import pytest

from scorecard.application.hierarchy import HierarchyAggregator, weighted_score
from scorecard.domain.models import Kpi, KpiValue, StrategicGoal, StrategicTarget


def _values(factory_id, period, **by_kpi):
    return [KpiValue(kpi_id=kpi_id, factory_id=factory_id, period=period, value=value) for kpi_id, value in by_kpi.items()]


def test_weighted_score_defaults_missing_weights_to_uniform():
    assert weighted_score([80.0, 40.0], [None, None]) == pytest.approx(60.0)
    assert weighted_score([], []) == 0.0


def test_target_score_from_weighted_kpis(goals, targets, kpis):
    aggregator = HierarchyAggregator(goals, targets, kpis)
    snapshot = aggregator.snapshot("2024-Q4", _values("f1", "2024-Q4", k1=80.0, k2=20.0))
    # k1: 80, k2: 20/50 -> 40; weights 0.75 / 0.25
    assert snapshot.target("SH1.1").score == pytest.approx(70.0)


def test_single_kpi_target_capped_end_to_end():
    goal = StrategicGoal(id="g", code="SA9")
    target = StrategicTarget(id="t", code="SH9.1", strategic_goal_id="g", goal_weight=0.2)
    kpi = Kpi(id="k", number=1, strategic_target_id="t", target_value=100.0, sh_weight=0.3)
    aggregator = HierarchyAggregator([goal], [target], [kpi])
    snapshot = aggregator.snapshot("2024-Q4", _values("f1", "2024-Q4", k=120.0))
    assert snapshot.kpi_scores()[0].achievement == 100
    assert snapshot.target("SH9.1").score == pytest.approx(100.0)
    assert snapshot.goal("SA9").score == pytest.approx(100.0)


def test_goal_averages_targets_and_missing_kpis_count_zero(goals, targets, kpis):
    aggregator = HierarchyAggregator(goals, targets, kpis)
    snapshot = aggregator.snapshot("2024-Q3", _values("f1", "2024-Q3", k1=70.0, k2=20.0))
    assert snapshot.target("SH1.1").score == pytest.approx(62.5)
    assert snapshot.target("SH1.2").score == 0.0
    assert snapshot.goal("SA1").score == pytest.approx(31.25)
    assert snapshot.goal("SA2").score == 0.0
    k3 = next(item for item in snapshot.kpi_scores() if item.kpi_id == "k3")
    assert k3.achievement is None


def test_values_of_other_periods_are_ignored(goals, targets, kpis):
    aggregator = HierarchyAggregator(goals, targets, kpis)
    snapshot = aggregator.snapshot("2024-Q4", _values("f1", "2024-Q3", k1=70.0))
    assert snapshot.target("SH1.1").score == 0.0


def test_multiple_factories_average_raw_values(goals, targets, kpis):
    aggregator = HierarchyAggregator(goals, targets, kpis)
    values = _values("f1", "2024-Q4", k3=8.0) + _values("f2", "2024-Q4", k3=4.0)
    snapshot = aggregator.snapshot("2024-Q4", values)
    # mean raw 6 against target 10
    assert snapshot.target("SH1.2").score == pytest.approx(60.0)


def test_override_multiplies_after_normalization(goals, targets, kpis):
    aggregator = HierarchyAggregator(goals, targets, kpis)
    values = _values("f1", "2024-Q4", k3=8.0)
    snapshot = aggregator.snapshot("2024-Q4", values, overrides={"t2": 1.5})
    target = snapshot.target("SH1.2")
    assert target.override == 1.5
    assert target.score == pytest.approx(120.0)


def test_sector_weighted_flag_propagates(goals, targets, kpis):
    aggregator = HierarchyAggregator(goals, targets, kpis)
    values = [
        KpiValue(kpi_id="k3", factory_id="f1", period="2024-Q4", value=10.0, nace_code="29.10"),
        KpiValue(kpi_id="k3", factory_id="f1", period="2024-Q4", value=0.0, nace_code="13.20"),
    ]
    snapshot = aggregator.snapshot("2024-Q4", values, shares={"Otomotiv": 1.0})
    k3 = next(item for item in snapshot.kpi_scores() if item.kpi_id == "k3")
    assert k3.sector_weighted is True
    assert k3.achievement == pytest.approx(100.0)


def test_goal_without_targets_scores_zero():
    aggregator = HierarchyAggregator([StrategicGoal(id="g", code="SA5")], [], [])
    assert aggregator.snapshot("2024-Q4", []).goal("SA5").score == 0.0
