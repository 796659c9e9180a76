import pytest

from scorecard.domain.alerts import AlertCondition, any_condition_met, evaluate, percent_of_target
from scorecard.errors import InvalidModeError


class TestThreshold:
    @pytest.mark.parametrize(
        "operator, limit, expected",
        [
            ("<", 50.0, True),
            ("<", 40.0, False),
            (">", 30.0, True),
            ("<=", 40.0, True),
            (">=", 40.0, True),
            (">=", 40.5, False),
            ("=", 40.005, True),
            ("=", 40.1, False),
        ],
    )
    def test_absolute_operators(self, operator, limit, expected):
        condition = AlertCondition(type="threshold", operator=operator, value=limit)
        assert evaluate(condition, 40.0, target=200.0) is expected

    def test_percentage_uses_target(self):
        condition = AlertCondition(type="threshold", operator="<", value=50.0, comparison="percentage")
        assert evaluate(condition, 40.0, target=100.0) is True
        assert evaluate(condition, 40.0, target=50.0) is False

    def test_percentage_missing_target_falls_back_to_100(self):
        condition = AlertCondition(type="threshold", operator="<", value=50.0, comparison="percentage")
        assert evaluate(condition, 45.0, target=None) is True
        assert evaluate(condition, 45.0, target=0.0) is True

    def test_percentage_is_not_capped(self):
        condition = AlertCondition(type="threshold", operator=">", value=100.0, comparison="percentage")
        assert evaluate(condition, 120.0, target=100.0) is True

    def test_incomplete_condition_never_holds(self):
        assert evaluate(AlertCondition(type="threshold", value=50.0), 10.0, 100.0) is False
        assert evaluate(AlertCondition(type="threshold", operator="<"), 10.0, 100.0) is False

    def test_zero_limit_is_a_real_limit(self):
        condition = AlertCondition(type="threshold", operator="<", value=0.0)
        assert evaluate(condition, -5.0, 100.0) is True

    def test_no_submission(self):
        condition = AlertCondition(type="threshold", operator="<", value=50.0)
        assert evaluate(condition, None, 100.0) is False


class TestTargetMiss:
    def test_below_share_of_target(self):
        condition = AlertCondition(type="target_miss", value=80.0)
        assert evaluate(condition, 35.0, target=50.0) is True
        assert evaluate(condition, 40.0, target=50.0) is False

    def test_missing_target_resolves_to_100(self):
        condition = AlertCondition(type="target_miss", value=80.0)
        assert evaluate(condition, 79.0, target=None) is True

    def test_without_limit(self):
        assert evaluate(AlertCondition(type="target_miss"), 0.0, 100.0) is False


class TestNoData:
    def test_missing_submission(self):
        assert evaluate(AlertCondition(type="no_data"), None, 100.0) is True

    def test_stale_submission_uses_default_window(self):
        condition = AlertCondition(type="no_data")
        assert evaluate(condition, 10.0, 100.0, age_minutes=61) is True
        assert evaluate(condition, 10.0, 100.0, age_minutes=60) is False

    def test_custom_window(self):
        condition = AlertCondition(type="no_data", duration_minutes=1440)
        assert evaluate(condition, 10.0, 100.0, age_minutes=120) is False

    def test_unknown_age(self):
        assert evaluate(AlertCondition(type="no_data"), 10.0, 100.0) is False


def test_series_conditions_never_hold_for_one_submission():
    assert evaluate(AlertCondition(type="trend"), 10.0, 100.0) is False
    assert evaluate(AlertCondition(type="anomaly"), None, 100.0) is False


def test_any_condition_met_respects_kpi_filter():
    conditions = [
        AlertCondition(type="threshold", kpi_id="k2", operator="<", value=50.0),
        AlertCondition(type="target_miss", value=80.0),
    ]
    assert any_condition_met(conditions, "k1", 90.0, 100.0) is False
    assert any_condition_met(conditions, "k2", 45.0, 50.0) is True
    assert any_condition_met(conditions, "k1", 70.0, 100.0) is True
    assert any_condition_met([], "k1", 0.0, 100.0) is False


def test_from_row_normalizes_keywords():
    condition = AlertCondition.from_row(
        {"type": " Threshold ", "operator": "<=", "value": "50", "comparison": "PERCENTAGE", "kpi_id": ""}
    )
    assert condition == AlertCondition(type="threshold", operator="<=", value=50.0, comparison="percentage")


@pytest.mark.parametrize(
    "row",
    [{"type": "sms"}, {"type": ""}, {"type": "threshold", "operator": "!="}, {"type": "threshold", "comparison": "x"}],
)
def test_from_row_rejects_unknown_keywords(row):
    with pytest.raises(InvalidModeError):
        AlertCondition.from_row(row)


def test_percent_of_target():
    assert percent_of_target(25.0, 50.0) == pytest.approx(50.0)
