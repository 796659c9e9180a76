import pytest

from scorecard.domain.periods import (
    format_period,
    parse_period,
    period_window,
    previous_period,
    sort_periods,
)
from scorecard.errors import InvalidPeriodError


def test_parse_period():
    assert parse_period("2024-Q3") == (2024, 3)
    assert format_period(2024, 3) == "2024-Q3"


@pytest.mark.parametrize("token", ["2024-Q5", "2024Q1", "24-Q1", "", None, "2024-q1"])
def test_parse_period_rejects_malformed(token):
    with pytest.raises(InvalidPeriodError):
        parse_period(token)


def test_invalid_period_is_a_value_error():
    with pytest.raises(ValueError):
        parse_period("next quarter")


def test_previous_period_rolls_back_year():
    assert previous_period("2024-Q1") == "2023-Q4"
    assert previous_period("2024-Q3") == "2024-Q2"


def test_sort_periods_is_chronological_and_unique():
    assert sort_periods(["2024-Q2", "2023-Q4", "2024-Q2", "2024-Q1"]) == ["2023-Q4", "2024-Q1", "2024-Q2"]


def test_period_window():
    assert period_window("2024-Q2", 4) == ["2023-Q3", "2023-Q4", "2024-Q1", "2024-Q2"]
    assert period_window("2024-Q2", 1) == ["2024-Q2"]
    assert period_window("2024-Q2", 0) == []


def test_period_window_validates_end():
    with pytest.raises(InvalidPeriodError):
        period_window("Q2-2024", 1)
