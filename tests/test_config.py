import pytest

from scorecard.config import Settings, load_settings

ENV_VARS = (
    "SCORECARD_MIN_GROUP_SIZE",
    "SCORECARD_TOP_MOVERS",
    "SCORECARD_FLOOR_NEGATIVE",
    "SCORECARD_PARSE_ERROR_THRESHOLD",
    "SCORECARD_DEFAULT_PERIOD",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    assert load_settings() == Settings(
        min_group_size=5,
        top_movers=8,
        floor_negative=False,
        parse_error_threshold=0.01,
        default_period="2024-Q4",
    )


def test_overrides(monkeypatch):
    monkeypatch.setenv("SCORECARD_MIN_GROUP_SIZE", "10")
    monkeypatch.setenv("SCORECARD_TOP_MOVERS", "3")
    monkeypatch.setenv("SCORECARD_FLOOR_NEGATIVE", "yes")
    monkeypatch.setenv("SCORECARD_PARSE_ERROR_THRESHOLD", "0.05")
    monkeypatch.setenv("SCORECARD_DEFAULT_PERIOD", "2025-Q1")
    settings = load_settings()
    assert settings.min_group_size == 10
    assert settings.top_movers == 3
    assert settings.floor_negative is True
    assert settings.parse_error_threshold == pytest.approx(0.05)
    assert settings.default_period == "2025-Q1"


@pytest.mark.parametrize(
    "name,value",
    [
        ("SCORECARD_MIN_GROUP_SIZE", "five"),
        ("SCORECARD_MIN_GROUP_SIZE", "0"),
        ("SCORECARD_TOP_MOVERS", "-1"),
        ("SCORECARD_FLOOR_NEGATIVE", "maybe"),
        ("SCORECARD_PARSE_ERROR_THRESHOLD", "1.5"),
        ("SCORECARD_PARSE_ERROR_THRESHOLD", "high"),
        ("SCORECARD_DEFAULT_PERIOD", "2025-Q7"),
    ],
)
def test_invalid_values_name_the_variable(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        load_settings()
