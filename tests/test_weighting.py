import pytest

from scorecard.domain.models import Kpi, StrategicTarget
from scorecard.domain.themes import THEMES, tag_themes
from scorecard.domain.weighting import compute_weights, kpi_raw_score, target_raw_score


class TestThemeTagging:
    def test_tags_follow_theme_order(self):
        assert tag_themes("Enerji verimliliği ve ERP entegrasyonu") == ("LEAN", "DIGITAL", "GREEN")

    def test_case_insensitive(self):
        assert tag_themes("OEE ORANI") == ("LEAN",)

    def test_no_hits(self):
        assert tag_themes("Toplam çalışan sayısı") == ()
        assert tag_themes(None) == ()

    def test_every_theme_is_reachable(self):
        tagged = tag_themes("kaizen erp atık kriz")
        assert tagged == THEMES


def _kpi(kpi_id, description, themes=(), target_id="t1"):
    return Kpi(id=kpi_id, number=int(kpi_id[1:]), strategic_target_id=target_id, description=description, themes=themes)


def test_kpi_raw_score_components():
    kpi = _kpi("k1", "Dijital eğitim ve enerji", themes=("DIGITAL", "GREEN"))
    # three keyword groups + two themes (1.0) + SH1. hint (0.6)
    assert kpi_raw_score(kpi, "SH1.1") == pytest.approx(3 + 1.0 + 0.6)
    assert kpi_raw_score(kpi, "SH2.1") == pytest.approx(3 + 1.0 + 0.5)


def test_kpi_raw_score_minimum():
    assert kpi_raw_score(_kpi("k1", "Toplam sayı"), "SH3.1") == pytest.approx(1.0)


def test_target_raw_score():
    assert target_raw_score([]) == pytest.approx(1.0)
    assert target_raw_score([_kpi("k1", "", ("LEAN",))]) == pytest.approx(1.0)
    kpis = [_kpi("k1", "", ("DIGITAL",)), _kpi("k2", "", ("GREEN", "RESILIENCE"))]
    assert target_raw_score(kpis) == pytest.approx(1.0 + 0.5 + 1.5)


def test_compute_weights_normalizes_within_parents():
    targets = [
        StrategicTarget(id="t1", code="SH1.1", strategic_goal_id="g1"),
        StrategicTarget(id="t2", code="SH1.2", strategic_goal_id="g1"),
        StrategicTarget(id="t3", code="SH2.1", strategic_goal_id="g2"),
    ]
    kpis = [
        _kpi("k1", "Dijital platform", ("DIGITAL",), "t1"),
        _kpi("k2", "Toplam sayı", (), "t1"),
        _kpi("k3", "Karbon salımı", ("GREEN",), "t2"),
    ]
    result = compute_weights(targets, kpis)

    weights = {kpi.id: kpi.sh_weight for kpi in result.kpis}
    assert weights["k1"] + weights["k2"] == pytest.approx(1.0)
    assert weights["k1"] > weights["k2"]
    assert weights["k3"] == pytest.approx(1.0)

    goal_weights = {target.id: target.goal_weight for target in result.targets}
    assert goal_weights["t1"] + goal_weights["t2"] == pytest.approx(1.0)
    assert goal_weights["t3"] == pytest.approx(1.0)
    assert result.target_raw_scores["t3"] == pytest.approx(1.0)


def test_compute_weights_returns_copies():
    kpi = _kpi("k1", "Dijital", ("DIGITAL",))
    target = StrategicTarget(id="t1", code="SH1.1", strategic_goal_id="g1")
    result = compute_weights([target], [kpi])
    assert kpi.sh_weight is None
    assert target.goal_weight is None
    assert result.kpis[0].sh_weight == pytest.approx(1.0)
