"""Shared fixtures: a small three-factory network with two quarters of submissions."""

import pytest

from scorecard.config import Settings
from scorecard.domain.models import (
    Action,
    ActionBudget,
    ActionKpi,
    ActionStep,
    EvidenceRecord,
    Factory,
    Kpi,
    KpiValue,
    SectorShare,
    StrategicGoal,
    StrategicTarget,
)
from scorecard.infrastructure.repository import InMemoryRepository


@pytest.fixture
def goals():
    return [
        StrategicGoal(id="g1", code="SA1", title="Verimlilik"),
        StrategicGoal(id="g2", code="SA2", title="Dayanıklılık"),
    ]


@pytest.fixture
def targets():
    return [
        StrategicTarget(id="t1", code="SH1.1", strategic_goal_id="g1", title="Operasyonel verim"),
        StrategicTarget(id="t2", code="SH1.2", strategic_goal_id="g1", title="Enerji"),
        StrategicTarget(id="t3", code="SH2.1", strategic_goal_id="g2", title="Risk yönetimi"),
    ]


@pytest.fixture
def kpis():
    return [
        Kpi(
            id="k1",
            number=1,
            strategic_target_id="t1",
            description="OEE iyileştirme oranı",
            target_value=100.0,
            themes=("LEAN",),
            sh_weight=0.75,
        ),
        Kpi(
            id="k2",
            number=2,
            strategic_target_id="t1",
            description="ERP kullanım oranı",
            target_value=50.0,
            themes=("DIGITAL",),
            sh_weight=0.25,
        ),
        Kpi(
            id="k3",
            number=3,
            strategic_target_id="t2",
            description="Enerji tasarrufu",
            target_value=10.0,
            themes=("GREEN",),
        ),
        Kpi(
            id="k4",
            number=4,
            strategic_target_id="t3",
            description="Risk ve süreklilik planı",
            target_value=None,
            themes=("LEAN", "RESILIENCE"),
        ),
    ]


@pytest.fixture
def factories():
    return [
        Factory(id="f1", code="MF01", name="Ankara MF", region="İç Anadolu"),
        Factory(id="f2", code="MF02", name="Bursa MF", region="Marmara"),
        Factory(id="f3", code="MF03", name="İzmir MF", region="Ege"),
    ]


@pytest.fixture
def kpi_values():
    return [
        KpiValue(kpi_id="k1", factory_id="f1", period="2024-Q3", value=70.0),
        KpiValue(kpi_id="k2", factory_id="f1", period="2024-Q3", value=20.0),
        KpiValue(kpi_id="k1", factory_id="f1", period="2024-Q4", value=80.0),
        KpiValue(kpi_id="k2", factory_id="f1", period="2024-Q4", value=20.0),
        KpiValue(kpi_id="k3", factory_id="f1", period="2024-Q4", value=8.0),
        KpiValue(kpi_id="k4", factory_id="f1", period="2024-Q4", value=90.0),
        KpiValue(kpi_id="k1", factory_id="f2", period="2024-Q4", value=60.0),
        KpiValue(kpi_id="k2", factory_id="f2", period="2024-Q4", value=50.0),
        KpiValue(kpi_id="k3", factory_id="f2", period="2024-Q4", value=5.0),
        KpiValue(kpi_id="k1", factory_id="f3", period="2024-Q4", value=30.0),
    ]


@pytest.fixture
def evidence():
    otomotiv = [
        EvidenceRecord(
            factory_id="f1" if idx % 2 else "f2",
            period="2024-Q4",
            nace4d="29.10",
            employees=10.0 * (idx + 1),
            revenue=1000.0,
            has_export=idx < 2,
            firm_id_hash=f"firm-{idx}" if idx < 4 else None,
        )
        for idx in range(5)
    ]
    gida = [
        EvidenceRecord(factory_id="f1", period="2024-Q4", nace4d="10.11", employees=5.0, revenue=200.0),
        EvidenceRecord(factory_id="f2", period="2024-Q4", nace2d="10", employees=7.0, revenue=300.0),
    ]
    older = [EvidenceRecord(factory_id="f1", period="2024-Q3", nace4d="29.10")]
    return otomotiv + gida + older


@pytest.fixture
def repo(goals, targets, kpis, factories, kpi_values, evidence):
    return InMemoryRepository(
        goals=goals,
        targets=targets,
        kpis=kpis,
        factories=factories,
        sector_shares=[
            SectorShare(factory_id="f1", sector="Otomotiv", share=0.6),
            SectorShare(factory_id="f1", sector="Makine", share=0.4),
        ],
        kpi_values=kpi_values,
        actions=[
            Action(id="a1", strategic_target_id="t1", code="AK-1", completion_percent=80.0),
            Action(id="a2", strategic_target_id="t3", code="AK-2", completion_percent=50.0),
            Action(id="a3", strategic_target_id="t2", code="AK-3", completion_percent=100.0),
        ],
        action_kpis=[
            ActionKpi(action_id="a1", kpi_id="k1", impact_score=0.5),
            ActionKpi(action_id="a2", kpi_id="k4", impact_score=None),
        ],
        action_budgets=[
            ActionBudget(action_id="a1", planned_amount=1000.0, actual_amount=800.0),
            ActionBudget(action_id="a2", planned_amount=0.0, actual_amount=0.0),
        ],
        action_steps=[
            ActionStep(action_id="a2", planned_cost=500.0, actual_cost=100.0, period="2024-Q4"),
            ActionStep(action_id="a2", planned_cost=999.0, actual_cost=999.0, period="2024-Q3"),
        ],
        evidence=evidence,
    )


@pytest.fixture
def settings():
    return Settings()
