"""Data-access interface and an in-memory implementation."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Protocol, Sequence, TypeVar

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
    TargetWeightOverride,
)
from scorecard.errors import DataAccessError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DataAccess(Protocol):
    def list_goals(self) -> List[StrategicGoal]: ...

    def list_targets(self) -> List[StrategicTarget]: ...

    def list_kpis(self, theme: str | None = None, kpi_id: str | None = None) -> List[Kpi]: ...

    def list_factories(self, factory_ids: Iterable[str] | None = None) -> List[Factory]: ...

    def list_sector_shares(self, factory_id: str) -> List[SectorShare]: ...

    def list_weight_overrides(self, factory_id: str) -> List[TargetWeightOverride]: ...

    def list_kpi_values(
        self,
        periods: Sequence[str],
        factory_ids: Iterable[str] | None = None,
        kpi_ids: Iterable[str] | None = None,
    ) -> List[KpiValue]: ...

    def list_actions(self) -> List[Action]: ...

    def list_action_kpis(self) -> List[ActionKpi]: ...

    def list_action_budgets(self) -> List[ActionBudget]: ...

    def list_action_steps(self) -> List[ActionStep]: ...

    def list_evidence(self, period: str, factory_id: str | None = None) -> List[EvidenceRecord]: ...


def fetch(operation: str, loader: Callable[[], T]) -> T:
    """Run a repository call, reporting any failure as DataAccessError."""
    try:
        return loader()
    except DataAccessError:
        raise
    except Exception as exc:
        logger.error("Data access %s failed: %s", operation, exc)
        raise DataAccessError(operation, str(exc)) from exc


class InMemoryRepository:
    """Holds already-fetched records; every list call returns a filtered copy."""

    def __init__(
        self,
        goals: Iterable[StrategicGoal] = (),
        targets: Iterable[StrategicTarget] = (),
        kpis: Iterable[Kpi] = (),
        factories: Iterable[Factory] = (),
        sector_shares: Iterable[SectorShare] = (),
        weight_overrides: Iterable[TargetWeightOverride] = (),
        kpi_values: Iterable[KpiValue] = (),
        actions: Iterable[Action] = (),
        action_kpis: Iterable[ActionKpi] = (),
        action_budgets: Iterable[ActionBudget] = (),
        action_steps: Iterable[ActionStep] = (),
        evidence: Iterable[EvidenceRecord] = (),
    ) -> None:
        self.goals = list(goals)
        self.targets = list(targets)
        self.kpis = list(kpis)
        self.factories = list(factories)
        self.sector_shares = list(sector_shares)
        self.weight_overrides = list(weight_overrides)
        self._kpi_values: Dict[tuple[str, str, str], KpiValue] = {}
        for value in kpi_values:
            self.upsert_kpi_value(value)
        self.actions = list(actions)
        self.action_kpis = list(action_kpis)
        self.action_budgets = list(action_budgets)
        self.action_steps = list(action_steps)
        self.evidence = list(evidence)

    def upsert_kpi_value(self, value: KpiValue) -> None:
        """(kpi, factory, period) is unique; a later submission replaces the earlier one."""
        self._kpi_values[value.key] = value

    def replace_weights(self, targets: Iterable[StrategicTarget], kpis: Iterable[Kpi]) -> None:
        self.targets = list(targets)
        self.kpis = list(kpis)

    def list_goals(self) -> List[StrategicGoal]:
        return sorted(self.goals, key=lambda goal: goal.code)

    def list_targets(self) -> List[StrategicTarget]:
        return sorted(self.targets, key=lambda target: target.code)

    def list_kpis(self, theme: str | None = None, kpi_id: str | None = None) -> List[Kpi]:
        rows = self.kpis
        if kpi_id:
            rows = [kpi for kpi in rows if kpi.id == kpi_id]
        if theme:
            rows = [kpi for kpi in rows if kpi.has_theme(theme)]
        return sorted(rows, key=lambda kpi: kpi.number)

    def list_factories(self, factory_ids: Iterable[str] | None = None) -> List[Factory]:
        if factory_ids is None:
            return list(self.factories)
        wanted = set(factory_ids)
        return [factory for factory in self.factories if factory.id in wanted]

    def list_sector_shares(self, factory_id: str) -> List[SectorShare]:
        return [share for share in self.sector_shares if share.factory_id == factory_id]

    def list_weight_overrides(self, factory_id: str) -> List[TargetWeightOverride]:
        return [row for row in self.weight_overrides if row.factory_id == factory_id]

    def list_kpi_values(
        self,
        periods: Sequence[str],
        factory_ids: Iterable[str] | None = None,
        kpi_ids: Iterable[str] | None = None,
    ) -> List[KpiValue]:
        period_set = set(periods)
        factory_set = None if factory_ids is None else set(factory_ids)
        kpi_set = None if kpi_ids is None else set(kpi_ids)
        return [
            value
            for value in self._kpi_values.values()
            if value.period in period_set
            and (factory_set is None or value.factory_id in factory_set)
            and (kpi_set is None or value.kpi_id in kpi_set)
        ]

    def list_actions(self) -> List[Action]:
        return list(self.actions)

    def list_action_kpis(self) -> List[ActionKpi]:
        return list(self.action_kpis)

    def list_action_budgets(self) -> List[ActionBudget]:
        return list(self.action_budgets)

    def list_action_steps(self) -> List[ActionStep]:
        return list(self.action_steps)

    def list_evidence(self, period: str, factory_id: str | None = None) -> List[EvidenceRecord]:
        return [
            record
            for record in self.evidence
            if record.period == period and (factory_id is None or record.factory_id == factory_id)
        ]
