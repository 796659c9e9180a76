"""Domain records consumed by the scoring engine."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping


def _to_optional_float(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


def _to_float(value: Any, default: float = 0.0) -> float:
    number = _to_optional_float(value)
    return default if number is None else number


def _to_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _to_str(value: Any) -> str:
    return _to_optional_str(value) or ""


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y"}
    return bool(value)


def split_themes(raw: Any) -> tuple[str, ...]:
    """Parse a comma-separated theme column into upper-case tags."""
    if raw is None:
        return ()
    if isinstance(raw, (list, tuple)):
        parts: Iterable[Any] = raw
    else:
        parts = str(raw).split(",")
    tags = [str(part).strip().upper() for part in parts]
    return tuple(tag for tag in tags if tag)


@dataclass(frozen=True)
class StrategicGoal:
    id: str
    code: str
    title: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "StrategicGoal":
        return cls(id=_to_str(row.get("id")), code=_to_str(row.get("code")), title=_to_str(row.get("title")))


@dataclass(frozen=True)
class StrategicTarget:
    id: str
    code: str
    strategic_goal_id: str
    title: str = ""
    goal_weight: float | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "StrategicTarget":
        return cls(
            id=_to_str(row.get("id")),
            code=_to_str(row.get("code")),
            strategic_goal_id=_to_str(row.get("strategic_goal_id")),
            title=_to_str(row.get("title")),
            goal_weight=_to_optional_float(row.get("goal_weight")),
        )


@dataclass(frozen=True)
class Kpi:
    id: str
    number: int
    strategic_target_id: str
    description: str = ""
    unit: str = ""
    target_value: float | None = None
    themes: tuple[str, ...] = ()
    sh_weight: float | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Kpi":
        return cls(
            id=_to_str(row.get("id")),
            number=int(_to_float(row.get("number"))),
            strategic_target_id=_to_str(row.get("strategic_target_id")),
            description=_to_str(row.get("description")),
            unit=_to_str(row.get("unit")),
            target_value=_to_optional_float(row.get("target_value")),
            themes=split_themes(row.get("themes")),
            sh_weight=_to_optional_float(row.get("sh_weight")),
        )

    def has_theme(self, theme: str) -> bool:
        return theme.strip().upper() in self.themes


@dataclass(frozen=True)
class Factory:
    id: str
    code: str
    name: str = ""
    region: str | None = None
    province: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Factory":
        return cls(
            id=_to_str(row.get("id")),
            code=_to_str(row.get("code")),
            name=_to_str(row.get("name")),
            region=_to_optional_str(row.get("region")),
            province=_to_optional_str(row.get("province")),
        )


@dataclass(frozen=True)
class SectorShare:
    factory_id: str
    sector: str
    share: float

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SectorShare":
        return cls(
            factory_id=_to_str(row.get("factory_id")),
            sector=_to_str(row.get("sector")),
            share=_to_float(row.get("share")),
        )


@dataclass(frozen=True)
class TargetWeightOverride:
    factory_id: str
    strategic_target_id: str
    weight: float

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "TargetWeightOverride":
        return cls(
            factory_id=_to_str(row.get("factory_id")),
            strategic_target_id=_to_str(row.get("strategic_target_id")),
            weight=_to_float(row.get("weight"), default=1.0),
        )


@dataclass(frozen=True)
class KpiValue:
    kpi_id: str
    factory_id: str
    period: str
    value: float
    nace_code: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "KpiValue":
        return cls(
            kpi_id=_to_str(row.get("kpi_id")),
            factory_id=_to_str(row.get("factory_id")),
            period=_to_str(row.get("period")),
            value=_to_float(row.get("value")),
            nace_code=_to_optional_str(row.get("nace_code")),
        )

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.kpi_id, self.factory_id, self.period)


@dataclass(frozen=True)
class Action:
    id: str
    strategic_target_id: str
    code: str = ""
    title: str = ""
    completion_percent: float = 0.0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Action":
        return cls(
            id=_to_str(row.get("id")),
            strategic_target_id=_to_str(row.get("strategic_target_id")),
            code=_to_str(row.get("code")),
            title=_to_str(row.get("title")),
            completion_percent=_to_float(row.get("completion_percent")),
        )


@dataclass(frozen=True)
class ActionKpi:
    action_id: str
    kpi_id: str
    impact_score: float | None = None
    impact_level: str = "MEDIUM"

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ActionKpi":
        return cls(
            action_id=_to_str(row.get("action_id")),
            kpi_id=_to_str(row.get("kpi_id")),
            impact_score=_to_optional_float(row.get("impact_score")),
            impact_level=(_to_optional_str(row.get("impact_level")) or "MEDIUM").upper(),
        )


@dataclass(frozen=True)
class ActionBudget:
    action_id: str
    planned_amount: float = 0.0
    actual_amount: float = 0.0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ActionBudget":
        return cls(
            action_id=_to_str(row.get("action_id")),
            planned_amount=_to_float(row.get("planned_amount")),
            actual_amount=_to_float(row.get("actual_amount")),
        )


@dataclass(frozen=True)
class ActionStep:
    action_id: str
    planned_cost: float = 0.0
    actual_cost: float = 0.0
    period: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ActionStep":
        return cls(
            action_id=_to_str(row.get("action_id")),
            planned_cost=_to_float(row.get("planned_cost")),
            actual_cost=_to_float(row.get("actual_cost")),
            period=_to_optional_str(row.get("period")),
        )


@dataclass(frozen=True)
class EvidenceRecord:
    factory_id: str
    period: str
    nace4d: str | None = None
    nace2d: str | None = None
    employees: float = 0.0
    revenue: float = 0.0
    has_export: bool = False
    firm_id_hash: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "EvidenceRecord":
        return cls(
            factory_id=_to_str(row.get("factory_id")),
            period=_to_str(row.get("period")),
            nace4d=_to_optional_str(row.get("nace4d")),
            nace2d=_to_optional_str(row.get("nace2d")),
            employees=_to_float(row.get("employees")),
            revenue=_to_float(row.get("revenue")),
            has_export=_to_bool(row.get("has_export")),
            firm_id_hash=_to_optional_str(row.get("firm_id_hash")),
        )


@dataclass(frozen=True)
class AccessScope:
    """Factories a caller may see; ``factory_ids`` of None means every factory."""

    factory_ids: frozenset[str] | None = field(default=None)

    @classmethod
    def all(cls) -> "AccessScope":
        return cls(None)

    @classmethod
    def only(cls, factory_ids: Iterable[str]) -> "AccessScope":
        return cls(frozenset(str(item) for item in factory_ids))

    @property
    def is_unrestricted(self) -> bool:
        return self.factory_ids is None

    def allows(self, factory_id: str) -> bool:
        return self.factory_ids is None or factory_id in self.factory_ids

    def restrict(self, factory_id: str | None) -> "AccessScope":
        """Narrow to a single factory; a factory outside the scope yields an empty scope."""
        if factory_id is None:
            return self
        if not self.allows(factory_id):
            return AccessScope(frozenset())
        return AccessScope(frozenset({factory_id}))
