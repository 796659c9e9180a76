"""Evidence statistics grouped by industry, with small groups suppressed."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

import polars as pl

from scorecard.domain.models import EvidenceRecord
from scorecard.domain.sectors import sector_for_nace, to_nace2d
from scorecard.errors import InvalidModeError

GROUP_KEYS: Tuple[str, ...] = ("nace2d", "sector")
DEFAULT_MIN_N = 5

EVIDENCE_SCHEMA: Dict[str, Any] = {
    "key": pl.Utf8,
    "employees": pl.Float64,
    "revenue": pl.Float64,
    "has_firm": pl.Int64,
    "has_export": pl.Int64,
}


@dataclass(frozen=True)
class EvidenceGroup:
    key: str
    count: int
    employees: float
    revenue: float
    firms: int
    exporters: int


def validate_group_by(group_by: str) -> str:
    normalized = str(group_by or "").strip().lower()
    if normalized not in GROUP_KEYS:
        raise InvalidModeError(f"group_by must be one of {GROUP_KEYS}, got {group_by!r}")
    return normalized


def effective_min_n(min_n: int | None, default: int = DEFAULT_MIN_N) -> int:
    """Caller-supplied threshold, floored at 1."""
    if min_n is None:
        min_n = default
    return max(1, int(min_n))


def classification_key(record: EvidenceRecord, group_by: str) -> str:
    if group_by == "nace2d":
        return to_nace2d(record.nace4d, record.nace2d)
    return sector_for_nace(record.nace4d or record.nace2d)


def aggregate_evidence(
    records: Sequence[EvidenceRecord],
    group_by: str = "sector",
    min_n: int | None = None,
) -> List[EvidenceGroup]:
    """Groups with fewer than ``min_n`` records are dropped entirely; largest groups first."""
    group_by = validate_group_by(group_by)
    threshold = effective_min_n(min_n)
    rows = [
        {
            "key": classification_key(record, group_by),
            "employees": record.employees,
            "revenue": record.revenue,
            "has_firm": 1 if record.firm_id_hash else 0,
            "has_export": 1 if record.has_export else 0,
        }
        for record in records
    ]
    frame = pl.DataFrame(rows, schema=EVIDENCE_SCHEMA)
    if frame.is_empty():
        return []

    grouped = (
        frame.group_by("key")
        .agg(
            pl.len().alias("count"),
            pl.col("employees").sum().alias("employees"),
            pl.col("revenue").sum().alias("revenue"),
            pl.col("has_firm").sum().alias("firms"),
            pl.col("has_export").sum().alias("exporters"),
        )
        .filter(pl.col("count") >= threshold)
        .sort(["count", "key"], descending=[True, False])
    )
    return [
        EvidenceGroup(
            key=str(row["key"]),
            count=int(row["count"]),
            employees=float(row["employees"]),
            revenue=float(row["revenue"]),
            firms=int(row["firms"]),
            exporters=int(row["exporters"]),
        )
        for row in grouped.to_dicts()
    ]
