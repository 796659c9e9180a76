"""Infrastructure adapter: load a scorecard workbook into an in-memory repository."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Sequence, Tuple

import polars as pl
from openpyxl import load_workbook

from scorecard.config import load_settings
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
from scorecard.domain.themes import tag_themes
from scorecard.infrastructure.repository import InMemoryRepository

logger = logging.getLogger(__name__)

REQUIRED_SHEETS: Tuple[str, ...] = ("goals", "targets", "kpis", "factories", "kpi_values")

# sheet -> (record constructor, numeric columns checked for parse errors)
SHEET_RECORDS: Dict[str, Tuple[Callable[[Dict[str, Any]], Any], Tuple[str, ...]]] = {
    "goals": (StrategicGoal.from_row, ()),
    "targets": (StrategicTarget.from_row, ("goal_weight",)),
    "kpis": (Kpi.from_row, ("number", "target_value", "sh_weight")),
    "factories": (Factory.from_row, ()),
    "sector_shares": (SectorShare.from_row, ("share",)),
    "weight_overrides": (TargetWeightOverride.from_row, ("weight",)),
    "kpi_values": (KpiValue.from_row, ("value",)),
    "actions": (Action.from_row, ("completion_percent",)),
    "action_kpis": (ActionKpi.from_row, ("impact_score",)),
    "action_budgets": (ActionBudget.from_row, ("planned_amount", "actual_amount")),
    "action_steps": (ActionStep.from_row, ("planned_cost", "actual_cost")),
    "evidence": (EvidenceRecord.from_row, ("employees", "revenue")),
}

# sheet -> numeric columns a row must carry to become a record
REQUIRED_VALUES: Dict[str, Tuple[str, ...]] = {
    "kpi_values": ("value",),
}


def _normalize_headers(raw_headers: Sequence[Any]) -> list[str]:
    headers: list[str] = []
    seen: dict[str, int] = {}
    for idx, value in enumerate(raw_headers):
        base = str(value).strip().lower() if value not in (None, "") else f"column_{idx + 1}"
        count = seen.get(base, 0)
        headers.append(base if count == 0 else f"{base}_{count + 1}")
        seen[base] = count + 1
    return headers


def _cell_text(value: Any) -> str | None:
    """Cells are read as text so mixed-type columns survive frame construction."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    text = str(value).strip()
    return text or None


def _sheet_frame(worksheet: Any) -> pl.DataFrame:
    row_iter = worksheet.iter_rows(values_only=True)
    header_row = next(row_iter, None)
    if header_row is None:
        return pl.DataFrame()

    headers = _normalize_headers(header_row)
    records: list[dict[str, str | None]] = []
    for values in row_iter:
        if values is None or all(value is None for value in values):
            continue
        records.append({name: _cell_text(values[idx]) if idx < len(values) else None for idx, name in enumerate(headers)})
    schema = {name: pl.Utf8 for name in headers}
    return pl.DataFrame(records, schema=schema)


def _numeric_expr(column_name: str) -> pl.Expr:
    return pl.col(column_name).str.strip_chars().str.replace_all(",", "").cast(pl.Float64, strict=False)


def _parse_error_expr(column_name: str) -> pl.Expr:
    text_expr = pl.col(column_name).str.strip_chars()
    return (
        (text_expr.is_not_null() & (text_expr != "") & _numeric_expr(column_name).is_null())
        .cast(pl.UInt32)
        .alias(f"__parse_error_{column_name}")
    )


def validate_parse_errors(
    frame: pl.DataFrame,
    numeric_columns: Sequence[str],
    context: str,
    threshold: float,
) -> None:
    """Fail when the share of non-numeric cells in any numeric column exceeds ``threshold``."""
    if frame.is_empty() or threshold <= 0:
        return
    targets = [column for column in numeric_columns if column in frame.columns]
    if not targets:
        return

    checks = frame.select([_parse_error_expr(column) for column in targets])
    row_count = int(frame.height)
    failures: list[str] = []
    for column in targets:
        error_count = int(checks[f"__parse_error_{column}"].sum() or 0)
        ratio = error_count / row_count if row_count > 0 else 0.0
        if ratio > threshold:
            failures.append(f"{column}={ratio:.2%} ({error_count}/{row_count})")

    if failures:
        joined = ", ".join(failures)
        raise ValueError(f"Data quality check failed in {context}: numeric parse error ratio exceeds {threshold:.2%} ({joined})")


def _drop_incomplete(frame: pl.DataFrame, sheet: str) -> pl.DataFrame:
    required = REQUIRED_VALUES.get(sheet, ())
    if not required:
        return frame
    if any(column not in frame.columns for column in required):
        kept = frame.clear()
    else:
        kept = frame.drop_nulls(subset=list(required))
    dropped = frame.height - kept.height
    if dropped:
        logger.debug("Dropped %d rows without %s from sheet '%s'", dropped, ", ".join(required), sheet)
    return kept


def _records(frame: pl.DataFrame, sheet: str, threshold: float) -> List[Any]:
    build, numeric_columns = SHEET_RECORDS[sheet]
    if frame.is_empty():
        return []
    validate_parse_errors(frame, numeric_columns, context=f"sheet '{sheet}'", threshold=threshold)
    present = [column for column in numeric_columns if column in frame.columns]
    if present:
        frame = frame.with_columns([_numeric_expr(column).alias(column) for column in present])
    frame = _drop_incomplete(frame, sheet)
    return [build(row) for row in frame.to_dicts()]


def _tag_missing_themes(kpis: Sequence[Kpi]) -> List[Kpi]:
    return [kpi if kpi.themes else replace(kpi, themes=tag_themes(kpi.description)) for kpi in kpis]


def read_workbook_frames(path: str | Path) -> Dict[str, pl.DataFrame]:
    """Every known sheet present in the workbook as an all-text frame."""
    excel_path = Path(path)
    workbook = load_workbook(excel_path, read_only=True, data_only=True)
    try:
        sheet_names = {name.strip().lower(): name for name in workbook.sheetnames}
        missing = [sheet for sheet in REQUIRED_SHEETS if sheet not in sheet_names]
        if missing:
            raise ValueError(f"Missing sheets in {excel_path}: {', '.join(missing)}")
        return {
            sheet: _sheet_frame(workbook[sheet_names[sheet]]) for sheet in SHEET_RECORDS if sheet in sheet_names
        }
    finally:
        workbook.close()


def load_workbook_repository(path: str | Path, threshold: float | None = None) -> InMemoryRepository:
    if threshold is None:
        threshold = load_settings().parse_error_threshold
    frames = read_workbook_frames(path)
    records = {sheet: _records(frame, sheet, threshold) for sheet, frame in frames.items()}
    logger.info(
        "Loaded workbook %s: %s",
        path,
        ", ".join(f"{sheet}={len(rows)}" for sheet, rows in records.items()),
    )
    return InMemoryRepository(
        goals=records.get("goals", []),
        targets=records.get("targets", []),
        kpis=_tag_missing_themes(records.get("kpis", [])),
        factories=records.get("factories", []),
        sector_shares=records.get("sector_shares", []),
        weight_overrides=records.get("weight_overrides", []),
        kpi_values=records.get("kpi_values", []),
        actions=records.get("actions", []),
        action_kpis=records.get("action_kpis", []),
        action_budgets=records.get("action_budgets", []),
        action_steps=records.get("action_steps", []),
        evidence=records.get("evidence", []),
    )
