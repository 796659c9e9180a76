"""Infrastructure adapter for summary export targets."""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Dict

import polars as pl
from openpyxl import Workbook


def save_summary_json(path: Path, summary: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(summary, indent=2, ensure_ascii=False), encoding="utf-8")


def _excel_cell_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (int, bool, str)):
        return value
    if isinstance(value, float):
        return None if not math.isfinite(value) else value
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False)
    return value


def summary_sheets(summary: dict[str, Any]) -> Dict[str, pl.DataFrame]:
    """One sheet per top-level list of records; nested values are written as JSON text."""
    sheets: Dict[str, pl.DataFrame] = {}
    for key, value in summary.items():
        if not isinstance(value, list) or not value or not all(isinstance(row, dict) for row in value):
            continue
        rows = [{name: _excel_cell_value(cell) for name, cell in row.items()} for row in value]
        sheets[key] = pl.DataFrame(rows, infer_schema_length=None)
    return sheets


def write_output_workbook(path: Path, sheets: Dict[str, pl.DataFrame]) -> None:
    workbook = Workbook()
    if sheets:
        # openpyxl refuses to save a workbook without a visible sheet
        workbook.remove(workbook.active)
    for sheet_name, frame in sheets.items():
        worksheet = workbook.create_sheet(title=str(sheet_name)[:31])
        worksheet.append(frame.columns)
        for row in frame.iter_rows(named=False):
            worksheet.append([_excel_cell_value(value) for value in row])
    path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(path)


def save_output_workbook(path: Path, sheets: Dict[str, pl.DataFrame]) -> tuple[bool, str]:
    try:
        write_output_workbook(path, sheets)
    except PermissionError as exc:
        return False, str(exc)
    return True, ""
