"""Infrastructure layer package."""

from .excel_repository import load_workbook_repository
from .report_exporter import save_output_workbook, save_summary_json, summary_sheets
from .repository import DataAccess, InMemoryRepository, fetch

__all__ = [
    "DataAccess",
    "InMemoryRepository",
    "fetch",
    "load_workbook_repository",
    "save_output_workbook",
    "save_summary_json",
    "summary_sheets",
]
