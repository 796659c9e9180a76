"""Model factory scorecard engine."""

from .application import (
    budget_efficiency,
    evidence_summary,
    factory_performance,
    recompute_weights,
    score_periods,
)
from .domain import AccessScope
from .infrastructure import InMemoryRepository, load_workbook_repository

__all__ = [
    "AccessScope",
    "InMemoryRepository",
    "load_workbook_repository",
    "score_periods",
    "budget_efficiency",
    "evidence_summary",
    "factory_performance",
    "recompute_weights",
]
