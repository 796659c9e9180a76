"""Application layer package."""

from .scoring_service import (
    BudgetEfficiencyResult,
    EvidenceSummary,
    FactoryPerformance,
    ScorecardResult,
    budget_efficiency,
    evidence_summary,
    factory_performance,
    recompute_weights,
    score_periods,
)

__all__ = [
    "BudgetEfficiencyResult",
    "EvidenceSummary",
    "FactoryPerformance",
    "ScorecardResult",
    "budget_efficiency",
    "evidence_summary",
    "factory_performance",
    "recompute_weights",
    "score_periods",
]
