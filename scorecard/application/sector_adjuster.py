"""Sector-exposure weighting of raw KPI values for a single factory."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Sequence

from scorecard.domain.models import KpiValue, SectorShare
from scorecard.domain.policies import mean_value, weighted_mean_or_plain
from scorecard.domain.sectors import sector_for_nace


@dataclass(frozen=True)
class AdjustedValue:
    value: float | None
    weighted: bool


def shares_by_sector(shares: Iterable[SectorShare]) -> Dict[str, float]:
    totals: Dict[str, float] = {}
    for share in shares:
        totals[share.sector] = totals.get(share.sector, 0.0) + share.share
    return totals


def value_weight(value: KpiValue, shares: Mapping[str, float]) -> float:
    """Factory share of the value's sector; values without a NACE code weigh 0."""
    if not value.nace_code:
        return 0.0
    return shares.get(sector_for_nace(value.nace_code), 0.0)


def is_applicable(values: Sequence[KpiValue], shares: Mapping[str, float] | None) -> bool:
    return bool(shares) and any(value.nace_code for value in values)


def adjusted_mean(values: Sequence[KpiValue], shares: Mapping[str, float] | None) -> AdjustedValue:
    """Sector-weighted mean of the raw values, or the plain mean when weighting does not apply.

    ``shares`` is None when no single factory was requested.
    """
    raw = [value.value for value in values]
    if not raw:
        return AdjustedValue(None, False)
    if shares is None or not is_applicable(values, shares):
        return AdjustedValue(mean_value(raw), False)
    weights = [value_weight(value, shares) for value in values]
    mean, weighted = weighted_mean_or_plain(raw, weights)
    return AdjustedValue(mean, weighted)
