"""Quarter period tokens ("YYYY-Qn")."""

from __future__ import annotations

import re
from typing import Iterable, List, Tuple

from scorecard.errors import InvalidPeriodError

_PERIOD_RE = re.compile(r"^(\d{4})-Q([1-4])$")


def parse_period(period: str) -> Tuple[int, int]:
    match = _PERIOD_RE.match(str(period or "").strip())
    if match is None:
        raise InvalidPeriodError(f"period must look like YYYY-Qn, got {period!r}")
    return int(match.group(1)), int(match.group(2))


def format_period(year: int, quarter: int) -> str:
    return f"{year}-Q{quarter}"


def previous_period(period: str) -> str:
    """Canonical prior quarter: Q1 rolls back to Q4 of the previous year."""
    year, quarter = parse_period(period)
    if quarter == 1:
        return format_period(year - 1, 4)
    return format_period(year, quarter - 1)


def sort_periods(periods: Iterable[str]) -> List[str]:
    unique = {str(period).strip() for period in periods}
    return sorted(unique, key=parse_period)


def period_window(end: str, count: int) -> List[str]:
    """The ``count`` quarters ending at ``end``, oldest first."""
    parse_period(end)
    if count < 1:
        return []
    window = [end]
    current = end
    for _ in range(count - 1):
        current = previous_period(current)
        window.append(current)
    window.reverse()
    return window
