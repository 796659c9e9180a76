"""Error taxonomy for the scorecard engine."""

from __future__ import annotations


class ScorecardError(Exception):
    """Base class for scorecard engine failures."""


class MissingSelectorError(ScorecardError, ValueError):
    """A required selector (e.g. factory id) was not supplied."""

    def __init__(self, selector: str) -> None:
        super().__init__(f"{selector} is required")
        self.selector = selector


class InvalidPeriodError(ScorecardError, ValueError):
    """A period token does not match YYYY-Qn."""


class InvalidModeError(ScorecardError, ValueError):
    """An unknown mode, grouping key or alert condition keyword was requested."""


class NotFoundError(ScorecardError, LookupError):
    """A selected entity does not exist or is outside the caller's access scope."""


class DataAccessError(ScorecardError):
    """Fetching records from the data-access layer failed."""

    def __init__(self, operation: str, detail: str) -> None:
        super().__init__(f"{operation} failed: {detail}")
        self.operation = operation
        self.detail = detail
