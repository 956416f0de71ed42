"""Error taxonomy for the reporting core.

Caller mistakes (authorization, invalid period, unknown entity) are kept apart
from backend faults so the request layer can map them to 4xx and 5xx responses.
"""

from __future__ import annotations


class ReportingError(Exception):
    """Base exception for reporting and access-control errors."""


class AuthorizationError(ReportingError):
    """Raised when the caller lacks the capability or scope for an operation."""

    def __init__(self, message: str, *, capability: str | None = None) -> None:
        super().__init__(message)
        self.capability = capability


class InvalidPeriodError(ReportingError):
    """Raised when an explicit date range is empty, inverted or incomplete."""


class EntityNotFoundError(ReportingError):
    """Raised when none of the requested entities has data in the window."""


class DataSourceUnavailableError(ReportingError):
    """Raised when snapshots, evaluations or the hierarchy cannot be read."""
