"""
Exception hierarchy for the top-lists service.

Only conditions that abort work are exceptions. An empty report, an
unrecognised field layout, or a report with no diagonal rows are normal
outcomes: the dataset's slots get cleared and the refresh carries on.
"""

from __future__ import annotations


class TopListsError(Exception):
    """Base class for all top-lists failures."""


class AccountNotReadyError(TopListsError):
    """The host never supplied an account id within the wait timeout."""

    def __init__(self, timeout_s: float) -> None:
        super().__init__(f"account id not available after {timeout_s:.2f}s")
        self.timeout_s = timeout_s


class ReportFetchError(TopListsError):
    """Fetching a pivot report failed (network, HTTP status, or bad JSON)."""

    def __init__(self, kind: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"{kind} report fetch failed: {message}")
        self.kind = kind
        self.status_code = status_code


class VariableStoreError(TopListsError):
    """Reading or writing a slot variable failed."""

    def __init__(self, name: str, message: str) -> None:
        super().__init__(f"variable {name!r}: {message}")
        self.name = name


class InvalidDateRangeError(TopListsError, ValueError):
    """A trigger date is missing, not ISO YYYY-MM-DD, or the range is inverted."""
