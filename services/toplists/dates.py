"""
Date range handling for refresh triggers.

Reports are queried for an inclusive [start, end] range of ISO dates
(YYYY-MM-DD). The active range is persisted in the variable store as
Start_date / End_date; when either is missing or invalid the current
calendar month is used and written back.
"""

from __future__ import annotations

import calendar
import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from services.toplists.errors import InvalidDateRangeError

if TYPE_CHECKING:
    from services.toplists.collaborators.variables import VariableStore

logger = logging.getLogger(__name__)

START_DATE_VARIABLE = "Start_date"
END_DATE_VARIABLE = "End_date"

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_date(value: str | None) -> date | None:
    """Return the date for a strict YYYY-MM-DD string, else None."""
    if not value or not _ISO_DATE_RE.match(value.strip()):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def is_valid_date(value: str | None) -> bool:
    return parse_iso_date(value) is not None


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidDateRangeError(
                f"start date {self.start.isoformat()} is after end date {self.end.isoformat()}"
            )

    @classmethod
    def from_strings(cls, start: str | None, end: str | None) -> "DateRange":
        start_date = parse_iso_date(start)
        end_date = parse_iso_date(end)
        if start_date is None:
            raise InvalidDateRangeError(f"invalid start date: {start!r}")
        if end_date is None:
            raise InvalidDateRangeError(f"invalid end date: {end!r}")
        return cls(start_date, end_date)

    def query_params(self) -> dict[str, str]:
        return {
            "$start_date": self.start.isoformat(),
            "$end_date": self.end.isoformat(),
        }

    def __str__(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat()}"


def current_month_range(today: date | None = None) -> DateRange:
    """First through last day of the month containing `today`."""
    today = today or date.today()
    last_day = calendar.monthrange(today.year, today.month)[1]
    return DateRange(today.replace(day=1), today.replace(day=last_day))


async def load_date_range(store: VariableStore, today: date | None = None) -> DateRange:
    """
    Read the persisted range, falling back per field to the current month.

    Any field that fell back is written back to the store so the host UI
    shows the same range the refresh uses.
    """
    default = current_month_range(today)

    stored_start = parse_iso_date(await store.get(START_DATE_VARIABLE))
    stored_end = parse_iso_date(await store.get(END_DATE_VARIABLE))

    start = stored_start or default.start
    end = stored_end or default.end

    if stored_start is None:
        await store.set(START_DATE_VARIABLE, start.isoformat())
    if stored_end is None:
        await store.set(END_DATE_VARIABLE, end.isoformat())

    try:
        return DateRange(start, end)
    except InvalidDateRangeError:
        # one stored bound plus one default bound can cross
        logger.warning(
            "Stored date range %s..%s is inverted; using current month",
            start.isoformat(),
            end.isoformat(),
        )
        await store.set(START_DATE_VARIABLE, default.start.isoformat())
        await store.set(END_DATE_VARIABLE, default.end.isoformat())
        return default
