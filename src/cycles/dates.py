"""Calendar-date parsing and whole-day arithmetic.

Every date in the mood model is a plain ``datetime.date``.  No time-of-day or
timezone is ever attached, so the same input date always yields the same
output dates regardless of the host's locale.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta

logger = logging.getLogger("moodcycle.cycles.dates")

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class InvalidDateError(ValueError):
    """Raised when a reference date is missing or cannot be parsed."""


def parse_reference_date(value: date | str | None) -> date:
    """Parse a reference date from an ISO 8601 ``YYYY-MM-DD`` string.

    ``date`` instances pass through unchanged; a ``datetime`` is rejected
    since it carries a time component.

    Args:
        value: The user-supplied date.

    Returns:
        The parsed calendar date.

    Raises:
        InvalidDateError: If the value is empty, malformed, or not a real
            calendar date (e.g. ``2024-02-30``).
    """
    if isinstance(value, datetime):
        raise InvalidDateError(f"Expected a calendar date without time, got {value!r}")
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidDateError("A reference date is required (YYYY-MM-DD)")

    text = value.strip()
    if not _ISO_DATE_RE.match(text):
        logger.warning("Rejected malformed reference date: %r", value)
        raise InvalidDateError(f"Invalid date {value!r}: expected YYYY-MM-DD")
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        logger.warning("Rejected impossible reference date: %r", value)
        raise InvalidDateError(f"Invalid date {value!r}: {exc}") from exc


def add_days(start: date, days: int) -> date:
    """Shift ``start`` by a whole number of days (negative moves backwards).

    Raises:
        InvalidDateError: If the result falls outside the supported calendar
            (years 1..9999).
    """
    try:
        return start + timedelta(days=days)
    except OverflowError as exc:
        raise InvalidDateError(
            f"{start.isoformat()} is too close to the calendar limits to project cycles"
        ) from exc


def day_in_cycle(cycle_start: date, query_date: date) -> int:
    """Return the 1-indexed cycle day of ``query_date``.

    Day 1 is ``cycle_start`` itself; dates before the start give 0 or less.
    """
    return (query_date - cycle_start).days + 1
