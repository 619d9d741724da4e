# Vendor Desk - Business management back office for software vendors
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period and time helpers for Vendor Desk.

Reporting in Vendor Desk is done per calendar month. This module defines a
Period value object ("YYYY-MM"), helpers to derive periods (current month,
previous month, trailing months) from the current date and CLI arguments,
and the clock used by every other module.

Dates and timestamps are stored as ISO-8601 text. Membership of a value in a
period is a string-prefix test on that text, so values that are missing or
not ISO-formatted never belong to any period.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional

MONTH_ABBREVIATIONS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)


@dataclass(frozen=True)
class Period:
    """A calendar month used as reporting period."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Invalid month: {self.month}")

    @property
    def key(self) -> str:
        """The "YYYY-MM" prefix identifying the period."""
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def label(self) -> str:
        """Short human-readable label, e.g. "Oct 2026"."""
        return f"{MONTH_ABBREVIATIONS[self.month - 1]} {self.year}"

    def shift(self, months: int) -> "Period":
        """Return the period ``months`` calendar months later (or earlier)."""
        index = self.year * 12 + (self.month - 1) + months
        return Period(year=index // 12, month=index % 12 + 1)

    def contains(self, value: object) -> bool:
        """True if ``value`` is ISO text starting with this period's key."""
        return isinstance(value, str) and value.startswith(self.key)

    def __str__(self) -> str:
        return self.key


def _now() -> datetime:
    """Return the current UTC datetime (isolated for easier testing)."""
    return datetime.now(timezone.utc)


def now_iso() -> str:
    """Return the current UTC datetime as ISO string."""
    return _now().isoformat(timespec="seconds")


def today() -> date:
    """Return the current UTC date."""
    return _now().date()


def current_period() -> Period:
    """The calendar month containing today."""
    t = today()
    return Period(year=t.year, month=t.month)


def parse_period(text: str) -> Period:
    """
    Parse a "YYYY-MM" string into a Period.

    Raises
    ------
    ValueError
        If the text is not a valid year-month.
    """
    try:
        year_raw, month_raw = text.strip().split("-")
        if len(year_raw) != 4 or len(month_raw) != 2:
            raise ValueError(text)
        return Period(year=int(year_raw), month=int(month_raw))
    except ValueError as exc:
        raise ValueError(f"Invalid period {text!r}, expected YYYY-MM.") from exc


def trailing_periods(count: int, reference: Optional[date] = None) -> list[Period]:
    """
    Return the ``count`` calendar months ending with the reference month.

    The list is ordered from the oldest month to the reference month, i.e.
    offsets ``count - 1`` down to ``0``.
    """
    if count < 1:
        raise ValueError("count must be at least 1.")
    ref = reference or today()
    last = Period(year=ref.year, month=ref.month)
    return [last.shift(-offset) for offset in range(count - 1, -1, -1)]


def determine_period_from_args(args) -> Period:
    """
    Determine the reporting month from CLI args.

    Priority (highest to lowest):

        1. args.period ("YYYY-MM")
        2. args.last_month
        3. current month by default
    """
    raw: Optional[str] = getattr(args, "period", None)
    if raw:
        return parse_period(raw)

    if getattr(args, "last_month", False):
        return current_period().shift(-1)

    return current_period()


def parse_timestamp(value: object) -> Optional[datetime]:
    """
    Parse ISO date or datetime text into an aware UTC datetime.

    - Date-only values are read as midnight UTC.
    - Naive datetimes are assumed to be UTC.
    - A trailing "Z" is accepted.
    - Anything else (None, malformed text, other types) yields None.
    """
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
