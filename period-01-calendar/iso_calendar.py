"""
iso_calendar.py — Period 01: Calendar Engine
----------------------------------------------
Pure ISO-8601 calendar arithmetic for week and month identifiers.

Identifiers:
  - WeekId:   'YYYY-Www'  e.g. '2026-W05' (ISO week-numbering year)
  - MonthId:  'YYYY-MM'   e.g. '2026-01'

Rules:
  - Weeks start on Monday; week 1 is the week containing the year's
    first Thursday, so late-December dates can belong to next year's
    W01 and early-January dates to the previous year's W52/W53.
  - Thursday rule: a week belongs to the calendar month containing its
    Thursday (Monday + 3 days). Every other week→month mapping in the
    project goes through month_from_week().

Nothing here reads the clock unless `today` is omitted, and nothing
here performs I/O. Parsing failures raise immediately (see
period_errors.py).
"""

import re
from calendar import monthrange
from dataclasses import dataclass
from datetime import date, timedelta

from period_errors import InvalidFormat, InvalidMonthNumber, InvalidWeekNumber


# ---------------------------------------------------------------------------
# Data contract
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PeriodRange:
    date_from: date  # inclusive
    date_to: date    # inclusive

    def as_params(self) -> dict[str, str]:
        """Render as {'from': 'YYYY-MM-DD', 'to': 'YYYY-MM-DD'} for API calls."""
        return {"from": self.date_from.isoformat(), "to": self.date_to.isoformat()}

    @property
    def days(self) -> int:
        return (self.date_to - self.date_from).days + 1


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_WEEK_PATTERN = re.compile(r"^(\d{4})-W(\d{2})$")
_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")

THURSDAY_OFFSET = 3  # Monday + 3 days


# ---------------------------------------------------------------------------
# Parsing & validation
# ---------------------------------------------------------------------------

def split_week(week_id: str) -> tuple[int, int]:
    """
    Split a WeekId into (iso_year, iso_week) after full validation.

    Raises:
        InvalidFormat:     If week_id does not match 'YYYY-Www'.
        InvalidWeekNumber: If the week does not exist in that ISO year.
    """
    match = _WEEK_PATTERN.match(week_id) if isinstance(week_id, str) else None
    if not match:
        raise InvalidFormat(f"Invalid week format: {week_id!r} (expected YYYY-Www)")

    year = int(match.group(1))
    week = int(match.group(2))
    if year < 1:
        raise InvalidFormat(f"Invalid week format: {week_id!r} (year 0000)")
    if not (1 <= week <= iso_weeks_in_year(year)):
        raise InvalidWeekNumber(
            f"Invalid week number: {week_id!r} ({year} has {iso_weeks_in_year(year)} ISO weeks)"
        )
    return year, week


def split_month(month_id: str) -> tuple[int, int]:
    """
    Split a MonthId into (year, month) after full validation.

    Raises:
        InvalidFormat:      If month_id does not match 'YYYY-MM'.
        InvalidMonthNumber: If the month is outside 01–12.
    """
    match = _MONTH_PATTERN.match(month_id) if isinstance(month_id, str) else None
    if not match:
        raise InvalidFormat(f"Invalid month format: {month_id!r} (expected YYYY-MM)")

    year = int(match.group(1))
    month = int(match.group(2))
    if year < 1:
        raise InvalidFormat(f"Invalid month format: {month_id!r} (year 0000)")
    if not (1 <= month <= 12):
        raise InvalidMonthNumber(f"Invalid month number: {month_id!r} (expected 01–12)")
    return year, month


def parse_week(week_id: str) -> date:
    """Return the Monday of the given ISO week."""
    year, week = split_week(week_id)
    return date.fromisocalendar(year, week, 1)


def parse_month(month_id: str) -> date:
    """Return the 1st day of the given month."""
    year, month = split_month(month_id)
    return date(year, month, 1)


def is_valid_week(value: str) -> bool:
    """Non-raising twin of split_week(): checks format AND range."""
    try:
        split_week(value)
    except (InvalidFormat, InvalidWeekNumber):
        return False
    return True


def is_valid_month(value: str) -> bool:
    """Non-raising twin of split_month(): checks format AND range."""
    try:
        split_month(value)
    except (InvalidFormat, InvalidMonthNumber):
        return False
    return True


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def format_week(iso_year: int, iso_week: int) -> str:
    return f"{iso_year}-W{iso_week:02d}"


def format_month(year: int, month: int) -> str:
    return f"{year}-{month:02d}"


def week_of(d: date) -> str:
    """ISO week containing date d (may belong to the neighbouring ISO year)."""
    iso = d.isocalendar()
    return format_week(iso[0], iso[1])


def month_of(d: date) -> str:
    return format_month(d.year, d.month)


# ---------------------------------------------------------------------------
# Boundaries
# ---------------------------------------------------------------------------

def iso_weeks_in_year(year: int) -> int:
    """52 or 53. December 28th always falls in the year's last ISO week."""
    return date(year, 12, 28).isocalendar()[1]


def week_start(week_id: str) -> date:
    return parse_week(week_id)


def week_end(week_id: str) -> date:
    """Sunday of the week (last inclusive day)."""
    return parse_week(week_id) + timedelta(days=6)


def week_thursday(week_id: str) -> date:
    return parse_week(week_id) + timedelta(days=THURSDAY_OFFSET)


def month_start(month_id: str) -> date:
    return parse_month(month_id)


def month_end(month_id: str) -> date:
    """Last day of the month (last inclusive day)."""
    year, month = split_month(month_id)
    return date(year, month, monthrange(year, month)[1])


def week_to_date_range(week_id: str) -> PeriodRange:
    return PeriodRange(week_start(week_id), week_end(week_id))


def month_to_date_range(month_id: str) -> PeriodRange:
    return PeriodRange(month_start(month_id), month_end(month_id))


# ---------------------------------------------------------------------------
# Clock-relative identifiers
# ---------------------------------------------------------------------------

def current_week(today: date | None = None) -> str:
    return week_of(today or date.today())


def current_month(today: date | None = None) -> str:
    return month_of(today or date.today())


def is_current_week(week_id: str, today: date | None = None) -> bool:
    return week_id == current_week(today)


def is_current_month(month_id: str, today: date | None = None) -> bool:
    return month_id == current_month(today)


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------

def shift_week(week_id: str, delta: int) -> str:
    """
    Move delta ISO weeks forward (negative = backward).
    Anchored on the Monday so year boundaries and W53 renormalise.
    """
    return week_of(parse_week(week_id) + timedelta(weeks=delta))


def previous_week(week_id: str) -> str:
    return shift_week(week_id, -1)


def next_week(week_id: str) -> str:
    return shift_week(week_id, 1)


def shift_month(month_id: str, delta: int) -> str:
    year, month = split_month(month_id)
    index = year * 12 + (month - 1) + delta
    return format_month(index // 12, index % 12 + 1)


def previous_month(month_id: str) -> str:
    return shift_month(month_id, -1)


def next_month(month_id: str) -> str:
    return shift_month(month_id, 1)


# ---------------------------------------------------------------------------
# Week ↔ month membership (Thursday rule)
# ---------------------------------------------------------------------------

def month_from_week(week_id: str) -> str:
    """
    Month the week belongs to: the month containing the week's Thursday.

    Examples:
        '2026-W05' (Mon 26 Jan – Sun 1 Feb, Thu 29 Jan) -> '2026-01'
        '2026-W01' (Mon 29 Dec 2025, Thu 1 Jan 2026)     -> '2026-01'
    """
    return month_of(week_thursday(week_id))


def weeks_in_month(month_id: str) -> list[str]:
    """
    All ISO weeks whose Thursday falls in the month, ascending.

    Each Thursday of the month identifies exactly one such week, so the
    walk visits the month's Thursdays.
    """
    first = month_start(month_id)
    last = month_end(month_id)

    # date.weekday(): Monday = 0, Thursday = 3
    thursday = first + timedelta(days=(THURSDAY_OFFSET - first.weekday()) % 7)

    weeks: list[str] = []
    while thursday <= last:
        weeks.append(week_of(thursday))
        thursday += timedelta(days=7)
    return weeks


def generate_weeks(count: int, start_week: str) -> list[str]:
    """
    Return `count` consecutive weeks ending at start_week, newest first.
    Used for week pickers; W53 is never skipped.
    """
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    split_week(start_week)
    return [shift_week(start_week, -offset) for offset in range(count)]
