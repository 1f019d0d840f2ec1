"""
preset_engine.py — Period 02: Preset Engine
---------------------------------------------
Builds "period1 vs period2" comparison windows for the MoM / QoQ / YoY /
Custom presets, in two encodings:

  - Legacy:  two PeriodRange objects (plain calendar dates, no ISO weeks)
  - ISO:     two week-range strings for the week-granular comparison
             endpoint, e.g. '2025-W49—2025-W52' or a single '2026-W05'

period1 is always the comparison base (the earlier period); period2 is
the period being looked at.

YoY correctness:
  ISO years have 52 or 53 weeks, so W53 may not exist one year back. In
  that case the prior year's last week is used and week_mismatch=True is
  returned; callers decide how to warn the user.
"""

import logging
import re
import sys
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from pathlib import Path

# ---------------------------------------------------------------------------
# Ensure the calendar engine is importable from its hyphenated folder
# ---------------------------------------------------------------------------
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_CALENDAR_DIR = _PROJECT_ROOT / "period-01-calendar"

for _p in [str(_CALENDAR_DIR)]:
    if _p not in sys.path:
        sys.path.insert(0, _p)

from iso_calendar import (  # noqa: E402
    PeriodRange,
    format_month,
    format_week,
    is_valid_week,
    iso_weeks_in_year,
    month_end,
    split_week,
    week_of,
    weeks_in_month,
)
from period_errors import InvalidFormat, InvalidQuarter  # noqa: E402

logger = logging.getLogger("periods.presets")


# ---------------------------------------------------------------------------
# Data contract
# ---------------------------------------------------------------------------

class ComparisonPreset(str, Enum):
    MOM = "mom"
    QOQ = "qoq"
    YOY = "yoy"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: "ComparisonPreset | str") -> "ComparisonPreset":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown comparison preset {value!r}. "
                f"Expected one of: {', '.join(p.value for p in cls)}"
            ) from None


@dataclass(frozen=True)
class PresetPeriods:
    period1: PeriodRange
    period2: PeriodRange


@dataclass(frozen=True)
class IsoPresetPeriods:
    period1: str
    period2: str
    week_mismatch: bool = False

    def as_params(self) -> dict[str, str]:
        return {"period1": self.period1, "period2": self.period2}


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

RANGE_SEPARATOR = "—"
CUSTOM_WINDOW_DAYS = 30

_QUARTER_LABEL = re.compile(r"^Q([1-4])\s+(\d{4})$", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Quarters
# ---------------------------------------------------------------------------

def quarter_of(d: date) -> int:
    return (d.month - 1) // 3 + 1


def _check_quarter(quarter: int) -> None:
    if quarter not in (1, 2, 3, 4):
        raise InvalidQuarter(f"Invalid quarter: {quarter!r} (expected 1–4)")


def parse_quarter(label: str) -> tuple[int, int]:
    """'Q1 2026' -> (2026, 1)."""
    match = _QUARTER_LABEL.match(label.strip()) if isinstance(label, str) else None
    if not match:
        raise InvalidQuarter(f"Invalid quarter: {label!r} (expected 'Q1 2026')")
    return int(match.group(2)), int(match.group(1))


def quarter_bounds(year: int, quarter: int) -> PeriodRange:
    _check_quarter(quarter)
    first_month = (quarter - 1) * 3 + 1
    last_month = first_month + 2
    return PeriodRange(date(year, first_month, 1), month_end(format_month(year, last_month)))


def weeks_in_quarter(year: int, quarter: int) -> list[str]:
    """Union of weeks_in_month() for the quarter's three months, ascending."""
    _check_quarter(quarter)
    first_month = (quarter - 1) * 3 + 1

    weeks: list[str] = []
    for month in range(first_month, first_month + 3):
        for week_id in weeks_in_month(format_month(year, month)):
            if week_id not in weeks:
                weeks.append(week_id)
    return weeks


# ---------------------------------------------------------------------------
# Week-range encoding
# ---------------------------------------------------------------------------

def format_week_range(weeks: list[str]) -> str:
    """
    Compact range string: 'first—last', or the single week if there is one.

    Raises:
        ValueError: If the list is empty.
    """
    if not weeks:
        raise ValueError("Cannot format an empty week list")
    first, last = weeks[0], weeks[-1]
    return first if first == last else f"{first}{RANGE_SEPARATOR}{last}"


def split_week_range(value: str) -> tuple[str, str]:
    """
    Inverse of format_week_range(): '2026-W01—2026-W05' -> ('2026-W01', '2026-W05').

    Raises:
        InvalidFormat: On malformed input or a range that runs backwards.
    """
    parts = value.split(RANGE_SEPARATOR) if isinstance(value, str) else []
    if len(parts) == 1:
        parts = parts * 2
    if len(parts) != 2 or not all(is_valid_week(p) for p in parts):
        raise InvalidFormat(f"Invalid week range format: {value!r}")
    first, last = parts
    if split_week(first) > split_week(last):
        raise InvalidFormat(f"Invalid week range format: {value!r} (start after end)")
    return first, last


def is_valid_week_range(value: str) -> bool:
    try:
        split_week_range(value)
    except InvalidFormat:
        return False
    return True


def month_to_iso_week_range(year: int, month: int) -> str:
    return format_week_range(weeks_in_month(format_month(year, month)))


def quarter_to_iso_week_range(year_or_label: "int | str", quarter: int | None = None) -> str:
    """
    Accepts either (year, quarter) or a single 'Q1 2026' label.
    """
    if isinstance(year_or_label, str):
        year, quarter = parse_quarter(year_or_label)
    else:
        year = year_or_label
        if quarter is None:
            raise InvalidQuarter("Invalid quarter: None (expected 1–4)")
    return format_week_range(weeks_in_quarter(year, quarter))


def date_range_to_iso_week_range(period: PeriodRange) -> str:
    """Enclosing week range for an arbitrary date range."""
    if period.date_from > period.date_to:
        raise ValueError(
            f"Date range runs backwards: {period.date_from} > {period.date_to}"
        )
    return format_week_range([week_of(period.date_from), week_of(period.date_to)])


# ---------------------------------------------------------------------------
# Legacy (date-range) presets
# ---------------------------------------------------------------------------

def calculate_legacy_preset(
    preset: "ComparisonPreset | str",
    today: date | None = None,
) -> PresetPeriods:
    """
    Two calendar windows relative to today, without ISO weeks.

      mom:    previous full month       vs current month-to-date
      qoq:    previous full quarter     vs current quarter-to-date
      yoy:    same month-to-date last year vs current month-to-date
      custom: 30 days ending 30 days ago vs the last 30 days
    """
    preset = ComparisonPreset.parse(preset)
    today = today or date.today()
    month_first = today.replace(day=1)

    if preset is ComparisonPreset.MOM:
        prev_last = month_first - timedelta(days=1)
        return PresetPeriods(
            period1=PeriodRange(prev_last.replace(day=1), prev_last),
            period2=PeriodRange(month_first, today),
        )

    if preset is ComparisonPreset.QOQ:
        current = quarter_bounds(today.year, quarter_of(today))
        prev_last = current.date_from - timedelta(days=1)
        previous = quarter_bounds(prev_last.year, quarter_of(prev_last))
        return PresetPeriods(
            period1=previous,
            period2=PeriodRange(current.date_from, today),
        )

    if preset is ComparisonPreset.YOY:
        return PresetPeriods(
            period1=PeriodRange(
                month_first.replace(year=today.year - 1),
                _same_day_last_year(today),
            ),
            period2=PeriodRange(month_first, today),
        )

    window = timedelta(days=CUSTOM_WINDOW_DAYS - 1)
    period2 = PeriodRange(today - window, today)
    period1_end = period2.date_from - timedelta(days=1)
    return PresetPeriods(
        period1=PeriodRange(period1_end - window, period1_end),
        period2=period2,
    )


def _same_day_last_year(d: date) -> date:
    """Feb 29 clamps to Feb 28."""
    try:
        return d.replace(year=d.year - 1)
    except ValueError:
        return d.replace(year=d.year - 1, day=28)


# ---------------------------------------------------------------------------
# ISO-week presets
# ---------------------------------------------------------------------------

def iso_preset(
    preset: "ComparisonPreset | str",
    today: date | None = None,
) -> IsoPresetPeriods:
    """
    Comparison periods as ISO week-range strings.

      mom:    previous month's weeks   vs current month's weeks
      qoq:    previous quarter's weeks vs current quarter's weeks
      yoy:    same ISO week number one ISO year back vs current week
      custom: empty strings (the user supplies both periods)
    """
    preset = ComparisonPreset.parse(preset)
    today = today or date.today()

    if preset is ComparisonPreset.MOM:
        prev_last = today.replace(day=1) - timedelta(days=1)
        return IsoPresetPeriods(
            period1=month_to_iso_week_range(prev_last.year, prev_last.month),
            period2=month_to_iso_week_range(today.year, today.month),
        )

    if preset is ComparisonPreset.QOQ:
        quarter = quarter_of(today)
        prev_year, prev_quarter = (today.year - 1, 4) if quarter == 1 else (today.year, quarter - 1)
        return IsoPresetPeriods(
            period1=quarter_to_iso_week_range(prev_year, prev_quarter),
            period2=quarter_to_iso_week_range(today.year, quarter),
        )

    if preset is ComparisonPreset.YOY:
        return year_over_year(week_of(today))

    return IsoPresetPeriods(period1="", period2="")


def year_over_year(week_id: str) -> IsoPresetPeriods:
    """
    Same ISO week number one ISO year back.

    When week_id is W53 and the prior ISO year has only 52 weeks, the
    prior year's last week is used and week_mismatch is set.
    """
    year, week = split_week(week_id)
    prior_year = year - 1
    prior_weeks = iso_weeks_in_year(prior_year)

    if week > prior_weeks:
        fallback = format_week(prior_year, prior_weeks)
        logger.warning(
            f"YoY week mismatch: {week_id} has no counterpart in {prior_year} "
            f"({prior_weeks} ISO weeks); comparing against {fallback}"
        )
        return IsoPresetPeriods(period1=fallback, period2=week_id, week_mismatch=True)

    return IsoPresetPeriods(period1=format_week(prior_year, week), period2=week_id)
