"""
period_labels.py — Period 01: Calendar Engine
-----------------------------------------------
Russian display strings for weeks, months, dates and refresh times.

  format_week_label('2026-W05')  -> 'Неделя 5, 2026 (26 янв — 1 фев)'
  format_month_label('2026-01')  -> 'Январь 2026'

The current (still open) week or month gets an incomplete marker so the
user can tell partial data apart from a closed period.
"""

from datetime import date, datetime

from iso_calendar import (
    is_current_month,
    is_current_week,
    split_month,
    split_week,
    week_end,
    week_start,
)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MONTH_NAMES = [
    "Январь", "Февраль", "Март", "Апрель", "Май", "Июнь",
    "Июль", "Август", "Сентябрь", "Октябрь", "Ноябрь", "Декабрь",
]

MONTH_ABBREVIATIONS = [
    "янв", "фев", "мар", "апр", "мая", "июн",
    "июл", "авг", "сен", "окт", "ноя", "дек",
]

INCOMPLETE_WEEK_MARKER = "(неполная)"
INCOMPLETE_MONTH_MARKER = "(неполный)"

RANGE_DASH = " — "


# ---------------------------------------------------------------------------
# Period labels
# ---------------------------------------------------------------------------

def format_week_label(week_id: str, today: date | None = None) -> str:
    """
    'Неделя N, YYYY (D mon — D mon)', plus the incomplete marker for the
    current week. The week number is printed without a leading zero.
    """
    year, week = split_week(week_id)
    label = f"Неделя {week}, {year} ({_short_date(week_start(week_id))}{RANGE_DASH}{_short_date(week_end(week_id))})"
    if is_current_week(week_id, today):
        label = f"{label} {INCOMPLETE_WEEK_MARKER}"
    return label


def format_month_label(month_id: str, today: date | None = None) -> str:
    year, month = split_month(month_id)
    label = f"{MONTH_NAMES[month - 1]} {year}"
    if is_current_month(month_id, today):
        label = f"{label} {INCOMPLETE_MONTH_MARKER}"
    return label


def format_period_display(period: str, period_type: str, today: date | None = None) -> str:
    """Dispatch on period_type ('week' | 'month')."""
    if period_type == "week":
        return format_week_label(period, today)
    if period_type == "month":
        return format_month_label(period, today)
    raise ValueError(f"Unknown period type: {period_type!r} (expected 'week' or 'month')")


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def format_date_ru(d: date) -> str:
    return d.strftime("%d.%m.%Y")


def format_date_range_ru(date_from: date, date_to: date) -> str:
    return f"{format_date_ru(date_from)}{RANGE_DASH}{format_date_ru(date_to)}"


def _short_date(d: date) -> str:
    return f"{d.day} {MONTH_ABBREVIATIONS[d.month - 1]}"


# ---------------------------------------------------------------------------
# Refresh age
# ---------------------------------------------------------------------------

def format_refresh_age(last_refresh: datetime, now: datetime) -> str:
    """Relative age of the last refresh, e.g. '5 минут назад'."""
    seconds = max(0, int((now - last_refresh).total_seconds()))
    if seconds < 60:
        return "меньше минуты назад"

    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes} {_plural(minutes, 'минуту', 'минуты', 'минут')} назад"

    hours = minutes // 60
    if hours < 24:
        return f"{hours} {_plural(hours, 'час', 'часа', 'часов')} назад"

    days = hours // 24
    return f"{days} {_plural(days, 'день', 'дня', 'дней')} назад"


def _plural(n: int, one: str, few: str, many: str) -> str:
    """Russian plural form for n: 1 минуту / 2 минуты / 5 минут."""
    if n % 10 == 1 and n % 100 != 11:
        return one
    if 2 <= n % 10 <= 4 and not 12 <= n % 100 <= 14:
        return few
    return many
