"""
availability.py — Period 03: Availability Classifier
------------------------------------------------------
Tells the UI whether a metric can be trusted for a given period.

Rules:
  - Any period other than the current (still open) one is settled:
    every known or unknown metric is 'realtime'.
  - For the open period, the metric's tier decides:
      realtime      near-real-time operational counters
      delayed       marketplace feeds lagging 1–2 days
      pending_week  only computed once the weekly report closes
  - Unknown metric keys in the open period are 'unavailable'.
"""

import sys
from datetime import date
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

from iso_calendar import is_current_month, is_current_week, weeks_in_month  # noqa: E402
from period_labels import format_date_ru  # noqa: E402
from report_schedule import DEFAULT_PUBLISH_WEEKDAY, expected_report_date  # noqa: E402


# ---------------------------------------------------------------------------
# Data contract
# ---------------------------------------------------------------------------

class MetricAvailability(str, Enum):
    REALTIME = "realtime"
    DELAYED = "delayed"
    PENDING_WEEKLY_REPORT = "pending_week"
    UNAVAILABLE = "unavailable"


# ---------------------------------------------------------------------------
# Static category table
# ---------------------------------------------------------------------------

METRIC_CATEGORIES: dict[MetricAvailability, frozenset[str]] = {
    MetricAvailability.REALTIME: frozenset({
        "ordersCount",
        "ordersAmount",
        "productCount",
        "cogsTotal",
    }),
    MetricAvailability.DELAYED: frozenset({
        "advertisingSpend",
        "advertisingViews",
        "advertisingClicks",
        "stockBalance",
    }),
    MetricAvailability.PENDING_WEEKLY_REPORT: frozenset({
        "salesGross",
        "salesAmount",
        "revenueTotal",
        "payoutTotal",
        "commission",
        "margin",
        "marginPercent",
        "logisticsCost",
        "storageCost",
    }),
}

_MESSAGES = {
    MetricAvailability.DELAYED: "Данные маркетплейса поступают с задержкой 1–2 дня",
    MetricAvailability.UNAVAILABLE: "Показатель недоступен для текущего периода",
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def is_period_open(period: str, period_type: str, today: date | None = None) -> bool:
    """True for the current (incomplete) week or month."""
    if period_type == "week":
        return is_current_week(period, today)
    if period_type == "month":
        return is_current_month(period, today)
    raise ValueError(f"Unknown period type: {period_type!r} (expected 'week' or 'month')")


def get_metric_availability(
    metric_key: str,
    period: str,
    period_type: str,
    today: date | None = None,
) -> MetricAvailability:
    """Classify one metric for one period."""
    if not is_period_open(period, period_type, today):
        return MetricAvailability.REALTIME

    for tier, keys in METRIC_CATEGORIES.items():
        if metric_key in keys:
            return tier
    return MetricAvailability.UNAVAILABLE


def classify_metrics(
    metric_keys: list[str],
    period: str,
    period_type: str,
    today: date | None = None,
) -> dict[str, MetricAvailability]:
    return {
        key: get_metric_availability(key, period, period_type, today)
        for key in metric_keys
    }


def pending_report_date(
    period: str,
    period_type: str,
    publish_weekday: int = DEFAULT_PUBLISH_WEEKDAY,
) -> date:
    """
    Expected report date for a pending period. For a month this is the
    report of the month's last week (Thursday rule).
    """
    last_week = period if period_type == "week" else weeks_in_month(period)[-1]
    return expected_report_date(last_week, publish_weekday)


def availability_message(
    metric_key: str,
    period: str,
    period_type: str,
    today: date | None = None,
    publish_weekday: int = DEFAULT_PUBLISH_WEEKDAY,
) -> str | None:
    """
    User-facing note for a non-realtime metric, or None when the value
    can be shown as is. The report date is an estimate, not a promise.
    """
    status = get_metric_availability(metric_key, period, period_type, today)
    if status is MetricAvailability.REALTIME:
        return None
    if status is MetricAvailability.PENDING_WEEKLY_REPORT:
        expected = pending_report_date(period, period_type, publish_weekday)
        return (
            "Появится после формирования недельного отчёта "
            f"(ориентировочно {format_date_ru(expected)})"
        )
    return _MESSAGES[status]
