"""
report_schedule.py — Period 03: Availability
----------------------------------------------
Business-process estimates around the backend's weekly report batch.

  - last_completed_week():  default "which week has a finished report"
                            provider, matching the backend's conservative
                            rule. The state controller receives it as an
                            injected callable.
  - expected_report_date(): when a week's report should appear.

Both are ESTIMATES of the backend schedule (reports are published on the
first Tuesday after the week closes, usable from 12:00), not guarantees.
If the backend SLA moves, change the config values, not the callers.
"""

import sys
from datetime import date, datetime, timedelta
from pathlib import Path

# ---------------------------------------------------------------------------
# Ensure the calendar engine is importable from its hyphenated folder
# ---------------------------------------------------------------------------
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_CALENDAR_DIR = _PROJECT_ROOT / "period-01-calendar"

for _p in [str(_CALENDAR_DIR)]:
    if _p not in sys.path:
        sys.path.insert(0, _p)

from iso_calendar import shift_week, week_end, week_of  # noqa: E402


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TUESDAY = 1
DEFAULT_PUBLISH_WEEKDAY = TUESDAY   # date.weekday(): Monday = 0
DEFAULT_CUTOFF_HOUR = 12


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def last_completed_week(
    now: datetime | None = None,
    cutoff_hour: int = DEFAULT_CUTOFF_HOUR,
    publish_weekday: int = DEFAULT_PUBLISH_WEEKDAY,
) -> str:
    """
    Most recent ISO week whose weekly report is expected to exist.

    With the defaults:
      - Monday, or Tuesday before 12:00  -> two weeks back
      - Tuesday from 12:00 through Sunday -> last week

    Args:
        now:             Wall-clock time; defaults to datetime.now().
        cutoff_hour:     Hour on the publish day from which the report is used.
        publish_weekday: Weekday (Monday = 0) the report is published.

    Returns:
        str: WeekId, e.g. '2026-W04'.
    """
    now = now or datetime.now()
    this_week = week_of(now.date())

    weekday = now.weekday()
    before_publication = weekday < publish_weekday or (
        weekday == publish_weekday and now.hour < cutoff_hour
    )
    return shift_week(this_week, -2 if before_publication else -1)


def expected_report_date(
    week_id: str,
    publish_weekday: int = DEFAULT_PUBLISH_WEEKDAY,
) -> date:
    """
    First publish weekday strictly after the week's Sunday.

    Raises:
        PeriodError: If week_id is not a valid ISO week.
    """
    candidate = week_end(week_id) + timedelta(days=1)
    while candidate.weekday() != publish_weekday:
        candidate += timedelta(days=1)
    return candidate
