"""
period_controller.py — Period 04: Period State
------------------------------------------------
Owns the dashboard's period selection and keeps the URL and the
persisted preference as reflections of it.

State:
  period_type      'week' | 'month' (which identifier is authoritative)
  selected_week    WeekId
  selected_month   MonthId
  previous_week    derived: previous_week(selected_week)
  previous_month   derived: previous_month(selected_month)
  last_refresh     datetime of the last refresh()
  is_loading       controller-level: True until initialize() has run

Initialization priority (per field):
  URL query params  ->  persisted preference (period type only)
                    ->  default: week mode, last completed week, and
                        the month of the last completed week

Month rule:
  Switching to month mode ALWAYS derives the month from the last
  completed week, never from selected_week. selected_week may be the
  current, still-open week; its month can have no report yet and the
  analytics endpoints answer 404 for it.

Input policy:
  Malformed week / month / type values are ignored (logged, no state
  change, no exception). The calendar engine underneath stays strict.
"""

import dataclasses
import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

# ---------------------------------------------------------------------------
# Ensure the calendar engine is importable from its hyphenated folder
# ---------------------------------------------------------------------------
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_CALENDAR_DIR = _PROJECT_ROOT / "period-01-calendar"

for _p in [str(_CALENDAR_DIR)]:
    if _p not in sys.path:
        sys.path.insert(0, _p)

from iso_calendar import (  # noqa: E402
    is_valid_month,
    is_valid_week,
    month_from_week,
    month_to_date_range,
    previous_month,
    previous_week,
    split_week,
    week_to_date_range,
)
from period_ports import (  # noqa: E402
    CacheInvalidator,
    Clock,
    KeyValueStore,
    QueryParamStore,
    SystemClock,
)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_STORAGE_KEY = "dashboard-period-type"
DEFAULT_URL_PARAMS = {"week": "week", "month": "month", "type": "type"}
DEFAULT_INVALIDATE_TAGS = ("dashboard", "analytics")


# ---------------------------------------------------------------------------
# Data contract
# ---------------------------------------------------------------------------

class PeriodType(str, Enum):
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class PeriodState:
    period_type: PeriodType
    selected_week: str
    selected_month: str
    last_refresh: datetime

    @property
    def previous_week(self) -> str:
        return previous_week(self.selected_week)

    @property
    def previous_month(self) -> str:
        return previous_month(self.selected_month)

    @property
    def active_period(self) -> str:
        return self.selected_week if self.period_type is PeriodType.WEEK else self.selected_month

    def date_range(self) -> dict[str, str]:
        """{'startDate', 'endDate'} for the active mode, as ISO dates."""
        if self.period_type is PeriodType.WEEK:
            rng = week_to_date_range(self.selected_week)
        else:
            rng = month_to_date_range(self.selected_month)
        return {"startDate": rng.date_from.isoformat(), "endDate": rng.date_to.isoformat()}

    def to_dict(self) -> dict:
        return {
            "periodType": self.period_type.value,
            "selectedWeek": self.selected_week,
            "selectedMonth": self.selected_month,
            "previousWeek": self.previous_week,
            "previousMonth": self.previous_month,
            "lastRefresh": self.last_refresh.isoformat(),
            **self.date_range(),
        }


StateListener = Callable[[PeriodState], None]


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

class PeriodController:
    """
    Single source of truth for the selected period.

    Args:
        last_completed_week: Provider of the newest week with a finished
                             backend report (no arguments, returns WeekId).
        query_params:        URL query-parameter store.
        storage:             Persisted preference store.
        invalidator:         Cache invalidation collaborator for refresh().
        clock:               Wall clock for last_refresh.
        logger:              Logger; defaults to 'periods.controller'.
        initial_week:        Overrides the default week (tests, deep links).
    """

    def __init__(
        self,
        last_completed_week: Callable[[], str],
        query_params: QueryParamStore,
        storage: KeyValueStore,
        invalidator: CacheInvalidator,
        clock: Optional[Clock] = None,
        logger: Optional[logging.Logger] = None,
        initial_week: Optional[str] = None,
        storage_key: str = DEFAULT_STORAGE_KEY,
        url_params: Optional[dict[str, str]] = None,
        invalidate_tags: tuple[str, ...] = DEFAULT_INVALIDATE_TAGS,
    ) -> None:
        self._last_completed_week = last_completed_week
        self._query_params = query_params
        self._storage = storage
        self._invalidator = invalidator
        self._clock = clock or SystemClock()
        self.logger = logger or logging.getLogger("periods.controller")
        self._initial_week = initial_week
        self._storage_key = storage_key
        self._url_params = {**DEFAULT_URL_PARAMS, **(url_params or {})}
        self._invalidate_tags = tuple(invalidate_tags)

        self._state: Optional[PeriodState] = None
        self._listeners: list[StateListener] = []

    # -- read side ----------------------------------------------------------

    @property
    def is_loading(self) -> bool:
        return self._state is None

    @property
    def state(self) -> PeriodState:
        if self._state is None:
            raise RuntimeError("PeriodController.initialize() must be called first")
        return self._state

    def date_range(self) -> dict[str, str]:
        return self.state.date_range()

    def to_dict(self) -> dict:
        """Serialized state plus isLoading; before initialize() only isLoading."""
        if self._state is None:
            return {"isLoading": True}
        return {**self._state.to_dict(), "isLoading": False}

    def add_listener(self, listener: StateListener) -> None:
        """Call listener(new_state) after every transition that changed state."""
        self._listeners.append(listener)

    # -- lifecycle ----------------------------------------------------------

    def initialize(self) -> PeriodState:
        """
        Resolve the initial state (URL -> persisted -> default) and write
        it back to the URL. Runs once; later calls return the same state.
        """
        if self._state is not None:
            return self._state

        default_week = self._initial_week or self._last_completed_week()
        split_week(default_week)

        url_type = self._query_params.get(self._url_params["type"])
        url_week = self._query_params.get(self._url_params["week"])
        url_month = self._query_params.get(self._url_params["month"])

        period_type = _parse_period_type(url_type) or _parse_period_type(self._read_preference())
        selected_week = url_week if is_valid_week(url_week) else default_week
        selected_month = url_month if is_valid_month(url_month) else month_from_week(default_week)

        self._state = PeriodState(
            period_type=period_type or PeriodType.WEEK,
            selected_week=selected_week,
            selected_month=selected_month,
            last_refresh=self._clock.now(),
        )
        self._sync_url()
        self.logger.info(
            f"Period state initialized: type={self._state.period_type.value} "
            f"week={selected_week} month={selected_month}"
        )
        return self._state

    # -- actions ------------------------------------------------------------

    def set_period_type(self, period_type: "PeriodType | str") -> PeriodState:
        parsed = _parse_period_type(period_type)
        if parsed is None:
            self.logger.warning(f"Ignoring unknown period type: {period_type!r}")
            return self.state

        self._write_preference(parsed.value)
        if parsed is PeriodType.MONTH:
            month = month_from_week(self._last_completed_week())
            return self._transition(period_type=parsed, selected_month=month)
        return self._transition(period_type=parsed)

    def set_week(self, week_id: str) -> PeriodState:
        if not is_valid_week(week_id):
            self.logger.warning(f"Ignoring invalid week: {week_id!r}")
            return self.state
        return self._transition(selected_week=week_id, selected_month=month_from_week(week_id))

    def set_month(self, month_id: str) -> PeriodState:
        if not is_valid_month(month_id):
            self.logger.warning(f"Ignoring invalid month: {month_id!r}")
            return self.state
        return self._transition(selected_month=month_id)

    def refresh(self) -> PeriodState:
        """
        Stamp last_refresh and ask the data layer to refetch. The
        invalidator is not awaited; period identifiers do not change.
        """
        state = self._transition(last_refresh=self._clock.now())
        for tag in self._invalidate_tags:
            self._invalidator.invalidate(tag)
        self.logger.info(f"Refresh requested; invalidated tags: {', '.join(self._invalidate_tags)}")
        return state

    # -- internals ----------------------------------------------------------

    def _transition(self, **changes) -> PeriodState:
        previous = self.state
        self._state = dataclasses.replace(previous, **changes)
        self._sync_url()

        if self._state != previous:
            self.logger.debug(f"Period state changed: {changes}")
            for listener in self._listeners:
                listener(self._state)
        return self._state

    def _sync_url(self) -> None:
        """Keep exactly the params of the active mode, plus the type."""
        state = self.state
        names = self._url_params
        if state.period_type is PeriodType.WEEK:
            self._query_params.set(names["week"], state.selected_week)
            self._query_params.delete(names["month"])
        else:
            self._query_params.set(names["month"], state.selected_month)
            self._query_params.delete(names["week"])
        self._query_params.set(names["type"], state.period_type.value)

    def _read_preference(self) -> Optional[str]:
        try:
            return self._storage.get(self._storage_key)
        except OSError as exc:
            self.logger.warning(f"Could not read period preference: {exc}")
            return None

    def _write_preference(self, value: str) -> None:
        try:
            self._storage.set(self._storage_key, value)
        except OSError as exc:
            self.logger.warning(f"Could not persist period preference: {exc}")


def _parse_period_type(value) -> Optional[PeriodType]:
    """PeriodType for 'week' / 'month', None for anything else."""
    if isinstance(value, PeriodType):
        return value
    if isinstance(value, str):
        try:
            return PeriodType(value)
        except ValueError:
            return None
    return None
