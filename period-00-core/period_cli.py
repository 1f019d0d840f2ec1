"""
period_cli.py — Period 00: Core
---------------------------------
Command-line access to the period engines, printing JSON to stdout.

Usage:
  # Week facts (date range, Thursday-rule month, previous week, label):
  python period-00-core/period_cli.py week 2026-W05

  # Month facts (date range, ISO weeks, label):
  python period-00-core/period_cli.py month 2026-01

  # Comparison presets relative to today (or --now):
  python period-00-core/period_cli.py preset mom
  python period-00-core/period_cli.py preset yoy --iso

  # Metric availability:
  python period-00-core/period_cli.py availability salesGross --period 2026-W05 --type week

  # Run the period controller against the persisted preference file:
  python period-00-core/period_cli.py state --url "type=month&month=2025-11"
  python period-00-core/period_cli.py state --type month

Exit codes:
  0  — Success
  1  — Failure (e.g. the preference file could not be written)
  2  — Configuration or argument error
"""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from urllib.parse import parse_qsl

# ---------------------------------------------------------------------------
# Ensure the project root and the component folders are on the Python path
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
CORE_DIR = Path(__file__).resolve().parent

for _p in [
    str(PROJECT_ROOT),
    str(CORE_DIR),
    str(PROJECT_ROOT / "period-01-calendar"),
    str(PROJECT_ROOT / "period-02-presets"),
    str(PROJECT_ROOT / "period-03-availability"),
    str(PROJECT_ROOT / "period-04-state"),
]:
    if _p not in sys.path:
        sys.path.insert(0, _p)

from config_loader import load_config, resolve_path     # noqa: E402
from logger import get_logger                          # noqa: E402
from iso_calendar import (                             # noqa: E402
    month_from_week,
    month_to_date_range,
    previous_month,
    previous_week,
    split_month,
    week_to_date_range,
    weeks_in_month,
)
from period_labels import format_month_label, format_week_label  # noqa: E402
from preset_engine import (                            # noqa: E402
    ComparisonPreset,
    calculate_legacy_preset,
    iso_preset,
    month_to_iso_week_range,
)
from availability import availability_message, get_metric_availability  # noqa: E402
from report_schedule import last_completed_week       # noqa: E402
from period_controller import PeriodController        # noqa: E402
from period_ports import (                             # noqa: E402
    InMemoryQueryParamStore,
    JsonFileKeyValueStore,
)


# ---------------------------------------------------------------------------
# CLI argument parsing
# ---------------------------------------------------------------------------

def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="period_cli",
        description="Dashboard periods — ISO week calendar and period state",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        default=None,
        help="Alternate period_config.yaml.",
    )
    parser.add_argument(
        "--now",
        metavar="YYYY-MM-DDTHH:MM",
        default=None,
        help="Pretend the current time is this ISO datetime.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log INFO messages to stdout as well.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_week = sub.add_parser("week", help="Describe an ISO week.")
    p_week.add_argument("week", metavar="YYYY-Www")

    p_month = sub.add_parser("month", help="Describe a calendar month.")
    p_month.add_argument("month", metavar="YYYY-MM")

    p_preset = sub.add_parser("preset", help="Comparison periods for a preset.")
    p_preset.add_argument("kind", choices=[p.value for p in ComparisonPreset])
    p_preset.add_argument("--iso", action="store_true", help="Use ISO week ranges.")

    p_avail = sub.add_parser("availability", help="Availability of a metric.")
    p_avail.add_argument("metric")
    p_avail.add_argument("--period", required=True)
    p_avail.add_argument("--type", dest="period_type", choices=["week", "month"], required=True)

    p_state = sub.add_parser("state", help="Run the period controller once.")
    p_state.add_argument("--url", default="", help="Query string, e.g. 'type=month&month=2025-11'.")
    p_state.add_argument("--type", dest="period_type", default=None)
    p_state.add_argument("--week", default=None)
    p_state.add_argument("--month", default=None)

    return parser.parse_args(argv)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """
    Run one CLI command.

    Returns:
        int: Exit code (0 = success, 1 = failure, 2 = config/arg error).
    """
    args = _parse_args(argv)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as exc:
        print(f"[CONFIG ERROR] {exc}", file=sys.stderr)
        return 2

    logger = get_logger(
        "periods",
        log_dir=resolve_path(config["log_dir"]),
        level="INFO" if args.verbose else "ERROR",
    )

    try:
        now = datetime.fromisoformat(args.now) if args.now else datetime.now()
    except ValueError as exc:
        print(f"[ARGUMENT ERROR] --now: {exc}", file=sys.stderr)
        return 2

    handlers = {
        "week": _cmd_week,
        "month": _cmd_month,
        "preset": _cmd_preset,
        "availability": _cmd_availability,
        "state": _cmd_state,
    }

    try:
        result = handlers[args.command](args, config, now)
    except ValueError as exc:
        # PeriodError is a ValueError
        print(f"[ARGUMENT ERROR] {exc}", file=sys.stderr)
        return 2
    except OSError as exc:
        logger.error(f"Command '{args.command}' failed: {exc}")
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False))
    logger.debug(f"Command '{args.command}' completed")
    return 0


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def _cmd_week(args, config: dict, now: datetime) -> dict:
    week_id = args.week
    return {
        "week": week_id,
        "dateRange": week_to_date_range(week_id).as_params(),
        "month": month_from_week(week_id),
        "previousWeek": previous_week(week_id),
        "label": format_week_label(week_id, now.date()),
    }


def _cmd_month(args, config: dict, now: datetime) -> dict:
    month_id = args.month
    year, month = split_month(month_id)
    return {
        "month": month_id,
        "dateRange": month_to_date_range(month_id).as_params(),
        "weeks": weeks_in_month(month_id),
        "isoWeekRange": month_to_iso_week_range(year, month),
        "previousMonth": previous_month(month_id),
        "label": format_month_label(month_id, now.date()),
    }


def _cmd_preset(args, config: dict, now: datetime) -> dict:
    today = now.date()
    if args.iso:
        periods = iso_preset(args.kind, today)
        return {
            "preset": args.kind,
            **periods.as_params(),
            "weekMismatch": periods.week_mismatch,
        }

    periods = calculate_legacy_preset(args.kind, today)
    return {
        "preset": args.kind,
        "period1": periods.period1.as_params(),
        "period2": periods.period2.as_params(),
    }


def _cmd_availability(args, config: dict, now: datetime) -> dict:
    today = now.date()
    schedule = config["report_schedule"]
    status = get_metric_availability(args.metric, args.period, args.period_type, today)
    return {
        "metric": args.metric,
        "period": args.period,
        "periodType": args.period_type,
        "status": status.value,
        "message": availability_message(
            args.metric,
            args.period,
            args.period_type,
            today,
            publish_weekday=schedule["publish_weekday"],
        ),
    }


def _cmd_state(args, config: dict, now: datetime) -> dict:
    schedule = config["report_schedule"]
    params = InMemoryQueryParamStore(dict(parse_qsl(args.url)))

    controller = PeriodController(
        last_completed_week=lambda: last_completed_week(
            now,
            cutoff_hour=schedule["cutoff_hour"],
            publish_weekday=schedule["publish_weekday"],
        ),
        query_params=params,
        storage=JsonFileKeyValueStore(resolve_path(config["storage"]["path"])),
        invalidator=_NoCache(),
        clock=_FixedClock(now),
        storage_key=config["storage"]["key"],
        url_params=config["url_params"],
        invalidate_tags=tuple(config["refresh"]["invalidate_tags"]),
    )
    controller.initialize()

    if args.period_type is not None:
        controller.set_period_type(args.period_type)
    if args.week is not None:
        controller.set_week(args.week)
    if args.month is not None:
        controller.set_month(args.month)

    return {"state": controller.to_dict(), "url": params.to_dict()}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class _FixedClock:
    def __init__(self, now: datetime) -> None:
        self._now = now

    def now(self) -> datetime:
        return self._now


class _NoCache:
    """The CLI holds no cached data; refresh has nothing to clear."""

    def invalidate(self, tag: str) -> None:
        return None


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
