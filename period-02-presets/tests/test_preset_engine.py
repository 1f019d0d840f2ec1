"""
test_preset_engine.py — Unit tests for Period 02: Preset Engine
-----------------------------------------------------------------
Reference date is 2026-01-31 (Saturday of 2026-W05) unless a test needs
a year boundary or a 53-week year.

Test coverage:
  1. weeks_in_quarter incl. 52 vs 53-week Q4 and invalid quarters
  2. Week-range encoding (format / split / validate)
  3. month / quarter / date-range → ISO week range
  4. Legacy date-range presets
  5. ISO presets incl. the YoY week-mismatch contract
"""

import sys
import unittest
from datetime import date
from pathlib import Path

_TESTS_DIR     = Path(__file__).resolve().parent
_COMPONENT_DIR = _TESTS_DIR.parent
_PROJECT_ROOT  = _COMPONENT_DIR.parent
for _p in [str(_PROJECT_ROOT), str(_COMPONENT_DIR)]:
    if _p not in sys.path:
        sys.path.insert(0, _p)

from preset_engine import (  # noqa: E402
    ComparisonPreset,
    IsoPresetPeriods,
    PeriodRange,
    calculate_legacy_preset,
    date_range_to_iso_week_range,
    format_week_range,
    is_valid_week_range,
    iso_preset,
    month_to_iso_week_range,
    parse_quarter,
    quarter_bounds,
    quarter_to_iso_week_range,
    split_week_range,
    weeks_in_quarter,
    year_over_year,
)
from period_errors import InvalidFormat, InvalidMonthNumber, InvalidQuarter  # noqa: E402

TODAY = date(2026, 1, 31)


# ── Quarters ─────────────────────────────────────────────────────────────────

class TestWeeksInQuarter(unittest.TestCase):

    def test_q1_2026(self):
        weeks = weeks_in_quarter(2026, 1)
        self.assertEqual(weeks[0], "2026-W01")
        self.assertEqual(weeks[-1], "2026-W13")
        self.assertEqual(len(weeks), 13)

    def test_q4_in_53_week_year(self):
        weeks = weeks_in_quarter(2026, 4)
        self.assertEqual((weeks[0], weeks[-1]), ("2026-W40", "2026-W53"))
        self.assertEqual(len(weeks), 14)

    def test_q4_in_52_week_year(self):
        self.assertEqual(weeks_in_quarter(2025, 4)[-1], "2025-W52")

    def test_ascending_without_duplicates(self):
        for quarter in (1, 2, 3, 4):
            with self.subTest(quarter=quarter):
                weeks = weeks_in_quarter(2026, quarter)
                self.assertEqual(weeks, sorted(set(weeks)))

    def test_invalid_quarter(self):
        for bad in (0, 5, -1):
            with self.subTest(quarter=bad):
                with self.assertRaises(InvalidQuarter):
                    weeks_in_quarter(2026, bad)

    def test_parse_quarter_label(self):
        self.assertEqual(parse_quarter("Q1 2026"), (2026, 1))
        self.assertEqual(parse_quarter("q4 2025"), (2025, 4))
        with self.assertRaises(InvalidQuarter):
            parse_quarter("Q5 2026")

    def test_quarter_bounds(self):
        self.assertEqual(
            quarter_bounds(2026, 1),
            PeriodRange(date(2026, 1, 1), date(2026, 3, 31)),
        )
        with self.assertRaises(InvalidQuarter):
            quarter_bounds(2026, 0)


# ── Week-range encoding ──────────────────────────────────────────────────────

class TestWeekRangeEncoding(unittest.TestCase):

    def test_format_range_and_single(self):
        self.assertEqual(format_week_range(["2026-W01", "2026-W02"]), "2026-W01—2026-W02")
        self.assertEqual(format_week_range(["2026-W05"]), "2026-W05")

    def test_format_empty_list_raises(self):
        with self.assertRaises(ValueError):
            format_week_range([])

    def test_split_range(self):
        self.assertEqual(split_week_range("2026-W01—2026-W05"), ("2026-W01", "2026-W05"))
        self.assertEqual(split_week_range("2025-W52"), ("2025-W52", "2025-W52"))

    def test_validation(self):
        self.assertTrue(is_valid_week_range("2025-W40—2025-W52"))
        self.assertTrue(is_valid_week_range("2026-W53"))
        for bad in ["2026-W01-W05", "2026-01:05", "2026-W5", "2026-W05—2026-W01", "", None]:
            with self.subTest(value=bad):
                self.assertFalse(is_valid_week_range(bad))
        with self.assertRaises(InvalidFormat):
            split_week_range("2026-W01:W05")


class TestIsoWeekRanges(unittest.TestCase):

    def test_month_ranges(self):
        self.assertEqual(month_to_iso_week_range(2026, 1), "2026-W01—2026-W05")
        self.assertEqual(month_to_iso_week_range(2026, 2), "2026-W06—2026-W09")
        self.assertEqual(month_to_iso_week_range(2025, 12), "2025-W49—2025-W52")
        self.assertEqual(month_to_iso_week_range(2020, 12), "2020-W49—2020-W53")

    def test_month_out_of_range(self):
        with self.assertRaises(InvalidMonthNumber):
            month_to_iso_week_range(2026, 13)

    def test_quarter_ranges(self):
        self.assertEqual(quarter_to_iso_week_range(2026, 1), "2026-W01—2026-W13")
        self.assertEqual(quarter_to_iso_week_range(2026, 2), "2026-W14—2026-W26")
        self.assertEqual(quarter_to_iso_week_range(2026, 3), "2026-W27—2026-W39")
        self.assertEqual(quarter_to_iso_week_range(2026, 4), "2026-W40—2026-W53")

    def test_quarter_label_input(self):
        self.assertEqual(quarter_to_iso_week_range("Q1 2026"), "2026-W01—2026-W13")

    def test_quarter_missing_number(self):
        with self.assertRaises(InvalidQuarter):
            quarter_to_iso_week_range(2026)

    def test_date_range_to_week_range(self):
        self.assertEqual(
            date_range_to_iso_week_range(PeriodRange(date(2026, 1, 1), date(2026, 1, 31))),
            "2026-W01—2026-W05",
        )

    def test_date_range_within_one_week(self):
        self.assertEqual(
            date_range_to_iso_week_range(PeriodRange(date(2026, 1, 27), date(2026, 1, 29))),
            "2026-W05",
        )

    def test_date_range_backwards_raises(self):
        with self.assertRaises(ValueError):
            date_range_to_iso_week_range(PeriodRange(date(2026, 2, 1), date(2026, 1, 1)))


# ── Legacy presets ───────────────────────────────────────────────────────────

class TestLegacyPresets(unittest.TestCase):

    def test_mom(self):
        result = calculate_legacy_preset("mom", today=TODAY)
        self.assertEqual(result.period1, PeriodRange(date(2025, 12, 1), date(2025, 12, 31)))
        self.assertEqual(result.period2, PeriodRange(date(2026, 1, 1), TODAY))

    def test_qoq_from_q1(self):
        result = calculate_legacy_preset(ComparisonPreset.QOQ, today=TODAY)
        self.assertEqual(result.period1, PeriodRange(date(2025, 10, 1), date(2025, 12, 31)))
        self.assertEqual(result.period2, PeriodRange(date(2026, 1, 1), TODAY))

    def test_qoq_mid_year(self):
        result = calculate_legacy_preset("qoq", today=date(2026, 5, 15))
        self.assertEqual(result.period1, PeriodRange(date(2026, 1, 1), date(2026, 3, 31)))
        self.assertEqual(result.period2, PeriodRange(date(2026, 4, 1), date(2026, 5, 15)))

    def test_yoy(self):
        result = calculate_legacy_preset("YOY", today=TODAY)
        self.assertEqual(result.period1, PeriodRange(date(2025, 1, 1), date(2025, 1, 31)))
        self.assertEqual(result.period2, PeriodRange(date(2026, 1, 1), TODAY))

    def test_yoy_on_leap_day(self):
        result = calculate_legacy_preset("yoy", today=date(2024, 2, 29))
        self.assertEqual(result.period1, PeriodRange(date(2023, 2, 1), date(2023, 2, 28)))

    def test_custom_default_window(self):
        result = calculate_legacy_preset("custom", today=TODAY)
        self.assertEqual(result.period2, PeriodRange(date(2026, 1, 2), TODAY))
        self.assertEqual(result.period1, PeriodRange(date(2025, 12, 3), date(2026, 1, 1)))
        self.assertEqual(result.period1.days, 30)
        self.assertEqual(result.period2.days, 30)

    def test_unknown_preset(self):
        with self.assertRaises(ValueError):
            calculate_legacy_preset("wow", today=TODAY)


# ── ISO presets ──────────────────────────────────────────────────────────────

class TestIsoPresets(unittest.TestCase):

    def test_mom(self):
        result = iso_preset("mom", today=TODAY)
        self.assertEqual(result, IsoPresetPeriods("2025-W49—2025-W52", "2026-W01—2026-W05"))
        self.assertFalse(result.week_mismatch)

    def test_mom_within_year(self):
        result = iso_preset("mom", today=date(2026, 2, 10))
        self.assertEqual(result.period1, "2026-W01—2026-W05")
        self.assertEqual(result.period2, "2026-W06—2026-W09")

    def test_qoq(self):
        result = iso_preset("qoq", today=TODAY)
        self.assertEqual(result.period1, "2025-W40—2025-W52")
        self.assertEqual(result.period2, "2026-W01—2026-W13")

    def test_yoy_same_week_number(self):
        result = iso_preset("yoy", today=TODAY)
        self.assertEqual(result.as_params(), {"period1": "2025-W05", "period2": "2026-W05"})
        self.assertFalse(result.week_mismatch)

    def test_yoy_w53_against_52_week_year_flags_mismatch(self):
        with self.assertLogs("periods.presets", level="WARNING"):
            result = iso_preset("yoy", today=date(2026, 12, 31))
        self.assertEqual(result.period2, "2026-W53")
        self.assertEqual(result.period1, "2025-W52")
        self.assertTrue(result.week_mismatch)

    def test_yoy_w52_after_53_week_year_is_normal(self):
        result = year_over_year("2021-W52")
        self.assertEqual(result.period1, "2020-W52")
        self.assertFalse(result.week_mismatch)

    def test_yoy_w01(self):
        result = year_over_year("2026-W01")
        self.assertEqual(result.period1, "2025-W01")

    def test_yoy_2020_w53(self):
        result = year_over_year("2020-W53")
        self.assertEqual(result.period1, "2019-W52")
        self.assertTrue(result.week_mismatch)

    def test_custom_returns_empty_periods(self):
        result = iso_preset("custom", today=TODAY)
        self.assertEqual((result.period1, result.period2), ("", ""))

    def test_iso_periods_are_valid_ranges(self):
        for preset in ("mom", "qoq", "yoy"):
            with self.subTest(preset=preset):
                result = iso_preset(preset, today=TODAY)
                self.assertTrue(is_valid_week_range(result.period1))
                self.assertTrue(is_valid_week_range(result.period2))


if __name__ == "__main__":
    unittest.main()
