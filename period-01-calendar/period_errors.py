"""
period_errors.py — Period 01: Calendar Engine
-----------------------------------------------
Error taxonomy for week / month / quarter identifiers.

All errors derive from ValueError so callers that only care about
"bad input" can keep catching ValueError.
"""


class PeriodError(ValueError):
    """Base class for every calendar / preset parsing failure."""


class InvalidFormat(PeriodError):
    """String does not match the YYYY-Www or YYYY-MM pattern."""


class InvalidWeekNumber(PeriodError):
    """Well-formed week id whose number does not exist in that ISO year."""


class InvalidMonthNumber(PeriodError):
    """Well-formed month id whose month is outside 01–12."""


class InvalidQuarter(PeriodError):
    """Quarter outside 1–4, or an unparseable quarter label."""
