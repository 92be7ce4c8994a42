"""Calendar helpers: leap years, month lengths, and clamped date creation.

Months are 1-based (January = 1) throughout, like ``datetime.date``.
"""

from __future__ import annotations

import calendar
from datetime import date


def is_leap_year(year: int) -> bool:
    """True iff ``year`` is divisible by 4 and not by 100, unless by 400."""
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def days_in_year(year: int) -> int:
    return 366 if is_leap_year(year) else 365


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def safe_date(year: int, month: int, day: int) -> date:
    """Build a date, clamping out-of-range parts instead of raising.

    ``safe_date(2025, 2, 29)`` is Feb 28 2025; ``safe_date(2024, 4, 31)``
    is Apr 30 2024.
    """
    month = min(max(month, 1), 12)
    day = min(max(day, 1), days_in_month(year, month))
    return date(year, month, day)


def whole_days_between(start: date, end: date) -> int:
    """Signed number of whole days from ``start`` to ``end``."""
    return (end - start).days


def year_bounds(year: int) -> tuple[date, date]:
    """Half-open ``[Jan 1 of year, Jan 1 of year + 1)`` range."""
    return date(year, 1, 1), date(year + 1, 1, 1)
