"""Calendar helper tests — leap years, month lengths, clamped dates."""

from __future__ import annotations

from datetime import date

import pytest

from leave_engine.common.dates import (
    days_in_month,
    days_in_year,
    is_leap_year,
    safe_date,
    whole_days_between,
    year_bounds,
)


class TestLeapYears:

    @pytest.mark.parametrize("year", [2020, 2024, 2028, 2000, 2400])
    def test_leap(self, year):
        assert is_leap_year(year) is True

    @pytest.mark.parametrize("year", [2023, 2025, 2026, 1900, 2100])
    def test_not_leap(self, year):
        assert is_leap_year(year) is False

    def test_rule_holds_for_every_year(self):
        for year in range(1600, 2401):
            expected = year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)
            assert is_leap_year(year) == expected

    def test_days_in_year(self):
        assert days_in_year(2000) == 366
        assert days_in_year(1900) == 365
        assert days_in_year(2024) == 366
        assert days_in_year(2025) == 365


class TestDaysInMonth:

    def test_february(self):
        assert days_in_month(2024, 2) == 29
        assert days_in_month(2025, 2) == 28

    def test_other_months(self):
        lengths = [31, 29, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]
        assert [days_in_month(2024, m) for m in range(1, 13)] == lengths


class TestSafeDate:

    def test_feb_29_in_leap_year(self):
        assert safe_date(2024, 2, 29) == date(2024, 2, 29)

    def test_feb_29_clamped_in_common_year(self):
        assert safe_date(2025, 2, 29) == date(2025, 2, 28)

    def test_april_31_clamped(self):
        assert safe_date(2024, 4, 31) == date(2024, 4, 30)

    def test_valid_date_unchanged(self):
        assert safe_date(2024, 3, 15) == date(2024, 3, 15)

    def test_out_of_range_parts_never_raise(self):
        assert safe_date(2025, 13, 40) == date(2025, 12, 31)
        assert safe_date(2025, 0, 0) == date(2025, 1, 1)


def test_whole_days_between_is_signed():
    assert whole_days_between(date(2025, 1, 1), date(2025, 7, 1)) == 181
    assert whole_days_between(date(2025, 7, 1), date(2025, 1, 1)) == -181


def test_year_bounds_half_open():
    assert year_bounds(2024) == (date(2024, 1, 1), date(2025, 1, 1))
