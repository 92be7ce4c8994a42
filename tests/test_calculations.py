"""Pure calculation tests — tenure, entitlement, accrual, rounding.

No database: every function under test is deterministic for its inputs.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from leave_engine.common.constants import AccrualMethod, RoundingMethod
from leave_engine.leave.calculations import (
    apply_rounding,
    calculate_accrued,
    calculate_annual_entitlement,
    calculate_tenure,
)
from leave_engine.policy.schemas import EffectivePolicy


def _effective(**overrides) -> EffectivePolicy:
    values = dict(
        base_annual_days=21,
        seniority_step_years=5,
        bonus_per_step=1,
        accrual_method=AccrualMethod.pro_rata,
        rounding_method=RoundingMethod.floor,
        allow_carryover=True,
        max_carryover_days=5,
        max_negative_balance=0,
    )
    values.update(overrides)
    return EffectivePolicy(**values)


# ═════════════════════════════════════════════════════════════════════
# 1. Tenure
# ═════════════════════════════════════════════════════════════════════


class TestCalculateTenure:

    def test_whole_years_and_months(self):
        tenure = calculate_tenure(date(2020, 1, 1), date(2025, 7, 1))
        assert (tenure.years, tenure.months, tenure.days) == (5, 6, 0)

    def test_day_underflow_borrows_previous_month(self):
        """Mar 15 2024 → Mar 10 2025 borrows February's 28 days."""
        tenure = calculate_tenure(date(2024, 3, 15), date(2025, 3, 10))
        assert (tenure.years, tenure.months, tenure.days) == (0, 11, 23)
        assert tenure.total_days == 360

    def test_january_underflow_borrows_december(self):
        tenure = calculate_tenure(date(2024, 11, 20), date(2025, 1, 5))
        assert (tenure.years, tenure.months, tenure.days) == (0, 1, 16)

    def test_feb_29_hire_one_year_and_a_day(self):
        tenure = calculate_tenure(date(2024, 2, 29), date(2025, 3, 1))
        assert (tenure.years, tenure.months, tenure.days) == (1, 0, 1)
        assert tenure.total_days == 366

    def test_feb_29_hire_on_feb_28(self):
        tenure = calculate_tenure(date(2024, 2, 29), date(2025, 2, 28))
        assert (tenure.years, tenure.months, tenure.days) == (0, 11, 30)

    def test_feb_29_hire_next_leap_year(self):
        tenure = calculate_tenure(date(2024, 2, 29), date(2028, 2, 29))
        assert (tenure.years, tenure.months, tenure.days) == (4, 0, 0)


# ═════════════════════════════════════════════════════════════════════
# 2. Annual entitlement
# ═════════════════════════════════════════════════════════════════════


class TestAnnualEntitlement:

    def test_bonus_per_full_step(self):
        policy = _effective()
        assert calculate_annual_entitlement(date(2015, 6, 1), policy, date(2025, 6, 1)) == 23
        assert calculate_annual_entitlement(date(2015, 6, 1), policy, date(2025, 5, 31)) == 22

    def test_no_bonus_below_first_step(self):
        assert calculate_annual_entitlement(date(2022, 1, 1), _effective(), date(2025, 6, 1)) == 21

    def test_zero_step_disables_bonus(self):
        policy = _effective(seniority_step_years=0)
        assert calculate_annual_entitlement(date(2000, 1, 1), policy, date(2025, 6, 1)) == 21

    def test_future_hire_gets_base_only(self):
        assert calculate_annual_entitlement(date(2026, 1, 1), _effective(), date(2025, 6, 1)) == 21


# ═════════════════════════════════════════════════════════════════════
# 3. Accrual
# ═════════════════════════════════════════════════════════════════════


class TestAccrual:

    @pytest.mark.parametrize("year", [2024, 2025])
    def test_pro_rata_full_year_is_full_entitlement(self, year):
        accrued = calculate_accrued(
            date(year, 1, 1), 21, AccrualMethod.pro_rata, date(year, 12, 31),
        )
        assert accrued == Decimal(21)

    def test_daily_rate_differs_slightly_in_leap_year(self):
        leap = calculate_accrued(date(2024, 1, 1), 21, AccrualMethod.daily, date(2024, 1, 1))
        common = calculate_accrued(date(2025, 1, 1), 21, AccrualMethod.daily, date(2025, 1, 1))
        assert float(leap) == pytest.approx(0.05738, abs=1e-5)
        assert float(common) == pytest.approx(0.05753, abs=1e-5)
        assert abs(common - leap) < Decimal("0.0002")

    def test_daily_through_feb_29(self):
        accrued = calculate_accrued(date(2024, 1, 1), 21, AccrualMethod.daily, date(2024, 2, 29))
        assert float(accrued) == pytest.approx(3.44, abs=0.01)

    def test_same_calendar_day_in_consecutive_years_is_fair(self):
        leap = calculate_accrued(date(2024, 1, 1), 21, AccrualMethod.pro_rata, date(2024, 10, 2))
        common = calculate_accrued(date(2025, 1, 1), 21, AccrualMethod.pro_rata, date(2025, 10, 2))
        assert abs(leap - common) < Decimal("0.1")

    def test_mid_year_hire_accrues_from_hire_date(self):
        accrued = calculate_accrued(date(2024, 2, 29), 21, AccrualMethod.pro_rata, date(2024, 10, 2))
        # 217 days of 366
        assert float(accrued) == pytest.approx(21 * 217 / 366)

    def test_monthly_counts_current_month(self):
        same_month = calculate_accrued(date(2025, 3, 10), 12, AccrualMethod.monthly, date(2025, 3, 20))
        assert same_month == Decimal(1)
        half_year = calculate_accrued(date(2020, 1, 1), 24, AccrualMethod.monthly, date(2025, 6, 15))
        assert half_year == Decimal(12)

    def test_monthly_is_exact_for_whole_year(self):
        accrued = calculate_accrued(date(2020, 1, 1), 22, AccrualMethod.monthly, date(2025, 12, 1))
        assert accrued == Decimal(22)

    def test_at_year_start(self):
        assert calculate_accrued(
            date(2024, 5, 1), 21, AccrualMethod.at_year_start, date(2025, 2, 1),
        ) == Decimal(21)
        assert calculate_accrued(
            date(2025, 1, 1), 21, AccrualMethod.at_year_start, date(2025, 6, 1),
        ) == Decimal(0)

    def test_hired_after_as_of_accrues_nothing(self):
        assert calculate_accrued(
            date(2025, 8, 1), 21, AccrualMethod.pro_rata, date(2025, 7, 1),
        ) == Decimal(0)

    def test_unknown_method_accrues_nothing(self):
        assert calculate_accrued(date(2020, 1, 1), 21, "weekly", date(2025, 7, 1)) == Decimal(0)


# ═════════════════════════════════════════════════════════════════════
# 4. Rounding
# ═════════════════════════════════════════════════════════════════════


class TestRounding:

    def test_floor(self):
        assert apply_rounding(Decimal("10.97"), RoundingMethod.floor) == Decimal(10)

    def test_ceil(self):
        assert apply_rounding(Decimal("10.01"), RoundingMethod.ceil) == Decimal(11)

    def test_round_ties_away_from_zero(self):
        assert apply_rounding(Decimal("2.5"), RoundingMethod.round) == Decimal(3)
        assert apply_rounding(Decimal("-2.5"), RoundingMethod.round) == Decimal(-3)
        assert apply_rounding(Decimal("2.49"), RoundingMethod.round) == Decimal(2)

    def test_unknown_method_floors(self):
        assert apply_rounding(Decimal("7.9"), "banker") == Decimal(7)
