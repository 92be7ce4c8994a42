"""Pure leave arithmetic: tenure, annual entitlement, accrual and rounding.

No database access here; every function is deterministic for its inputs.
Day quantities are ``Decimal`` so half-days and accrual fractions stay exact
until ``apply_rounding`` turns them into whole days.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Callable, Optional, Union

from leave_engine.common.constants import MONTHS_PER_YEAR, AccrualMethod, RoundingMethod
from leave_engine.common.dates import days_in_month, days_in_year, whole_days_between
from leave_engine.config import settings
from leave_engine.leave.schemas import TenureInfo
from leave_engine.policy.schemas import EffectivePolicy

Number = Union[int, Decimal]


def today() -> date:
    """Current date in the configured company timezone."""
    from zoneinfo import ZoneInfo

    return datetime.now(ZoneInfo(settings.TIMEZONE)).date()


# ─────────────────────────────────────────────────────────────────────
# Tenure
# ─────────────────────────────────────────────────────────────────────


def calculate_tenure(hired_at: date, as_of: Optional[date] = None) -> TenureInfo:
    """Calendar-aware service length from ``hired_at`` to ``as_of``.

    Day-of-month underflow borrows the month preceding ``as_of``'s month,
    counting from the hire day clamped to that month's length (a Feb 29
    hire has its Feb 2025 monthiversary on Feb 28). Month underflow borrows
    a year. ``total_days`` is the plain day span.
    """
    as_of = as_of or today()

    years = as_of.year - hired_at.year
    months = as_of.month - hired_at.month
    days = as_of.day - hired_at.day

    if days < 0:
        months -= 1
        if as_of.month == 1:
            borrowed = days_in_month(as_of.year - 1, 12)
        else:
            borrowed = days_in_month(as_of.year, as_of.month - 1)
        days = as_of.day + borrowed - min(hired_at.day, borrowed)

    if months < 0:
        years -= 1
        months += MONTHS_PER_YEAR

    return TenureInfo(
        years=years,
        months=months,
        days=days,
        total_days=whole_days_between(hired_at, as_of),
    )


# ─────────────────────────────────────────────────────────────────────
# Entitlement
# ─────────────────────────────────────────────────────────────────────


def calculate_annual_entitlement(
    hired_at: date,
    policy: EffectivePolicy,
    as_of: Optional[date] = None,
) -> int:
    """Base days plus ``bonus_per_step`` for every full seniority step."""
    years = calculate_tenure(hired_at, as_of).years
    bonus = 0
    if policy.seniority_step_years > 0 and years > 0:
        bonus = (years // policy.seniority_step_years) * policy.bonus_per_step
    return policy.base_annual_days + bonus


# ─────────────────────────────────────────────────────────────────────
# Accrual
# ─────────────────────────────────────────────────────────────────────


def _accrue_by_day(entitlement: Decimal, start: date, as_of: date, hired_at: date) -> Decimal:
    days_elapsed = whole_days_between(start, as_of) + 1
    return entitlement * days_elapsed / days_in_year(as_of.year)


def _accrue_by_month(entitlement: Decimal, start: date, as_of: date, hired_at: date) -> Decimal:
    months_elapsed = (
        (as_of.year - start.year) * MONTHS_PER_YEAR
        + (as_of.month - start.month)
        + 1
    )
    return entitlement * months_elapsed / MONTHS_PER_YEAR


def _accrue_at_year_start(entitlement: Decimal, start: date, as_of: date, hired_at: date) -> Decimal:
    return entitlement if hired_at < date(as_of.year, 1, 1) else Decimal(0)


ACCRUAL_FORMULAS: dict[AccrualMethod, Callable[[Decimal, date, date, date], Decimal]] = {
    AccrualMethod.daily: _accrue_by_day,
    AccrualMethod.pro_rata: _accrue_by_day,
    AccrualMethod.monthly: _accrue_by_month,
    AccrualMethod.at_year_start: _accrue_at_year_start,
}


def calculate_accrued(
    hired_at: date,
    annual_entitlement: Number,
    method: AccrualMethod,
    as_of: Optional[date] = None,
) -> Decimal:
    """Unrounded days earned in ``as_of``'s calendar year.

    daily / pro_rata: ``entitlement * days_elapsed / days_in_year`` with
    both endpoints counted, so leap years accrue slightly less per day.
    monthly: ``entitlement / 12`` per calendar month started.
    at_year_start: everything on Jan 1, nothing for hires during the year.
    """
    as_of = as_of or today()
    if hired_at > as_of:
        return Decimal(0)

    formula = ACCRUAL_FORMULAS.get(method)
    if formula is None:
        return Decimal(0)

    year_start = date(as_of.year, 1, 1)
    effective_start = max(hired_at, year_start)
    return formula(Decimal(annual_entitlement), effective_start, as_of, hired_at)


# ─────────────────────────────────────────────────────────────────────
# Rounding
# ─────────────────────────────────────────────────────────────────────


ROUNDING_MODES: dict[RoundingMethod, str] = {
    RoundingMethod.floor: ROUND_FLOOR,
    RoundingMethod.ceil: ROUND_CEILING,
    # Ties away from zero
    RoundingMethod.round: ROUND_HALF_UP,
}


def apply_rounding(value: Number, method: RoundingMethod) -> Decimal:
    """Round to whole days; unknown methods floor."""
    mode = ROUNDING_MODES.get(method, ROUND_FLOOR)
    return Decimal(value).to_integral_value(rounding=mode)
