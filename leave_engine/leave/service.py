"""Leave service layer — carryover, balance engine, request validation, leave records.

Business logic:
  - Carryover of the previous year's unused days (uncapped, never negative)
  - Leave balance: accrued + carried over - taken, with borrowing limits
  - Request validation against blackouts, shutdowns, caps, notice, balance
  - Pending leave submission, administrative recording, status transitions
  - Roster summary of current balances

The default policy and usage history come from injected repositories, so
the engine never reaches for ambient global state.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from leave_engine.common.constants import LEAVE_TRANSITIONS, LeaveStatus
from leave_engine.common.dates import safe_date, whole_days_between
from leave_engine.common.exceptions import (
    InvalidTransitionError,
    NoActivePolicyError,
    NotFoundException,
    ValidationException,
)
from leave_engine.core_hr.models import Employee
from leave_engine.leave.calculations import (
    apply_rounding,
    calculate_accrued,
    calculate_annual_entitlement,
    today as company_today,
)
from leave_engine.leave.models import Leave
from leave_engine.leave.repository import LeaveRepository
from leave_engine.leave.schemas import (
    EmployeeBalanceSummary,
    LeaveBalance,
    LeaveCreate,
    LeaveOut,
    LeaveSubmission,
    TakenDays,
    ValidationResult,
)
from leave_engine.policy.models import LeavePolicy
from leave_engine.policy.repository import PolicyRepository
from leave_engine.policy.schemas import EffectivePolicy
from leave_engine.policy.service import merge_policy

logger = logging.getLogger(__name__)

Days = Union[int, Decimal]

NO_ACTIVE_POLICY_MESSAGE = "No active policy found"


def _format_days(value: Decimal) -> str:
    """``Decimal('7.0')`` -> ``'7'``, ``Decimal('2.5')`` -> ``'2.5'``."""
    return f"{value.normalize():f}"


def compose_balance(
    policy: EffectivePolicy,
    *,
    as_of: date,
    annual_entitlement: int,
    accrued: Decimal,
    carried_over: Decimal,
    taken: TakenDays,
    pending_days: Decimal,
) -> LeaveBalance:
    """Assemble a ``LeaveBalance`` from already computed figures."""
    max_negative = Decimal(policy.max_negative_balance)
    available = accrued + carried_over - taken.total

    carried_over_expiry = None
    if policy.carryover_expiry_month and policy.carryover_expiry_day:
        carried_over_expiry = safe_date(
            as_of.year, policy.carryover_expiry_month, policy.carryover_expiry_day,
        )

    return LeaveBalance(
        as_of=as_of,
        annual_entitlement=annual_entitlement,
        accrued=accrued,
        carried_over=carried_over,
        taken=taken.total,
        available=available,
        can_borrow=available < 0 and abs(available) <= max_negative,
        effective_balance=max(available, -max_negative),
        carried_over_expiry=carried_over_expiry,
        company_shutdown_days=taken.company_shutdown,
        voluntary_days=taken.voluntary,
        pending_days=pending_days,
        max_carryover_days=policy.max_carryover_days,
        carryover_exceeds_cap=(
            policy.max_carryover_days is not None
            and carried_over > policy.max_carryover_days
        ),
    )


# ═════════════════════════════════════════════════════════════════════
# LeaveBalanceService
# ═════════════════════════════════════════════════════════════════════


class LeaveBalanceService:
    """Async balance engine over a policy repository and a leave repository."""

    def __init__(self, policies: PolicyRepository, leaves: LeaveRepository) -> None:
        self.policies = policies
        self.leaves = leaves

    @classmethod
    def for_session(cls, db: AsyncSession) -> "LeaveBalanceService":
        return cls(PolicyRepository(db), LeaveRepository(db))

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    async def _resolve_policy(
        self,
        employee_id: uuid.UUID,
    ) -> tuple[LeavePolicy, EffectivePolicy]:
        """Active default policy and the employee's effective policy."""
        policy = await self.policies.find_default_active_policy()
        if policy is None:
            raise NoActivePolicyError()
        override = await self.policies.find_policy_override(employee_id)
        return policy, merge_policy(policy, override)

    async def _get_employee_or_404(self, employee_id: uuid.UUID) -> Employee:
        employee = await self.leaves.get_employee(employee_id)
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))
        return employee

    async def _year_end_balance(
        self,
        employee_id: uuid.UUID,
        hired_at: date,
        year: int,
        policy: EffectivePolicy,
    ) -> Decimal:
        """Unused days left on Dec 31 of ``year``, never below zero."""
        year_end = date(year, 12, 31)
        if hired_at > year_end:
            return Decimal(0)

        entitlement = calculate_annual_entitlement(hired_at, policy, year_end)
        accrued = apply_rounding(
            calculate_accrued(hired_at, entitlement, policy.accrual_method, year_end),
            policy.rounding_method,
        )
        taken = await self.leaves.get_taken_days(employee_id, year)
        return max(Decimal(0), accrued - taken.total)

    # ─────────────────────────────────────────────────────────────────
    # Carryover
    # ─────────────────────────────────────────────────────────────────

    async def calculate_carryover(
        self,
        employee_id: uuid.UUID,
        hired_at: date,
        current_year: int,
        policy: EffectivePolicy,
    ) -> Decimal:
        """Days rolled over from ``current_year - 1``.

        ``max_carryover_days`` is deliberately not applied here; the balance
        reports it through ``carryover_exceeds_cap``.
        """
        if not policy.allow_carryover:
            return Decimal(0)
        return await self._year_end_balance(
            employee_id, hired_at, current_year - 1, policy,
        )

    # ─────────────────────────────────────────────────────────────────
    # Balance
    # ─────────────────────────────────────────────────────────────────

    async def calculate_leave_balance(
        self,
        employee_id: uuid.UUID,
        hired_at: date,
        manual_carry_over_days: Optional[Days] = None,
        as_of: Optional[date] = None,
    ) -> LeaveBalance:
        """Full balance for an employee as of ``as_of`` (default today).

        A ``manual_carry_over_days`` of ``None`` means "not set" and the
        computed carryover is used; any number, including 0, replaces it.

        Raises:
            NoActivePolicyError: no active company-default policy exists.
        """
        as_of = as_of or company_today()
        _, policy = await self._resolve_policy(employee_id)

        annual_entitlement = calculate_annual_entitlement(hired_at, policy, as_of)
        accrued = apply_rounding(
            calculate_accrued(hired_at, annual_entitlement, policy.accrual_method, as_of),
            policy.rounding_method,
        )

        if manual_carry_over_days is not None:
            carried_over = Decimal(manual_carry_over_days)
        else:
            carried_over = await self.calculate_carryover(
                employee_id, hired_at, as_of.year, policy,
            )

        taken = await self.leaves.get_taken_days(employee_id, as_of.year)
        pending_days = await self.leaves.get_pending_days(employee_id, as_of.year)

        balance = compose_balance(
            policy,
            as_of=as_of,
            annual_entitlement=annual_entitlement,
            accrued=accrued,
            carried_over=carried_over,
            taken=taken,
            pending_days=pending_days,
        )
        if balance.carryover_exceeds_cap:
            logger.debug(
                "Employee %s carries %s days over a cap of %s (cap not enforced)",
                employee_id, carried_over, policy.max_carryover_days,
            )
        return balance

    async def get_employee_balance(
        self,
        employee_id: uuid.UUID,
        as_of: Optional[date] = None,
    ) -> LeaveBalance:
        """Balance for a stored employee, honouring their manual carryover."""
        employee = await self._get_employee_or_404(employee_id)
        return await self.calculate_leave_balance(
            employee.id,
            employee.hired_at,
            employee.manual_carry_over_days,
            as_of,
        )

    async def list_employee_balances(
        self,
        as_of: Optional[date] = None,
    ) -> list[EmployeeBalanceSummary]:
        """Entitled / taken / remaining days for every active employee."""
        output: list[EmployeeBalanceSummary] = []
        for employee in await self.leaves.list_active_employees():
            balance = await self.calculate_leave_balance(
                employee.id,
                employee.hired_at,
                employee.manual_carry_over_days,
                as_of,
            )
            output.append(
                EmployeeBalanceSummary(
                    employee_id=employee.id,
                    name=employee.name,
                    hired_at=employee.hired_at,
                    entitled_days=balance.annual_entitlement,
                    taken_days=balance.taken,
                    remaining_days=balance.available,
                    balance=balance,
                )
            )
        return output

    # ─────────────────────────────────────────────────────────────────
    # Validation
    # ─────────────────────────────────────────────────────────────────

    async def validate_leave_request(
        self,
        employee_id: uuid.UUID,
        hired_at: date,
        start_date: date,
        end_date: date,
        requested_days: Days,
        *,
        manual_carry_over_days: Optional[Days] = None,
        today: Optional[date] = None,
    ) -> ValidationResult:
        """Check a proposed leave against every policy constraint.

        Problems accumulate in ``errors`` / ``warnings`` rather than raising,
        so callers can show them all at once.
        """
        today = today or company_today()
        requested = Decimal(requested_days)
        errors: list[str] = []
        warnings: list[str] = []

        try:
            policy, effective = await self._resolve_policy(employee_id)
        except NoActivePolicyError:
            logger.warning("Leave validation for %s without an active policy", employee_id)
            return ValidationResult(valid=False, errors=[NO_ACTIVE_POLICY_MESSAGE])

        if end_date < start_date:
            errors.append("End date must be on or after start date")

        # ── Blackout periods ────────────────────────────────────────
        blackouts = [bp for bp in policy.blackout_periods if bp.overlaps(start_date, end_date)]
        if blackouts:
            blocking = [bp for bp in blackouts if not bp.allow_exceptions]
            if blocking:
                errors.append(f"Leave overlaps with blackout period: {blocking[0].reason}")
            else:
                warnings.append(
                    "Leave overlaps with blackout period (exceptions allowed): "
                    f"{blackouts[0].reason}"
                )

        # ── Company shutdowns ───────────────────────────────────────
        shutdowns = [cs for cs in policy.company_shutdowns if cs.overlaps(start_date, end_date)]
        if shutdowns:
            warnings.append(f"Company shutdown during period: {shutdowns[0].reason}")

        # ── Consecutive days ────────────────────────────────────────
        if effective.max_consecutive_days and requested > effective.max_consecutive_days:
            errors.append(
                f"Maximum {effective.max_consecutive_days} consecutive days allowed"
            )

        # ── Notice period ───────────────────────────────────────────
        if effective.min_notice_days:
            if whole_days_between(today, start_date) < effective.min_notice_days:
                errors.append(f"Minimum {effective.min_notice_days} days notice required")

        # ── Balance ─────────────────────────────────────────────────
        balance = await self.calculate_leave_balance(
            employee_id, hired_at, manual_carry_over_days, today,
        )
        if requested > balance.effective_balance:
            if balance.can_borrow:
                warnings.append(
                    "This will result in negative balance: "
                    f"{_format_days(balance.effective_balance - requested)} days"
                )
            else:
                errors.append(
                    f"Insufficient balance: {_format_days(balance.effective_balance)} "
                    f"days available, {_format_days(requested)} requested"
                )

        return ValidationResult(valid=not errors, errors=errors, warnings=warnings)

    # ─────────────────────────────────────────────────────────────────
    # Leave records
    # ─────────────────────────────────────────────────────────────────

    async def submit_leave_request(
        self,
        employee_id: uuid.UUID,
        data: LeaveCreate,
        *,
        today: Optional[date] = None,
    ) -> LeaveSubmission:
        """Validate and store a pending leave request.

        Raises:
            NotFoundException: unknown employee.
            ValidationException: one or more blocking problems; every error
                is listed under ``leave``.
        """
        employee = await self._get_employee_or_404(employee_id)
        result = await self.validate_leave_request(
            employee.id,
            employee.hired_at,
            data.start_date,
            data.last_day,
            data.days,
            manual_carry_over_days=employee.manual_carry_over_days,
            today=today,
        )
        if not result.valid:
            raise ValidationException({"leave": result.errors})

        leave = await self.leaves.add_leave(
            Leave(
                id=uuid.uuid4(),
                employee_id=employee.id,
                start_date=data.start_date,
                end_date=data.end_date,
                days=data.days,
                status=LeaveStatus.pending,
                is_company_shutdown=data.is_company_shutdown,
                note=data.note,
            )
        )
        logger.info(
            "Leave %s submitted for employee %s: %s days from %s",
            leave.id, employee.id, data.days, data.start_date,
        )
        return LeaveSubmission(leave=LeaveOut.model_validate(leave), warnings=result.warnings)

    async def record_leave(
        self,
        employee_id: uuid.UUID,
        data: LeaveCreate,
        *,
        status: LeaveStatus = LeaveStatus.approved,
    ) -> LeaveOut:
        """Store a leave entered by an administrator, without validation."""
        employee = await self._get_employee_or_404(employee_id)
        leave = await self.leaves.add_leave(
            Leave(
                id=uuid.uuid4(),
                employee_id=employee.id,
                start_date=data.start_date,
                end_date=data.end_date,
                days=data.days,
                status=status,
                is_company_shutdown=data.is_company_shutdown,
                note=data.note,
            )
        )
        return LeaveOut.model_validate(leave)

    async def list_leaves(
        self,
        employee_id: uuid.UUID,
        year: Optional[int] = None,
    ) -> list[LeaveOut]:
        """Leave history, newest first."""
        await self._get_employee_or_404(employee_id)
        return [LeaveOut.model_validate(leave) for leave in await self.leaves.list_leaves(employee_id, year)]

    async def transition_leave(
        self,
        leave_id: uuid.UUID,
        new_status: LeaveStatus,
    ) -> LeaveOut:
        """Move a leave to ``new_status`` if the lifecycle allows it."""
        leave = await self.leaves.get_leave(leave_id)
        if leave is None:
            raise NotFoundException("Leave", str(leave_id))

        if new_status not in LEAVE_TRANSITIONS[leave.status]:
            raise InvalidTransitionError(leave.status.value, new_status.value)

        leave.status = new_status
        await self.leaves.db.flush()
        logger.info("Leave %s moved to %s", leave_id, new_status.value)
        return LeaveOut.model_validate(leave)
