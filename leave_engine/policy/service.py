"""Policy service layer — policy resolution and policy administration.

Business logic:
  - Merge the company default policy with an employee override
  - Create / update leave policies, keeping a single active default
  - Blackout period and company shutdown maintenance
  - Employee overrides (tri-state payloads) and manual carryover
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from leave_engine.common.exceptions import NotFoundException, ValidationException
from leave_engine.core_hr.models import Employee
from leave_engine.policy.models import (
    BlackoutPeriod,
    CompanyShutdown,
    EmployeePolicyOverride,
    LeavePolicy,
)
from leave_engine.policy.repository import PolicyRepository
from leave_engine.policy.schemas import (
    OVERRIDABLE_FIELDS,
    POLICY_ONLY_FIELDS,
    BlackoutPeriodCreate,
    BlackoutPeriodOut,
    BlackoutPeriodUpdate,
    CompanyShutdownCreate,
    CompanyShutdownOut,
    CompanyShutdownUpdate,
    EffectivePolicy,
    LeavePolicyOut,
    PolicyCreate,
    PolicyOverrideOut,
    PolicyOverrideUpdate,
    PolicyUpdate,
)

logger = logging.getLogger(__name__)


def merge_policy(policy: Any, override: Optional[Any] = None) -> EffectivePolicy:
    """Apply ``override`` on top of ``policy``.

    Every overridable field present (not None) on the override wins;
    carryover expiry and minimum notice always come from the policy.
    """
    values = {
        field: getattr(policy, field)
        for field in OVERRIDABLE_FIELDS + POLICY_ONLY_FIELDS
    }
    if override is not None:
        for field in OVERRIDABLE_FIELDS:
            value = getattr(override, field, None)
            if value is not None:
                values[field] = value
    return EffectivePolicy(**values)


# ═════════════════════════════════════════════════════════════════════
# PolicyService
# ═════════════════════════════════════════════════════════════════════


class PolicyService:
    """Async policy administration: policies, periods, overrides."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def _get_policy_or_404(
        db: AsyncSession,
        policy_id: uuid.UUID,
    ) -> LeavePolicy:
        policy = await PolicyRepository(db).find_policy(policy_id)
        if policy is None:
            raise NotFoundException("LeavePolicy", str(policy_id))
        return policy

    @staticmethod
    async def _get_employee_or_404(
        db: AsyncSession,
        employee_id: uuid.UUID,
    ) -> Employee:
        result = await db.execute(select(Employee).where(Employee.id == employee_id))
        employee = result.scalars().first()
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))
        return employee

    @staticmethod
    def _check_range(start: date, end: date) -> None:
        if start > end:
            raise ValidationException(
                {"end_date": ["end_date must be on or after start_date."]}
            )

    @staticmethod
    async def _get_row_or_404(db: AsyncSession, model: type, row_id: uuid.UUID):
        row = await db.get(model, row_id)
        if row is None:
            raise NotFoundException(model.__name__, str(row_id))
        return row

    # ─────────────────────────────────────────────────────────────────
    # Policies
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_default_policy(db: AsyncSession) -> LeavePolicyOut:
        """Company default policy with blackout periods and shutdowns."""
        policy = await PolicyRepository(db).find_default_policy()
        if policy is None:
            raise NotFoundException("LeavePolicy", "company-default")
        return LeavePolicyOut.model_validate(policy)

    @staticmethod
    async def create_policy(db: AsyncSession, data: PolicyCreate) -> LeavePolicyOut:
        """Create a policy. A new active default demotes the previous one."""
        if data.is_company_default and data.active:
            await db.execute(
                update(LeavePolicy)
                .where(
                    LeavePolicy.is_company_default.is_(True),
                    LeavePolicy.active.is_(True),
                )
                .values(is_company_default=False)
            )

        policy = LeavePolicy(
            id=uuid.uuid4(),
            **data.model_dump(),
            blackout_periods=[],
            company_shutdowns=[],
        )
        db.add(policy)
        await db.flush()
        logger.info(
            "Created leave policy %s (%s, default=%s)",
            policy.id, policy.name, policy.is_company_default,
        )
        return LeavePolicyOut.model_validate(policy)

    @staticmethod
    async def update_policy(
        db: AsyncSession,
        policy_id: uuid.UUID,
        data: PolicyUpdate,
    ) -> LeavePolicyOut:
        """Apply the non-null fields of ``data`` to the policy.

        Re-activating a company default demotes whichever default is
        currently active.
        """
        policy = await PolicyService._get_policy_or_404(db, policy_id)
        changes = data.model_dump(exclude_none=True)
        if policy.is_company_default and not policy.active and changes.get("active"):
            await db.execute(
                update(LeavePolicy)
                .where(
                    LeavePolicy.id != policy.id,
                    LeavePolicy.is_company_default.is_(True),
                    LeavePolicy.active.is_(True),
                )
                .values(is_company_default=False)
            )
        for field, value in changes.items():
            setattr(policy, field, value)
        await db.flush()
        logger.info("Updated leave policy %s: %s", policy_id, sorted(changes))
        return LeavePolicyOut.model_validate(policy)

    # ─────────────────────────────────────────────────────────────────
    # Blackout periods
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def add_blackout_period(
        db: AsyncSession,
        policy_id: uuid.UUID,
        data: BlackoutPeriodCreate,
    ) -> BlackoutPeriodOut:
        await PolicyService._get_policy_or_404(db, policy_id)
        period = BlackoutPeriod(id=uuid.uuid4(), policy_id=policy_id, **data.model_dump())
        db.add(period)
        await db.flush()
        return BlackoutPeriodOut.model_validate(period)

    @staticmethod
    async def update_blackout_period(
        db: AsyncSession,
        period_id: uuid.UUID,
        data: BlackoutPeriodUpdate,
    ) -> BlackoutPeriodOut:
        period = await PolicyService._get_row_or_404(db, BlackoutPeriod, period_id)
        changes = data.model_dump(exclude_none=True)
        PolicyService._check_range(
            changes.get("start_date", period.start_date),
            changes.get("end_date", period.end_date),
        )
        for field, value in changes.items():
            setattr(period, field, value)
        await db.flush()
        return BlackoutPeriodOut.model_validate(period)

    @staticmethod
    async def delete_blackout_period(db: AsyncSession, period_id: uuid.UUID) -> None:
        period = await PolicyService._get_row_or_404(db, BlackoutPeriod, period_id)
        await db.delete(period)
        await db.flush()

    # ─────────────────────────────────────────────────────────────────
    # Company shutdowns
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def add_company_shutdown(
        db: AsyncSession,
        policy_id: uuid.UUID,
        data: CompanyShutdownCreate,
    ) -> CompanyShutdownOut:
        await PolicyService._get_policy_or_404(db, policy_id)
        shutdown = CompanyShutdown(id=uuid.uuid4(), policy_id=policy_id, **data.model_dump())
        db.add(shutdown)
        await db.flush()
        return CompanyShutdownOut.model_validate(shutdown)

    @staticmethod
    async def update_company_shutdown(
        db: AsyncSession,
        shutdown_id: uuid.UUID,
        data: CompanyShutdownUpdate,
    ) -> CompanyShutdownOut:
        shutdown = await PolicyService._get_row_or_404(db, CompanyShutdown, shutdown_id)
        changes = data.model_dump(exclude_none=True)
        PolicyService._check_range(
            changes.get("start_date", shutdown.start_date),
            changes.get("end_date", shutdown.end_date),
        )
        for field, value in changes.items():
            setattr(shutdown, field, value)
        await db.flush()
        return CompanyShutdownOut.model_validate(shutdown)

    @staticmethod
    async def delete_company_shutdown(db: AsyncSession, shutdown_id: uuid.UUID) -> None:
        shutdown = await PolicyService._get_row_or_404(db, CompanyShutdown, shutdown_id)
        await db.delete(shutdown)
        await db.flush()

    # ─────────────────────────────────────────────────────────────────
    # Employee overrides
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_override(
        db: AsyncSession,
        employee_id: uuid.UUID,
    ) -> Optional[PolicyOverrideOut]:
        override = await PolicyRepository(db).find_policy_override(employee_id)
        if override is None:
            return None
        return PolicyOverrideOut.model_validate(override)

    @staticmethod
    async def upsert_override(
        db: AsyncSession,
        employee_id: uuid.UUID,
        data: PolicyOverrideUpdate,
    ) -> PolicyOverrideOut:
        """Create or patch an employee override.

        Only fields present in the payload are touched; an explicit null
        clears the field so it falls back to the company policy.
        """
        await PolicyService._get_employee_or_404(db, employee_id)
        changes = data.model_dump(exclude_unset=True)

        override = await PolicyRepository(db).find_policy_override(employee_id)
        if override is None:
            override = EmployeePolicyOverride(
                id=uuid.uuid4(), employee_id=employee_id, **changes,
            )
            db.add(override)
        else:
            for field, value in changes.items():
                setattr(override, field, value)

        await db.flush()
        logger.info("Policy override for employee %s: %s", employee_id, sorted(changes))
        return PolicyOverrideOut.model_validate(override)

    @staticmethod
    async def delete_override(db: AsyncSession, employee_id: uuid.UUID) -> None:
        override = await PolicyRepository(db).find_policy_override(employee_id)
        if override is None:
            raise NotFoundException("EmployeePolicyOverride", f"employee={employee_id}")
        await db.delete(override)
        await db.flush()

    @staticmethod
    async def set_manual_carryover(
        db: AsyncSession,
        employee_id: uuid.UUID,
        days: Optional[Decimal],
    ) -> Employee:
        """Set the admin carryover for an employee; ``None`` clears it."""
        employee = await PolicyService._get_employee_or_404(db, employee_id)
        employee.manual_carry_over_days = days
        await db.flush()
        return employee
