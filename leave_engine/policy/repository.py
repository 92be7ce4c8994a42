"""Policy data access — the read contract the balance engine depends on."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from leave_engine.policy.models import EmployeePolicyOverride, LeavePolicy


class PolicyRepository:
    """Reads the company default policy and per-employee overrides."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def find_default_active_policy(self) -> Optional[LeavePolicy]:
        """Return the active company-default policy with its periods loaded.

        Uniqueness is guaranteed by ``uq_leave_policy_company_default``.
        """
        result = await self.db.execute(
            select(LeavePolicy)
            .where(
                LeavePolicy.is_company_default.is_(True),
                LeavePolicy.active.is_(True),
            )
            .options(
                selectinload(LeavePolicy.blackout_periods),
                selectinload(LeavePolicy.company_shutdowns),
            )
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def find_default_policy(self) -> Optional[LeavePolicy]:
        """Return the company-default policy whether or not it is active."""
        result = await self.db.execute(
            select(LeavePolicy)
            .where(LeavePolicy.is_company_default.is_(True))
            .options(
                selectinload(LeavePolicy.blackout_periods),
                selectinload(LeavePolicy.company_shutdowns),
            )
            .execution_options(populate_existing=True)
            .order_by(LeavePolicy.active.desc(), LeavePolicy.created_at.desc())
        )
        return result.scalars().first()

    async def find_policy(self, policy_id: uuid.UUID) -> Optional[LeavePolicy]:
        result = await self.db.execute(
            select(LeavePolicy)
            .where(LeavePolicy.id == policy_id)
            .options(
                selectinload(LeavePolicy.blackout_periods),
                selectinload(LeavePolicy.company_shutdowns),
            )
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def find_policy_override(
        self,
        employee_id: uuid.UUID,
    ) -> Optional[EmployeePolicyOverride]:
        result = await self.db.execute(
            select(EmployeePolicyOverride).where(
                EmployeePolicyOverride.employee_id == employee_id,
            )
        )
        return result.scalars().first()
