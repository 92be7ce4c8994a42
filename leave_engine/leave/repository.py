"""Leave data access — usage history sums and leave records."""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from leave_engine.common.constants import TAKEN_STATUSES, LeaveStatus
from leave_engine.common.dates import year_bounds
from leave_engine.core_hr.models import Employee
from leave_engine.leave.models import Leave
from leave_engine.leave.schemas import TakenDays


def _to_decimal(value) -> Decimal:
    return Decimal(str(value or 0))


class LeaveRepository:
    """Reads and writes Leave rows for the balance engine."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_taken_days(self, employee_id: uuid.UUID, year: int) -> TakenDays:
        """Sum approved/completed days starting in ``year``."""
        year_start, next_year = year_bounds(year)
        shutdown_days = case(
            (Leave.is_company_shutdown.is_(True), Leave.days),
            else_=0,
        )
        result = await self.db.execute(
            select(
                func.coalesce(func.sum(Leave.days), 0),
                func.coalesce(func.sum(shutdown_days), 0),
            ).where(
                Leave.employee_id == employee_id,
                Leave.status.in_(TAKEN_STATUSES),
                Leave.start_date >= year_start,
                Leave.start_date < next_year,
            )
        )
        total, company_shutdown = result.one()
        total = _to_decimal(total)
        company_shutdown = _to_decimal(company_shutdown)
        return TakenDays(
            total=total,
            company_shutdown=company_shutdown,
            voluntary=total - company_shutdown,
        )

    async def get_pending_days(self, employee_id: uuid.UUID, year: int) -> Decimal:
        """Sum pending days starting in ``year``."""
        year_start, next_year = year_bounds(year)
        result = await self.db.execute(
            select(func.coalesce(func.sum(Leave.days), 0)).where(
                Leave.employee_id == employee_id,
                Leave.status == LeaveStatus.pending,
                Leave.start_date >= year_start,
                Leave.start_date < next_year,
            )
        )
        return _to_decimal(result.scalar_one())

    async def list_leaves(
        self,
        employee_id: uuid.UUID,
        year: Optional[int] = None,
    ) -> Sequence[Leave]:
        query = select(Leave).where(Leave.employee_id == employee_id)
        if year is not None:
            year_start, next_year = year_bounds(year)
            query = query.where(
                Leave.start_date >= year_start,
                Leave.start_date < next_year,
            )
        result = await self.db.execute(
            query.order_by(Leave.start_date.desc(), Leave.created_at.desc())
        )
        return result.scalars().all()

    async def get_leave(self, leave_id: uuid.UUID) -> Optional[Leave]:
        return await self.db.get(Leave, leave_id)

    async def add_leave(self, leave: Leave) -> Leave:
        self.db.add(leave)
        await self.db.flush()
        return leave

    async def get_employee(self, employee_id: uuid.UUID) -> Optional[Employee]:
        return await self.db.get(Employee, employee_id)

    async def list_active_employees(self) -> Sequence[Employee]:
        result = await self.db.execute(
            select(Employee)
            .where(Employee.is_active.is_(True))
            .order_by(Employee.name)
        )
        return result.scalars().all()
