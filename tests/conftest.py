"""Shared test fixtures — async DB, repositories, model factories.

Reusable across all test modules (calculations, policy, balance, validation).
Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Keep the app engine quiet; tests run on their own SQLite engine below
os.environ.setdefault("ENVIRONMENT", "test")

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator, Optional

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from leave_engine.common.constants import AccrualMethod, LeaveStatus, RoundingMethod
from leave_engine.database import Base

# Import ALL model modules so SQLAlchemy can resolve cross-module relationships
# (e.g. Employee → Leave, EmployeePolicyOverride)
import leave_engine.core_hr.models  # noqa: F401
import leave_engine.leave.models  # noqa: F401
import leave_engine.policy.models  # noqa: F401

# ── SQLite compat: compile PG-specific types ────────────────────────

from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Register PG-compatible functions for SQLite
@event.listens_for(engine.sync_engine, "connect")
def _register_sqlite_functions(dbapi_conn, connection_record):
    """Register NOW() as a SQLite custom function."""
    dbapi_conn.create_function(
        "NOW", 0, lambda: datetime.now(timezone.utc).isoformat(),
    )


TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

def _make_policy(
    *,
    name: str = "Standard Annual Leave",
    is_company_default: bool = True,
    active: bool = True,
    base_annual_days: int = 21,
    seniority_step_years: int = 5,
    bonus_per_step: int = 1,
    accrual_method: AccrualMethod = AccrualMethod.pro_rata,
    rounding_method: RoundingMethod = RoundingMethod.floor,
    allow_carryover: bool = True,
    max_carryover_days: Optional[int] = 5,
    carryover_expiry_month: Optional[int] = 3,
    carryover_expiry_day: Optional[int] = 31,
    max_negative_balance: int = 0,
    max_consecutive_days: Optional[int] = None,
    min_notice_days: Optional[int] = None,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        name=name,
        is_company_default=is_company_default,
        active=active,
        base_annual_days=base_annual_days,
        seniority_step_years=seniority_step_years,
        bonus_per_step=bonus_per_step,
        accrual_method=accrual_method,
        rounding_method=rounding_method,
        allow_carryover=allow_carryover,
        max_carryover_days=max_carryover_days,
        carryover_expiry_month=carryover_expiry_month,
        carryover_expiry_day=carryover_expiry_day,
        max_negative_balance=max_negative_balance,
        max_consecutive_days=max_consecutive_days,
        min_notice_days=min_notice_days,
    )


def _make_employee(
    *,
    name: str = "Test Employee",
    hired_at: date = date(2020, 1, 1),
    manual_carry_over_days: Optional[Decimal] = None,
    is_active: bool = True,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        name=name,
        hired_at=hired_at,
        manual_carry_over_days=manual_carry_over_days,
        is_active=is_active,
    )


async def _seed_policy(db: AsyncSession, **overrides):
    from leave_engine.policy.models import LeavePolicy

    policy = LeavePolicy(
        **_make_policy(**overrides),
        blackout_periods=[],
        company_shutdowns=[],
    )
    db.add(policy)
    await db.flush()
    return policy


async def _seed_employee(db: AsyncSession, **overrides):
    from leave_engine.core_hr.models import Employee

    employee = Employee(**_make_employee(**overrides))
    db.add(employee)
    await db.flush()
    return employee


async def _seed_leave(
    db: AsyncSession,
    employee_id: uuid.UUID,
    *,
    start_date: date,
    days: Decimal,
    end_date: Optional[date] = None,
    status: LeaveStatus = LeaveStatus.approved,
    is_company_shutdown: bool = False,
):
    from leave_engine.leave.models import Leave

    leave = Leave(
        id=uuid.uuid4(),
        employee_id=employee_id,
        start_date=start_date,
        end_date=end_date,
        days=days,
        status=status,
        is_company_shutdown=is_company_shutdown,
    )
    db.add(leave)
    await db.flush()
    return leave


@pytest.fixture
async def default_policy(db):
    """Insert the active company-default policy (21 days, pro-rata, floor)."""
    return await _seed_policy(db)


@pytest.fixture
async def test_employee(db):
    """Insert an active employee hired on 2020-01-01."""
    return await _seed_employee(db)
