"""Default company leave policy used to bootstrap a fresh database."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from leave_engine.common.constants import AccrualMethod, RoundingMethod
from leave_engine.policy.repository import PolicyRepository
from leave_engine.policy.schemas import CompanyShutdownCreate, LeavePolicyOut, PolicyCreate
from leave_engine.policy.service import PolicyService

logger = logging.getLogger(__name__)

DEFAULT_POLICY = PolicyCreate(
    name="Default Company Policy",
    is_company_default=True,
    active=True,
    base_annual_days=21,
    seniority_step_years=5,
    bonus_per_step=1,
    accrual_method=AccrualMethod.pro_rata,
    rounding_method=RoundingMethod.floor,
    allow_carryover=True,
    max_carryover_days=5,
    carryover_expiry_month=3,
    carryover_expiry_day=31,
    max_negative_balance=0,
    max_consecutive_days=10,
    min_notice_days=14,
)


def christmas_shutdown(year: int) -> CompanyShutdownCreate:
    return CompanyShutdownCreate(
        start_date=date(year, 12, 23),
        end_date=date(year, 12, 27),
        days=Decimal("5"),
        reason=f"Christmas holidays {year}",
        deduct_from_allowance=True,
    )


async def seed_default_policy(
    db: AsyncSession,
    shutdown_year: Optional[int] = None,
) -> tuple[LeavePolicyOut, bool]:
    """Create the default policy unless a company default already exists.

    Returns the policy and whether it was created. ``shutdown_year`` adds
    an example Dec 23-27 shutdown to a newly created policy.
    """
    existing = await PolicyRepository(db).find_default_policy()
    if existing is not None:
        logger.info("Default policy already exists: %s (%s)", existing.name, existing.id)
        return LeavePolicyOut.model_validate(existing), False

    policy = await PolicyService.create_policy(db, DEFAULT_POLICY)
    if shutdown_year is not None:
        shutdown = await PolicyService.add_company_shutdown(
            db, policy.id, christmas_shutdown(shutdown_year),
        )
        logger.info(
            "Added company shutdown %s - %s (%s days)",
            shutdown.start_date, shutdown.end_date, shutdown.days,
        )
        policy = await PolicyService.get_default_policy(db)
    return policy, True
