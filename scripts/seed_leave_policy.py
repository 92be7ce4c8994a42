#!/usr/bin/env python3
"""Seed the default company leave policy.

Creates "Default Company Policy" (21 days, +1 every 5 years, pro-rata,
floor rounding, carryover up to 5 days expiring Mar 31, no borrowing,
max 10 consecutive days, 14 days notice) unless a company default exists.

Usage:
    python scripts/seed_leave_policy.py                     # policy only
    python scripts/seed_leave_policy.py --shutdown-year 2025  # + Dec 23-27 shutdown
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# ── Path setup ────────────────────────────────────────────────────────
SCRIPT_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = SCRIPT_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT))

from leave_engine.config import settings
from leave_engine.database import engine, get_db
from leave_engine.policy.seed import seed_default_policy

logging.basicConfig(
    level=settings.log_level_value,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger("seed_leave_policy")


async def main(shutdown_year):
    async for db in get_db():
        policy, created = await seed_default_policy(db, shutdown_year)
    await engine.dispose()

    if not created:
        logger.info("Nothing to do, default policy already present")
    logger.info("  Name: %s", policy.name)
    logger.info("  Base days: %s", policy.base_annual_days)
    logger.info(
        "  Seniority bonus: +%s every %s years",
        policy.bonus_per_step, policy.seniority_step_years,
    )
    logger.info("  Accrual: %s, rounding: %s", policy.accrual_method.value, policy.rounding_method.value)
    if policy.allow_carryover:
        logger.info("  Carryover: max %s days", policy.max_carryover_days)
    else:
        logger.info("  Carryover: not allowed")
    logger.info("  Max negative balance: %s days", policy.max_negative_balance)
    for shutdown in policy.company_shutdowns:
        logger.info(
            "  Shutdown: %s - %s, %s days (%s)",
            shutdown.start_date, shutdown.end_date, shutdown.days, shutdown.reason,
        )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the default leave policy")
    parser.add_argument(
        "--shutdown-year",
        type=int,
        default=None,
        help="Also create an example Dec 23-27 company shutdown for this year",
    )
    args = parser.parse_args()

    try:
        asyncio.run(main(args.shutdown_year))
    except Exception:
        logger.exception("Error seeding leave policy")
        sys.exit(1)
