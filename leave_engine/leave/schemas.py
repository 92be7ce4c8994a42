"""Leave Pydantic v2 schemas — calculation results and leave payloads.

Naming conventions:
  - *Create           → request bodies (write)
  - *Out              → stored records (read)
  - TenureInfo, TakenDays, LeaveBalance, ValidationResult → engine results
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from leave_engine.common.constants import LeaveStatus


# ═════════════════════════════════════════════════════════════════════
# Engine results
# ═════════════════════════════════════════════════════════════════════


class TenureInfo(BaseModel):
    """Service length, e.g. 2 years, 3 months, 10 days."""

    years: int
    months: int
    days: int
    total_days: int


class TakenDays(BaseModel):
    """Approved/completed days in a year, split by shutdown flag."""

    total: Decimal = Decimal("0")
    company_shutdown: Decimal = Decimal("0")
    voluntary: Decimal = Decimal("0")


class LeaveBalance(BaseModel):
    """Complete leave balance for one employee as of a date."""

    as_of: date
    annual_entitlement: int
    accrued: Decimal
    carried_over: Decimal
    taken: Decimal
    available: Decimal

    can_borrow: bool
    effective_balance: Decimal
    carried_over_expiry: Optional[date] = None

    company_shutdown_days: Decimal = Decimal("0")
    voluntary_days: Decimal = Decimal("0")
    pending_days: Decimal = Decimal("0")

    # Reported only, the cap is not applied to carried_over
    max_carryover_days: Optional[int] = None
    carryover_exceeds_cap: bool = False


class ValidationResult(BaseModel):
    """Outcome of a leave request check. Warnings never block."""

    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class EmployeeBalanceSummary(BaseModel):
    """Roster line: an employee with their current-year figures."""

    employee_id: uuid.UUID
    name: str
    hired_at: date
    entitled_days: int
    taken_days: Decimal
    remaining_days: Decimal
    balance: LeaveBalance


# ═════════════════════════════════════════════════════════════════════
# Leave records
# ═════════════════════════════════════════════════════════════════════


class LeaveCreate(BaseModel):
    """Payload for requesting or recording leave."""

    start_date: date = Field(..., description="First day of leave (inclusive)")
    end_date: Optional[date] = Field(
        None, description="Last day of leave (inclusive); defaults to start_date"
    )
    days: Decimal = Field(..., gt=0, description="Working days requested, half-days allowed")
    note: Optional[str] = Field(None, max_length=1000)
    is_company_shutdown: bool = False

    @model_validator(mode="after")
    def validate_dates(self) -> "LeaveCreate":
        if self.end_date is not None and self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date.")
        if (self.days * 2) % 1 != 0:
            raise ValueError("days must be a multiple of 0.5.")
        return self

    @property
    def last_day(self) -> date:
        return self.end_date or self.start_date


class LeaveOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    start_date: date
    end_date: Optional[date] = None
    days: Decimal
    status: LeaveStatus
    is_company_shutdown: bool = False
    note: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class LeaveSubmission(BaseModel):
    """A newly created pending leave with any non-blocking warnings."""

    leave: LeaveOut
    warnings: list[str] = Field(default_factory=list)
