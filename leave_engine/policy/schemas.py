"""Policy Pydantic v2 schemas — effective policy and admin payloads.

Naming conventions:
  - *Create / *Update  → admin write payloads
  - *Out               → read representations
  - EffectivePolicy    → the merged policy every calculation runs on
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from leave_engine.common.constants import AccrualMethod, RoundingMethod


# ═════════════════════════════════════════════════════════════════════
# Effective policy
# ═════════════════════════════════════════════════════════════════════


class EffectivePolicy(BaseModel):
    """Company policy with an employee override applied."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    base_annual_days: int
    seniority_step_years: int
    bonus_per_step: int
    accrual_method: AccrualMethod
    rounding_method: RoundingMethod
    allow_carryover: bool
    max_carryover_days: Optional[int] = None
    carryover_expiry_month: Optional[int] = None
    carryover_expiry_day: Optional[int] = None
    max_negative_balance: int = 0
    max_consecutive_days: Optional[int] = None
    min_notice_days: Optional[int] = None


# Fields an EmployeePolicyOverride may replace
OVERRIDABLE_FIELDS: tuple[str, ...] = (
    "base_annual_days",
    "seniority_step_years",
    "bonus_per_step",
    "accrual_method",
    "rounding_method",
    "allow_carryover",
    "max_carryover_days",
    "max_negative_balance",
    "max_consecutive_days",
)

# Fields always taken from the company policy
POLICY_ONLY_FIELDS: tuple[str, ...] = (
    "carryover_expiry_month",
    "carryover_expiry_day",
    "min_notice_days",
)


# ═════════════════════════════════════════════════════════════════════
# Blackout periods / company shutdowns
# ═════════════════════════════════════════════════════════════════════


class _DateRange(BaseModel):
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def validate_dates(self) -> "_DateRange":
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date.")
        return self


class BlackoutPeriodCreate(_DateRange):
    reason: str = Field(..., min_length=1, max_length=500)
    allow_exceptions: bool = False


class BlackoutPeriodUpdate(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = Field(None, min_length=1, max_length=500)
    allow_exceptions: Optional[bool] = None


class BlackoutPeriodOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    policy_id: uuid.UUID
    start_date: date
    end_date: date
    reason: str
    allow_exceptions: bool


class CompanyShutdownCreate(_DateRange):
    days: Decimal = Field(..., ge=0)
    reason: str = Field(..., min_length=1, max_length=500)
    deduct_from_allowance: bool = True


class CompanyShutdownUpdate(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    days: Optional[Decimal] = Field(None, ge=0)
    reason: Optional[str] = Field(None, min_length=1, max_length=500)
    deduct_from_allowance: Optional[bool] = None


class CompanyShutdownOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    policy_id: uuid.UUID
    start_date: date
    end_date: date
    days: Decimal
    reason: str
    deduct_from_allowance: bool


# ═════════════════════════════════════════════════════════════════════
# Leave policy
# ═════════════════════════════════════════════════════════════════════


class PolicyCreate(BaseModel):
    """Payload for creating a leave policy."""

    name: str = Field(..., min_length=1, max_length=200)
    is_company_default: bool = False
    active: bool = True
    base_annual_days: int = Field(..., ge=0)
    seniority_step_years: int = Field(5, ge=0)
    bonus_per_step: int = Field(1, ge=0)
    accrual_method: AccrualMethod = AccrualMethod.pro_rata
    rounding_method: RoundingMethod = RoundingMethod.floor
    allow_carryover: bool = True
    max_carryover_days: Optional[int] = Field(None, ge=0)
    carryover_expiry_month: Optional[int] = Field(None, ge=1, le=12)
    carryover_expiry_day: Optional[int] = Field(None, ge=1, le=31)
    max_negative_balance: int = Field(0, ge=0)
    max_consecutive_days: Optional[int] = Field(None, ge=1)
    min_notice_days: Optional[int] = Field(None, ge=0)


class PolicyUpdate(BaseModel):
    """Partial policy update. Fields left out, or sent as null, are unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    active: Optional[bool] = None
    base_annual_days: Optional[int] = Field(None, ge=0)
    seniority_step_years: Optional[int] = Field(None, ge=0)
    bonus_per_step: Optional[int] = Field(None, ge=0)
    accrual_method: Optional[AccrualMethod] = None
    rounding_method: Optional[RoundingMethod] = None
    allow_carryover: Optional[bool] = None
    max_carryover_days: Optional[int] = Field(None, ge=0)
    carryover_expiry_month: Optional[int] = Field(None, ge=1, le=12)
    carryover_expiry_day: Optional[int] = Field(None, ge=1, le=31)
    max_negative_balance: Optional[int] = Field(None, ge=0)
    max_consecutive_days: Optional[int] = Field(None, ge=1)
    min_notice_days: Optional[int] = Field(None, ge=0)


class LeavePolicyOut(BaseModel):
    """Full policy with its blackout periods and shutdowns."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    is_company_default: bool
    active: bool
    base_annual_days: int
    seniority_step_years: int
    bonus_per_step: int
    accrual_method: AccrualMethod
    rounding_method: RoundingMethod
    allow_carryover: bool
    max_carryover_days: Optional[int] = None
    carryover_expiry_month: Optional[int] = None
    carryover_expiry_day: Optional[int] = None
    max_negative_balance: int
    max_consecutive_days: Optional[int] = None
    min_notice_days: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    blackout_periods: list[BlackoutPeriodOut] = []
    company_shutdowns: list[CompanyShutdownOut] = []


# ═════════════════════════════════════════════════════════════════════
# Employee override
# ═════════════════════════════════════════════════════════════════════


class PolicyOverrideUpdate(BaseModel):
    """Tri-state override payload.

    A field missing from the payload keeps its stored value, a field sent
    as ``null`` is cleared (falls back to the company policy), anything
    else replaces it. ``model_dump(exclude_unset=True)`` tells them apart.
    """

    base_annual_days: Optional[int] = Field(None, ge=0)
    seniority_step_years: Optional[int] = Field(None, ge=0)
    bonus_per_step: Optional[int] = Field(None, ge=0)
    accrual_method: Optional[AccrualMethod] = None
    rounding_method: Optional[RoundingMethod] = None
    allow_carryover: Optional[bool] = None
    max_carryover_days: Optional[int] = Field(None, ge=0)
    max_negative_balance: Optional[int] = Field(None, ge=0)
    max_consecutive_days: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = Field(None, max_length=1000)


class PolicyOverrideOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    base_annual_days: Optional[int] = None
    seniority_step_years: Optional[int] = None
    bonus_per_step: Optional[int] = None
    accrual_method: Optional[AccrualMethod] = None
    rounding_method: Optional[RoundingMethod] = None
    allow_carryover: Optional[bool] = None
    max_carryover_days: Optional[int] = None
    max_negative_balance: Optional[int] = None
    max_consecutive_days: Optional[int] = None
    notes: Optional[str] = None
