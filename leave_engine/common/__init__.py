"""Common module — shared enums, date helpers and exceptions for the leave engine."""

from leave_engine.common.constants import (
    LEAVE_TRANSITIONS,
    TAKEN_STATUSES,
    AccrualMethod,
    LeaveStatus,
    RoundingMethod,
)
from leave_engine.common.dates import (
    days_in_month,
    days_in_year,
    is_leap_year,
    safe_date,
    whole_days_between,
    year_bounds,
)
from leave_engine.common.exceptions import (
    AppException,
    InvalidTransitionError,
    NoActivePolicyError,
    NotFoundException,
    ValidationException,
)

__all__ = [
    # Constants / Enums
    "AccrualMethod",
    "LeaveStatus",
    "RoundingMethod",
    "LEAVE_TRANSITIONS",
    "TAKEN_STATUSES",
    # Dates
    "days_in_month",
    "days_in_year",
    "is_leap_year",
    "safe_date",
    "whole_days_between",
    "year_bounds",
    # Exceptions
    "AppException",
    "InvalidTransitionError",
    "NoActivePolicyError",
    "NotFoundException",
    "ValidationException",
]
