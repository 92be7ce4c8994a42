"""Enums and constants for the leave engine — matching PostgreSQL ENUM types."""

from __future__ import annotations

import enum


# ── Policy ──────────────────────────────────────────────────────────

class AccrualMethod(str, enum.Enum):
    daily = "daily"
    monthly = "monthly"
    at_year_start = "at_year_start"
    pro_rata = "pro_rata"


class RoundingMethod(str, enum.Enum):
    floor = "floor"
    ceil = "ceil"
    round = "round"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    completed = "completed"
    rejected = "rejected"
    cancelled = "cancelled"


# Statuses whose days are deducted from the balance
TAKEN_STATUSES: tuple[LeaveStatus, ...] = (
    LeaveStatus.approved,
    LeaveStatus.completed,
)

# Allowed status changes: current -> reachable
LEAVE_TRANSITIONS: dict[LeaveStatus, frozenset[LeaveStatus]] = {
    LeaveStatus.pending: frozenset(
        {LeaveStatus.approved, LeaveStatus.rejected, LeaveStatus.cancelled}
    ),
    LeaveStatus.approved: frozenset(
        {LeaveStatus.completed, LeaveStatus.cancelled}
    ),
    LeaveStatus.completed: frozenset(),
    LeaveStatus.rejected: frozenset(),
    LeaveStatus.cancelled: frozenset(),
}


# ── Misc constants ──────────────────────────────────────────────────

MONTHS_PER_YEAR = 12
