"""Policy ORM models: LeavePolicy, BlackoutPeriod, CompanyShutdown, EmployeePolicyOverride."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leave_engine.common.constants import AccrualMethod, RoundingMethod
from leave_engine.common.models import TimestampMixin
from leave_engine.database import Base

if TYPE_CHECKING:
    from leave_engine.core_hr.models import Employee


class LeavePolicy(Base, TimestampMixin):
    __tablename__ = "leave_policies"
    __table_args__ = (
        # At most one active company default
        sa.Index(
            "uq_leave_policy_company_default",
            "is_company_default",
            unique=True,
            postgresql_where=sa.text("is_company_default AND active"),
            sqlite_where=sa.text("is_company_default AND active"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    is_company_default: Mapped[bool] = mapped_column(
        sa.Boolean, default=False, nullable=False
    )
    active: Mapped[bool] = mapped_column(sa.Boolean, default=True, nullable=False)

    # Entitlement
    base_annual_days: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    seniority_step_years: Mapped[int] = mapped_column(
        sa.Integer, default=5, nullable=False
    )
    bonus_per_step: Mapped[int] = mapped_column(sa.Integer, default=1, nullable=False)

    # Accrual
    accrual_method: Mapped[AccrualMethod] = mapped_column(
        sa.Enum(AccrualMethod, name="accrual_method"),
        default=AccrualMethod.pro_rata,
        nullable=False,
    )
    rounding_method: Mapped[RoundingMethod] = mapped_column(
        sa.Enum(RoundingMethod, name="rounding_method"),
        default=RoundingMethod.floor,
        nullable=False,
    )

    # Carryover
    allow_carryover: Mapped[bool] = mapped_column(
        sa.Boolean, default=True, nullable=False
    )
    max_carryover_days: Mapped[Optional[int]] = mapped_column(sa.Integer)
    carryover_expiry_month: Mapped[Optional[int]] = mapped_column(sa.Integer)
    carryover_expiry_day: Mapped[Optional[int]] = mapped_column(sa.Integer)

    # Borrowing and request constraints
    max_negative_balance: Mapped[int] = mapped_column(
        sa.Integer, default=0, nullable=False
    )
    max_consecutive_days: Mapped[Optional[int]] = mapped_column(sa.Integer)
    min_notice_days: Mapped[Optional[int]] = mapped_column(sa.Integer)

    # Relationships
    blackout_periods: Mapped[list[BlackoutPeriod]] = relationship(
        back_populates="policy",
        order_by="BlackoutPeriod.start_date",
        cascade="all, delete-orphan",
    )
    company_shutdowns: Mapped[list[CompanyShutdown]] = relationship(
        back_populates="policy",
        order_by="CompanyShutdown.start_date",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<LeavePolicy {self.name} default={self.is_company_default}>"


class BlackoutPeriod(Base):
    __tablename__ = "leave_blackout_periods"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    policy_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("leave_policies.id", ondelete="CASCADE"),
        nullable=False,
    )
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    reason: Mapped[str] = mapped_column(sa.Text, nullable=False)
    allow_exceptions: Mapped[bool] = mapped_column(
        sa.Boolean, default=False, nullable=False
    )

    # Relationships
    policy: Mapped[LeavePolicy] = relationship(back_populates="blackout_periods")

    def overlaps(self, start: date, end: date) -> bool:
        return start <= self.end_date and end >= self.start_date


class CompanyShutdown(Base):
    __tablename__ = "leave_company_shutdowns"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    policy_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("leave_policies.id", ondelete="CASCADE"),
        nullable=False,
    )
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    days: Mapped[Decimal] = mapped_column(sa.Numeric(5, 1), nullable=False)
    reason: Mapped[str] = mapped_column(sa.Text, nullable=False)
    deduct_from_allowance: Mapped[bool] = mapped_column(
        sa.Boolean, default=True, nullable=False
    )

    # Relationships
    policy: Mapped[LeavePolicy] = relationship(back_populates="company_shutdowns")

    def overlaps(self, start: date, end: date) -> bool:
        return start <= self.end_date and end >= self.start_date


class EmployeePolicyOverride(Base, TimestampMixin):
    """Per-employee policy tweaks; a NULL column falls through to the policy."""

    __tablename__ = "employee_policy_overrides"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    base_annual_days: Mapped[Optional[int]] = mapped_column(sa.Integer)
    seniority_step_years: Mapped[Optional[int]] = mapped_column(sa.Integer)
    bonus_per_step: Mapped[Optional[int]] = mapped_column(sa.Integer)
    accrual_method: Mapped[Optional[AccrualMethod]] = mapped_column(
        sa.Enum(AccrualMethod, name="accrual_method")
    )
    rounding_method: Mapped[Optional[RoundingMethod]] = mapped_column(
        sa.Enum(RoundingMethod, name="rounding_method")
    )
    allow_carryover: Mapped[Optional[bool]] = mapped_column(sa.Boolean)
    max_carryover_days: Mapped[Optional[int]] = mapped_column(sa.Integer)
    max_negative_balance: Mapped[Optional[int]] = mapped_column(sa.Integer)
    max_consecutive_days: Mapped[Optional[int]] = mapped_column(sa.Integer)
    notes: Mapped[Optional[str]] = mapped_column(sa.Text)

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="policy_override")
