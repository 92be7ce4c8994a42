"""Core HR ORM model: Employee.

Only the columns the leave engine reads are mapped; the wider employee
record is owned by the surrounding HR application.
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leave_engine.common.models import TimestampMixin
from leave_engine.database import Base

if TYPE_CHECKING:
    from leave_engine.leave.models import Leave
    from leave_engine.policy.models import EmployeePolicyOverride


class Employee(Base, TimestampMixin):
    """Employee as seen by the leave engine."""

    __tablename__ = "employees"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    hired_at: Mapped[date] = mapped_column(sa.Date, nullable=False)
    # Admin-entered carryover; when set it replaces the computed value
    manual_carry_over_days: Mapped[Optional[Decimal]] = mapped_column(
        sa.Numeric(5, 1)
    )
    is_active: Mapped[bool] = mapped_column(
        sa.Boolean, default=True, server_default=sa.text("TRUE"),
    )

    # Relationships
    leaves: Mapped[list[Leave]] = relationship(back_populates="employee")
    policy_override: Mapped[Optional[EmployeePolicyOverride]] = relationship(
        back_populates="employee", uselist=False
    )

    def __repr__(self) -> str:
        return f"<Employee {self.name} hired {self.hired_at}>"
