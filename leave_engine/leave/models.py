"""Leave ORM model: a single paid-leave record for an employee."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leave_engine.common.constants import LeaveStatus
from leave_engine.common.models import TimestampMixin
from leave_engine.database import Base

if TYPE_CHECKING:
    from leave_engine.core_hr.models import Employee


class Leave(Base, TimestampMixin):
    __tablename__ = "leaves"
    __table_args__ = (
        sa.Index("ix_leaves_employee_start", "employee_id", "start_date"),
        sa.Index("ix_leaves_status", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("employees.id"), nullable=False
    )
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    days: Mapped[Decimal] = mapped_column(sa.Numeric(5, 1), nullable=False)
    status: Mapped[LeaveStatus] = mapped_column(
        sa.Enum(LeaveStatus, name="leave_status"),
        default=LeaveStatus.pending,
        nullable=False,
    )
    # Forced (company shutdown) versus voluntary leave, for reporting
    is_company_shutdown: Mapped[bool] = mapped_column(
        sa.Boolean, default=False, nullable=False
    )
    note: Mapped[Optional[str]] = mapped_column(sa.Text)

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="leaves")

    def __repr__(self) -> str:
        return f"<Leave {self.start_date} {self.days}d {self.status.value}>"
