# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from leave_api.models.base import TimestampMixin, UUIDBase
from leave_api.models.enums import LeaveStatus, LeaveType


class LeaveRequest(UUIDBase, TimestampMixin, table=True):
    """An employee's leave request with approval workflow state."""

    __tablename__ = "leave_request"
    __table_args__ = (
        sa.Index("ix_leave_company_status", "company_id", "status"),
        sa.Index("ix_leave_company_start", "company_id", "start_date"),
        sa.CheckConstraint("end_date >= start_date", name="ck_leave_date_range"),
    )

    company_id: uuid.UUID = Field(index=True)
    user_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("employee.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    start_date: date
    end_date: date
    reason: str = Field(default="")
    leave_type: str = Field(default=LeaveType.ANNUAL, max_length=50, sa_column_kwargs={"server_default": "ANNUAL"})
    status: str = Field(
        default=LeaveStatus.PENDING, max_length=50, index=True, sa_column_kwargs={"server_default": "PENDING"}
    )
    decided_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    decided_by: uuid.UUID | None = None

    @property
    def leave_days(self) -> int:
        """Inclusive day count of the requested range."""
        return (self.end_date - self.start_date).days + 1
