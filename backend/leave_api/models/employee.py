# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from leave_api.models.base import TimestampMixin, UUIDBase
from leave_api.models.enums import UserRole


class Employee(UUIDBase, TimestampMixin, table=True):
    """A company member and their annual leave allotment.

    ``used_leave`` is written only through the balance ledger, and
    ``version`` is bumped on every such write so concurrent writers can
    detect each other.
    """

    __tablename__ = "employee"
    __table_args__ = (
        sa.UniqueConstraint("company_id", "email", name="uq_employee_company_email"),
        sa.Index("ix_employee_company_role", "company_id", "role"),
        sa.CheckConstraint("used_leave >= 0", name="ck_employee_used_leave_non_negative"),
        sa.CheckConstraint("used_leave <= total_leave_balance", name="ck_employee_used_leave_within_total"),
    )

    company_id: uuid.UUID = Field(index=True)
    full_name: str = Field(max_length=150)
    email: str = Field(max_length=150)
    role: str = Field(default=UserRole.EMPLOYEE, max_length=50, sa_column_kwargs={"server_default": "employee"})
    department: str = Field(default="General", max_length=100, sa_column_kwargs={"server_default": "General"})
    total_leave_balance: int = Field(default=20, sa_column_kwargs={"server_default": "20"})
    used_leave: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})

    @property
    def remaining_leave(self) -> int:
        return self.total_leave_balance - self.used_leave
