# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from leave_api.models.enums import UserRole


class CreateEmployeePayload(BaseModel):
    """Request body for registering an employee under a company."""

    full_name: str = Field(min_length=1, max_length=150)
    email: str = Field(min_length=3, max_length=150)
    role: UserRole = UserRole.EMPLOYEE
    department: str = Field(default="General", max_length=100)
    total_leave_balance: int = Field(default=20, ge=0)


class EmployeeResponse(BaseModel):
    id: uuid.UUID
    company_id: uuid.UUID
    full_name: str
    email: str
    role: UserRole
    department: str
    created_at: datetime


class BalanceResponse(BaseModel):
    """Current leave allotment for one employee."""

    employee_id: uuid.UUID
    total_leave_balance: int
    used_leave: int
    remaining_leave: int


class EmployeeListResponse(BaseModel):
    """Paginated list of a company's employees."""

    items: list[EmployeeResponse]
    total: int
