# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field

from leave_api.models.enums import LeaveStatus, LeaveType

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class ApplyLeavePayload(BaseModel):
    """Request body for applying for leave.

    The date range is validated by the lifecycle so that an inverted range
    surfaces as ``InvalidDateRange`` rather than a generic schema error.
    """

    start_date: date
    end_date: date
    reason: str = Field(default="", max_length=2000)
    leave_type: LeaveType = LeaveType.ANNUAL


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveResponse(BaseModel):
    """Response schema for a single leave request."""

    id: uuid.UUID
    company_id: uuid.UUID
    user_id: uuid.UUID
    start_date: date
    end_date: date
    leave_days: int
    reason: str
    leave_type: LeaveType
    status: LeaveStatus
    decided_at: datetime | None
    decided_by: uuid.UUID | None
    created_at: datetime


class LeaveListResponse(BaseModel):
    """Paginated list of leave requests."""

    items: list[LeaveResponse]
    total: int
