# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel


class DashboardSummaryResponse(BaseModel):
    """Company-wide leave counts for one calendar year."""

    company_id: uuid.UUID
    year: int
    total_employees: int
    total_leaves: int
    pending_leaves: int
    approved_leaves: int
    rejected_leaves: int
    cancelled_leaves: int


class MonthlyTrend(BaseModel):
    month: int
    total_leaves: int
    approved: int
    pending: int
    rejected: int
    cancelled: int


class MonthlyTrendsResponse(BaseModel):
    company_id: uuid.UUID
    year: int
    months: list[MonthlyTrend]


class AuditLogEntryResponse(BaseModel):
    """Response schema for a single audit log entry."""

    id: uuid.UUID
    company_id: uuid.UUID
    actor_id: uuid.UUID
    entity_type: str
    entity_id: uuid.UUID
    action: str
    before_json: dict[str, Any] | None
    after_json: dict[str, Any] | None
    created_at: datetime


class AuditLogListResponse(BaseModel):
    """Paginated list of audit log entries."""

    items: list[AuditLogEntryResponse]
    total: int
