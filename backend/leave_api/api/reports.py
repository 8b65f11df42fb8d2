# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query

from leave_api.api.deps import AdminDep, LifecycleDep, validate_company_scope
from leave_api.db import SessionDep
from leave_api.models.enums import AuditAction, AuditEntityType
from leave_api.schemas.report import AuditLogListResponse, DashboardSummaryResponse, MonthlyTrendsResponse
from leave_api.services import audit as audit_service
from leave_api.services import report as report_service

reports_router = APIRouter(
    prefix="/companies/{company_id}",
    tags=["reports"],
    dependencies=[Depends(validate_company_scope)],
)


@reports_router.get("/reports/dashboard", response_model=DashboardSummaryResponse)
async def get_dashboard_summary(
    session: SessionDep,
    auth: AdminDep,
    ctx: LifecycleDep,
    year: int | None = Query(default=None, ge=1970, le=9999),
) -> DashboardSummaryResponse:
    """Leave counts by status for a year, defaulting to the current one (admin only)."""
    return await report_service.get_dashboard_summary(
        session, ctx.cache, auth.company_id, year or ctx.clock.now().year
    )


@reports_router.get("/reports/monthly-trends", response_model=MonthlyTrendsResponse)
async def get_monthly_trends(
    session: SessionDep,
    auth: AdminDep,
    ctx: LifecycleDep,
    year: int | None = Query(default=None, ge=1970, le=9999),
) -> MonthlyTrendsResponse:
    """Per-month leave counts for a year (admin only)."""
    return await report_service.get_monthly_trends(
        session, ctx.cache, auth.company_id, year or ctx.clock.now().year
    )


@reports_router.get("/audit-log", response_model=AuditLogListResponse)
async def query_audit_log(
    session: SessionDep,
    auth: AdminDep,
    entity_type: AuditEntityType | None = Query(default=None),
    entity_id: uuid.UUID | None = Query(default=None),
    action: AuditAction | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> AuditLogListResponse:
    """Query the audit trail with optional filters (admin only)."""
    return await audit_service.query_audit_log(
        session,
        auth.company_id,
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        offset=offset,
        limit=limit,
    )
