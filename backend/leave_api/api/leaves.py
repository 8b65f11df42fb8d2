# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status

from leave_api.api.deps import AdminDep, AuthDep, LifecycleDep, validate_company_scope
from leave_api.db import SessionDep
from leave_api.models.enums import LeaveStatus, LeaveType
from leave_api.schemas.leave import ApplyLeavePayload, LeaveListResponse, LeaveResponse
from leave_api.services import leave as leave_service
from leave_api.services import lifecycle

leaves_router = APIRouter(
    prefix="/companies/{company_id}/leaves",
    tags=["leaves"],
    dependencies=[Depends(validate_company_scope)],
)


@leaves_router.post("", response_model=LeaveResponse, status_code=status.HTTP_201_CREATED)
async def apply_leave(
    payload: ApplyLeavePayload,
    session: SessionDep,
    auth: AuthDep,
    ctx: LifecycleDep,
) -> LeaveResponse:
    """Apply for leave as the authenticated employee."""
    return await lifecycle.apply_leave(session, auth, payload, ctx)


@leaves_router.get("", response_model=LeaveListResponse)
async def list_leaves(
    session: SessionDep,
    auth: AuthDep,
    status_filter: LeaveStatus | None = Query(default=None, alias="status"),
    user_id: uuid.UUID | None = Query(default=None),
    leave_type: LeaveType | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> LeaveListResponse:
    """List leaves. Employees only ever see their own."""
    if not auth.is_admin:
        user_id = auth.user_id
    return await leave_service.list_leaves(
        session, auth.company_id, status_filter, user_id, leave_type, offset, limit
    )


@leaves_router.get("/{leave_id}", response_model=LeaveResponse)
async def get_leave(
    leave_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveResponse:
    """Get a single leave."""
    if auth.is_admin:
        return await leave_service.get_leave(session, auth.company_id, leave_id)
    leave = await leave_service.get_leave_for_owner(session, auth.company_id, auth.user_id, leave_id)
    return leave_service.build_leave_response(leave)


@leaves_router.post("/{leave_id}/approve", response_model=LeaveResponse)
async def approve_leave(
    leave_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
    ctx: LifecycleDep,
) -> LeaveResponse:
    """Approve a pending leave (admin only)."""
    return await lifecycle.approve_leave(session, auth, leave_id, ctx)


@leaves_router.post("/{leave_id}/reject", response_model=LeaveResponse)
async def reject_leave(
    leave_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
    ctx: LifecycleDep,
) -> LeaveResponse:
    """Reject a pending leave (admin only)."""
    return await lifecycle.reject_leave(session, auth, leave_id, ctx)


@leaves_router.post("/{leave_id}/cancel", response_model=LeaveResponse)
async def cancel_leave(
    leave_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    ctx: LifecycleDep,
) -> LeaveResponse:
    """Cancel one of your approved leaves before it starts."""
    return await lifecycle.cancel_leave(session, auth, leave_id, ctx)
