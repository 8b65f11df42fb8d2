# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query

from leave_api.api.deps import AuthDep
from leave_api.db import SessionDep
from leave_api.schemas.notification import NotificationListResponse, NotificationResponse
from leave_api.services import notification as notification_service

notifications_router = APIRouter(prefix="/notifications", tags=["notifications"])


@notifications_router.get("", response_model=NotificationListResponse)
async def list_notifications(
    session: SessionDep,
    auth: AuthDep,
    unread_only: bool = Query(default=False),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> NotificationListResponse:
    """The caller's notifications, newest first."""
    return await notification_service.list_notifications(
        session, auth, unread_only=unread_only, offset=offset, limit=limit
    )


@notifications_router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_as_read(
    notification_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> NotificationResponse:
    """Mark one of the caller's notifications as read."""
    return await notification_service.mark_as_read(session, auth, notification_id)
