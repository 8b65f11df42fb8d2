"""Notification dispatch and inbox.

Dispatch has two phases. Notification rows are staged in the transition's
unit of work and commit with it; they are the record of truth. After the
commit, each one is pushed to the recipient's real-time channel on a
best-effort basis. A failed push is logged and dropped, and the recipient
still finds the notification in their inbox.
"""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from sqlalchemy import func, select
from sqlmodel import col

from leave_api.db import unit_of_work
from leave_api.exceptions import NotificationNotFound
from leave_api.models.enums import NotificationKind
from leave_api.models.notification import Notification
from leave_api.schemas.notification import NotificationListResponse, NotificationResponse, PushPayload

if TYPE_CHECKING:
    from collections.abc import Iterable

    from redis.asyncio import Redis
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_api.models.employee import Employee
    from leave_api.models.leave import LeaveRequest
    from leave_api.schemas.auth import AuthContext

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "notifications"


# ---------------------------------------------------------------------------
# Push channels
# ---------------------------------------------------------------------------


def recipient_channel(user_id: uuid.UUID) -> str:
    return f"{CHANNEL_PREFIX}:{user_id}"


@runtime_checkable
class PushChannel(Protocol):
    """Fire-and-forget real-time delivery addressed by recipient."""

    async def notify(self, recipient_id: uuid.UUID, payload: dict[str, Any]) -> None:
        """Deliver ``payload`` to whoever is listening for ``recipient_id``."""
        ...


class InMemoryPushChannel:
    """Records pushes in memory. ``fail`` simulates a broken transport."""

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[tuple[uuid.UUID, dict[str, Any]]] = []

    async def notify(self, recipient_id: uuid.UUID, payload: dict[str, Any]) -> None:
        if self.fail:
            msg = "push transport unavailable"
            raise ConnectionError(msg)
        self.sent.append((recipient_id, payload))

    def sent_to(self, recipient_id: uuid.UUID) -> list[dict[str, Any]]:
        return [payload for recipient, payload in self.sent if recipient == recipient_id]


class RedisPushChannel:
    """Publishes to a per-recipient Redis pub/sub channel."""

    def __init__(self, client: Redis) -> None:
        self._client = client

    async def notify(self, recipient_id: uuid.UUID, payload: dict[str, Any]) -> None:
        body = PushPayload.model_validate(payload).model_dump_json()
        await self._client.publish(recipient_channel(recipient_id), body)


_push_channel: PushChannel = InMemoryPushChannel()


def get_push_channel() -> PushChannel:
    return _push_channel


def set_push_channel(channel: PushChannel) -> None:
    """Override the push channel (for testing or production wiring)."""
    global _push_channel
    _push_channel = channel


# ---------------------------------------------------------------------------
# Phase one: durable records
# ---------------------------------------------------------------------------


def stage_notification(
    session: AsyncSession,
    *,
    recipient_id: uuid.UUID,
    company_id: uuid.UUID,
    title: str,
    message: str,
    kind: NotificationKind,
    created_at: datetime,
    leave_id: uuid.UUID | None = None,
) -> Notification:
    """Add a notification to the caller's unit of work."""
    notification = Notification(
        user_id=recipient_id,
        company_id=company_id,
        leave_id=leave_id,
        title=title,
        message=message,
        kind=kind.value,
        created_at=created_at,
    )
    session.add(notification)
    return notification


def stage_application_notices(
    session: AsyncSession,
    applicant: Employee,
    leave: LeaveRequest,
    admins: Iterable[Employee],
    *,
    created_at: datetime,
) -> list[Notification]:
    """One notice per administrator of the applicant's company."""
    return [
        stage_notification(
            session,
            recipient_id=admin.id,
            company_id=leave.company_id,
            leave_id=leave.id,
            title="New Leave Application",
            message=f"{applicant.full_name} applied for {leave.leave_days} day(s) of leave "
            f"from {leave.start_date.isoformat()} to {leave.end_date.isoformat()}.",
            kind=NotificationKind.INFO,
            created_at=created_at,
        )
        for admin in admins
    ]


_DECISION_NOTICES: dict[str, tuple[str, str, NotificationKind]] = {
    "APPROVED": ("Leave Approved", "Your leave has been approved.", NotificationKind.SUCCESS),
    "REJECTED": ("Leave Rejected", "Your leave has been rejected.", NotificationKind.ERROR),
    "CANCELLED": ("Leave Cancelled", "Your leave has been cancelled.", NotificationKind.WARNING),
}


def stage_decision_notice(session: AsyncSession, leave: LeaveRequest, *, created_at: datetime) -> Notification:
    """Tell the requester their leave reached ``leave.status``."""
    title, message, kind = _DECISION_NOTICES[leave.status]
    return stage_notification(
        session,
        recipient_id=leave.user_id,
        company_id=leave.company_id,
        leave_id=leave.id,
        title=title,
        message=message,
        kind=kind,
        created_at=created_at,
    )


# ---------------------------------------------------------------------------
# Phase two: best-effort push
# ---------------------------------------------------------------------------


async def push_notifications(channel: PushChannel, notifications: Iterable[Notification]) -> int:
    """Push committed notifications. Returns how many were delivered."""
    delivered = 0
    for notification in notifications:
        payload = PushPayload(
            notification_id=notification.id,
            title=notification.title,
            message=notification.message,
            type=NotificationKind(notification.kind),
        ).model_dump(mode="json")
        try:
            await channel.notify(notification.user_id, payload)
        except Exception:
            logger.exception(
                "Push failed for notification %s to user %s; inbox copy remains",
                notification.id,
                notification.user_id,
            )
            continue
        delivered += 1
    return delivered


# ---------------------------------------------------------------------------
# Inbox
# ---------------------------------------------------------------------------


def _build_notification_response(notification: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=notification.id,
        user_id=notification.user_id,
        leave_id=notification.leave_id,
        title=notification.title,
        message=notification.message,
        kind=NotificationKind(notification.kind),
        is_read=notification.is_read,
        created_at=notification.created_at,
    )


async def list_notifications(
    session: AsyncSession,
    auth: AuthContext,
    *,
    unread_only: bool = False,
    offset: int = 0,
    limit: int = 50,
) -> NotificationListResponse:
    """The caller's notifications, newest first."""
    filters = [
        col(Notification.user_id) == auth.user_id,
        col(Notification.company_id) == auth.company_id,
    ]
    unread_filters = [*filters, col(Notification.is_read).is_(False)]
    if unread_only:
        filters = unread_filters

    total = (await session.execute(select(func.count()).select_from(Notification).where(*filters))).scalar_one()
    unread = (
        await session.execute(select(func.count()).select_from(Notification).where(*unread_filters))
    ).scalar_one()

    result = await session.execute(
        select(Notification)
        .where(*filters)
        .order_by(col(Notification.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    return NotificationListResponse(
        items=[_build_notification_response(n) for n in result.scalars().all()],
        total=total,
        unread=unread,
    )


async def mark_as_read(
    session: AsyncSession,
    auth: AuthContext,
    notification_id: uuid.UUID,
) -> NotificationResponse:
    """Mark one of the caller's notifications as read. Idempotent."""
    async with unit_of_work(session):
        result = await session.execute(
            select(Notification).where(
                col(Notification.id) == notification_id,
                col(Notification.user_id) == auth.user_id,
            )
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            raise NotificationNotFound()
        notification.is_read = True
    return _build_notification_response(notification)
