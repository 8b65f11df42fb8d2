# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel

from leave_api.models.enums import NotificationKind


class NotificationResponse(BaseModel):
    """A single inbox entry."""

    id: uuid.UUID
    user_id: uuid.UUID
    leave_id: uuid.UUID | None
    title: str
    message: str
    kind: NotificationKind
    is_read: bool
    created_at: datetime


class NotificationListResponse(BaseModel):
    items: list[NotificationResponse]
    total: int
    unread: int


class PushPayload(BaseModel):
    """Body published to a recipient's real-time channel."""

    notification_id: uuid.UUID
    title: str
    message: str
    type: NotificationKind
