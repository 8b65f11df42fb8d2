# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from leave_api.models.base import TimestampMixin, UUIDBase
from leave_api.models.enums import NotificationKind


class Notification(UUIDBase, TimestampMixin, table=True):
    """Durable inbox entry created as a side effect of a leave transition."""

    __tablename__ = "notification"
    __table_args__ = (sa.Index("ix_notification_user_read", "user_id", "is_read"),)

    user_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("employee.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    company_id: uuid.UUID = Field(index=True)
    leave_id: uuid.UUID | None = Field(
        default=None,
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_request.id", ondelete="SET NULL"), nullable=True),
    )
    title: str = Field(max_length=255)
    message: str
    kind: str = Field(default=NotificationKind.INFO, max_length=20)
    is_read: bool = Field(default=False, sa_column_kwargs={"server_default": sa.false()})
