# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from leave_api.models.base import UUIDBase, utc_now


class AuditLog(UUIDBase, table=True):
    """Append-only trail of leave transitions and employee registrations.

    Rows are written in the same unit of work as the change they describe,
    so a rolled-back transition leaves no entry behind. ``before_json`` and
    ``after_json`` hold JSON-safe snapshots including the derived
    ``leave_days``.
    """

    __tablename__ = "audit_log"
    __table_args__ = (sa.Index("ix_audit_company_entity", "company_id", "entity_type", "entity_id"),)

    company_id: uuid.UUID
    actor_id: uuid.UUID
    entity_type: str = Field(max_length=50)
    entity_id: uuid.UUID
    action: str = Field(max_length=50, index=True)
    before_json: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
    after_json: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
    created_at: datetime = Field(
        default_factory=utc_now,
        index=True,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
