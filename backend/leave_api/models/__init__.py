from sqlmodel import SQLModel

from leave_api.models.audit import AuditLog
from leave_api.models.base import TimestampMixin, UUIDBase
from leave_api.models.employee import Employee
from leave_api.models.enums import (
    AuditAction,
    AuditEntityType,
    LeaveStatus,
    LeaveType,
    NotificationKind,
    UserRole,
)
from leave_api.models.leave import LeaveRequest
from leave_api.models.notification import Notification

__all__ = [
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "Employee",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveType",
    "Notification",
    "NotificationKind",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
    "UserRole",
]
