from __future__ import annotations

import enum


class UserRole(enum.StrEnum):
    """Role carried by the authenticated principal."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class LeaveStatus(enum.StrEnum):
    """State machine for leave requests."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class LeaveType(enum.StrEnum):
    """Informational category of a leave. Not used in balance math."""

    ANNUAL = "ANNUAL"
    SICK = "SICK"
    CASUAL = "CASUAL"
    UNPAID = "UNPAID"
    OTHER = "OTHER"


class NotificationKind(enum.StrEnum):
    """Presentation hint sent with real-time pushes."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    LEAVE = "LEAVE"
    EMPLOYEE = "EMPLOYEE"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    APPLY = "APPLY"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    CANCEL = "CANCEL"
