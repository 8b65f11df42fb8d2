from __future__ import annotations

import uuid
from datetime import date

from leave_api.models import AuditLog, Employee, LeaveRequest, Notification, SQLModel
from leave_api.models.enums import LeaveStatus, LeaveType, NotificationKind, UserRole

EXPECTED_TABLES = {
    "audit_log",
    "employee",
    "leave_request",
    "notification",
}


def _leave(start: date, end: date) -> LeaveRequest:
    return LeaveRequest(
        company_id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        start_date=start,
        end_date=end,
    )


def test_all_tables_registered() -> None:
    table_names = set(SQLModel.metadata.tables.keys())
    assert EXPECTED_TABLES.issubset(table_names)


def test_employee_defaults() -> None:
    employee = Employee(company_id=uuid.uuid4(), full_name="Jane Doe", email="jane@example.com")
    assert employee.role == UserRole.EMPLOYEE
    assert employee.department == "General"
    assert employee.total_leave_balance == 20
    assert employee.used_leave == 0
    assert employee.version == 1
    assert employee.remaining_leave == 20


def test_employee_table_enforces_balance_bounds() -> None:
    constraints = {c.name for c in SQLModel.metadata.tables["employee"].constraints}
    assert "ck_employee_used_leave_non_negative" in constraints
    assert "ck_employee_used_leave_within_total" in constraints


def test_leave_request_defaults() -> None:
    leave = _leave(date(2025, 3, 10), date(2025, 3, 14))
    assert leave.status == LeaveStatus.PENDING
    assert leave.leave_type == LeaveType.ANNUAL
    assert leave.reason == ""
    assert leave.decided_at is None
    assert leave.decided_by is None
    assert leave.id is not None
    assert leave.created_at is not None


def test_leave_days_is_inclusive() -> None:
    assert _leave(date(2025, 3, 10), date(2025, 3, 14)).leave_days == 5


def test_one_day_leave_counts_one_day() -> None:
    assert _leave(date(2025, 3, 10), date(2025, 3, 10)).leave_days == 1


def test_leave_days_spans_month_boundary() -> None:
    assert _leave(date(2025, 2, 27), date(2025, 3, 2)).leave_days == 4


def test_notification_defaults() -> None:
    notification = Notification(
        user_id=uuid.uuid4(),
        company_id=uuid.uuid4(),
        title="Leave Approved",
        message="Your leave has been approved.",
    )
    assert notification.is_read is False
    assert notification.kind == NotificationKind.INFO
    assert notification.leave_id is None


def test_audit_log_instantiation() -> None:
    log = AuditLog(
        company_id=uuid.uuid4(),
        actor_id=uuid.uuid4(),
        entity_type="LEAVE",
        entity_id=uuid.uuid4(),
        action="APPLY",
    )
    assert log.before_json is None
    assert log.after_json is None
