# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leave_api.db import unit_of_work
from leave_api.exceptions import AppError, EmployeeNotFound
from leave_api.models.employee import Employee
from leave_api.models.enums import AuditAction, AuditEntityType, UserRole
from leave_api.schemas.employee import EmployeeListResponse, EmployeeResponse
from leave_api.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_api.schemas.auth import AuthContext
    from leave_api.schemas.employee import CreateEmployeePayload

logger = logging.getLogger(__name__)


def build_employee_response(employee: Employee) -> EmployeeResponse:
    """Map an employee model to its response schema."""
    return EmployeeResponse(
        id=employee.id,
        company_id=employee.company_id,
        full_name=employee.full_name,
        email=employee.email,
        role=UserRole(employee.role),
        department=employee.department,
        created_at=employee.created_at,
    )


async def get_employee(
    session: AsyncSession,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> Employee:
    """Fetch an employee scoped to company. Raises 404 if not found.

    ``for_update`` takes a row lock where the backend supports it and
    always refreshes the identity map so a retried attempt sees the latest
    committed balance.
    """
    query = select(Employee).where(
        col(Employee.id) == employee_id,
        col(Employee.company_id) == company_id,
    )
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    employee = result.scalar_one_or_none()
    if employee is None:
        raise EmployeeNotFound()
    return employee


async def list_employees(
    session: AsyncSession,
    company_id: uuid.UUID,
    *,
    role: UserRole | None = None,
    offset: int = 0,
    limit: int = 50,
) -> EmployeeListResponse:
    """A tenant's employees ordered by name."""
    filters = [col(Employee.company_id) == company_id]
    if role is not None:
        filters.append(col(Employee.role) == role.value)

    total = (await session.execute(select(func.count()).select_from(Employee).where(*filters))).scalar_one()
    result = await session.execute(
        select(Employee)
        .where(*filters)
        .order_by(col(Employee.full_name), col(Employee.email))
        .offset(offset)
        .limit(limit)
    )
    return EmployeeListResponse(
        items=[build_employee_response(e) for e in result.scalars().all()],
        total=total,
    )


async def list_admins(session: AsyncSession, company_id: uuid.UUID) -> list[Employee]:
    """All administrators of a tenant, oldest first."""
    result = await session.execute(
        select(Employee)
        .where(
            col(Employee.company_id) == company_id,
            col(Employee.role) == UserRole.ADMIN.value,
        )
        .order_by(col(Employee.created_at))
    )
    return list(result.scalars().all())


async def create_employee(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateEmployeePayload,
) -> EmployeeResponse:
    """Register an employee under the caller's company with a fresh allotment."""
    employee = Employee(
        company_id=auth.company_id,
        full_name=payload.full_name,
        email=payload.email.lower(),
        role=payload.role.value,
        department=payload.department,
        total_leave_balance=payload.total_leave_balance,
    )
    try:
        async with unit_of_work(session):
            session.add(employee)
            await session.flush()
            write_audit_log(
                session,
                company_id=auth.company_id,
                actor_id=auth.user_id,
                entity_type=AuditEntityType.EMPLOYEE,
                entity_id=employee.id,
                action=AuditAction.CREATE,
                after_json=model_to_audit_dict(employee),
            )
    except IntegrityError:
        raise AppError("An employee with this email already exists", status_code=409) from None

    logger.info("Employee %s created in company %s", employee.id, auth.company_id)
    return build_employee_response(employee)
