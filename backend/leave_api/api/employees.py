# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status

from leave_api.api.deps import AdminDep, AuthDep, validate_company_scope
from leave_api.db import SessionDep
from leave_api.exceptions import AppError
from leave_api.models.enums import UserRole
from leave_api.schemas.employee import BalanceResponse, CreateEmployeePayload, EmployeeListResponse, EmployeeResponse
from leave_api.services import balance as balance_service
from leave_api.services import employee as employee_service

employees_router = APIRouter(
    prefix="/companies/{company_id}/employees",
    tags=["employees"],
    dependencies=[Depends(validate_company_scope)],
)


@employees_router.post("", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
async def create_employee(
    payload: CreateEmployeePayload,
    session: SessionDep,
    auth: AdminDep,
) -> EmployeeResponse:
    """Register an employee (admin only)."""
    return await employee_service.create_employee(session, auth, payload)


@employees_router.get("", response_model=EmployeeListResponse)
async def list_employees(
    session: SessionDep,
    auth: AdminDep,
    role: UserRole | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> EmployeeListResponse:
    """List the company's employees (admin only)."""
    return await employee_service.list_employees(session, auth.company_id, role=role, offset=offset, limit=limit)


@employees_router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> EmployeeResponse:
    """Get a single employee."""
    employee = await employee_service.get_employee(session, auth.company_id, employee_id)
    return employee_service.build_employee_response(employee)


@employees_router.get("/{employee_id}/balance", response_model=BalanceResponse)
async def get_balance(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> BalanceResponse:
    """Get an employee's leave balance. Employees may only read their own."""
    if not auth.is_admin and employee_id != auth.user_id:
        raise AppError("Not authorized to view this balance", status_code=status.HTTP_403_FORBIDDEN)
    return await balance_service.get_balance(session, auth.company_id, employee_id)
