"""Balance ledger: the only code path that writes ``Employee.used_leave``.

Every write is a compare-and-set against the employee's ``version`` read in
the current unit of work. A miss means another transaction changed the
balance first and surfaces as ``ConcurrencyConflict``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import update
from sqlalchemy.orm.attributes import set_committed_value
from sqlmodel import col

from leave_api.exceptions import ConcurrencyConflict, InsufficientBalance, LedgerInvariantError
from leave_api.models.employee import Employee
from leave_api.schemas.employee import BalanceResponse
from leave_api.services.employee import get_employee

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


def remaining(employee: Employee) -> int:
    """Days the employee can still take."""
    return employee.total_leave_balance - employee.used_leave


def ensure_available(employee: Employee, days: int) -> None:
    """Raise ``InsufficientBalance`` unless ``days`` fit in the remaining balance."""
    available = remaining(employee)
    if available < days:
        raise InsufficientBalance(requested_days=days, remaining_days=available)


async def _write_used_leave(session: AsyncSession, employee: Employee, new_used: int) -> None:
    if new_used < 0 or new_used > employee.total_leave_balance:
        raise LedgerInvariantError(
            f"used_leave would become {new_used} for employee {employee.id} "
            f"(total {employee.total_leave_balance})"
        )

    result = await session.execute(
        update(Employee)
        .where(
            col(Employee.id) == employee.id,
            col(Employee.version) == employee.version,
        )
        .values(used_leave=new_used, version=employee.version + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:  # type: ignore[attr-defined]
        logger.warning("Balance compare-and-set missed for employee %s at version %d", employee.id, employee.version)
        raise ConcurrencyConflict()

    set_committed_value(employee, "used_leave", new_used)
    set_committed_value(employee, "version", employee.version + 1)


async def reserve(session: AsyncSession, employee: Employee, days: int) -> None:
    """Debit ``days`` from the employee's balance.

    Must run in the same unit of work as the status change that causes it.
    """
    ensure_available(employee, days)
    await _write_used_leave(session, employee, employee.used_leave + days)


async def release(session: AsyncSession, employee: Employee, days: int) -> None:
    """Credit ``days`` back after an approved leave is cancelled."""
    if employee.used_leave - days < 0:
        raise LedgerInvariantError(
            f"Releasing {days} day(s) would drive used_leave below zero for employee {employee.id}"
        )
    await _write_used_leave(session, employee, employee.used_leave - days)


async def get_balance(
    session: AsyncSession,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
) -> BalanceResponse:
    """Current allotment for one employee."""
    employee = await get_employee(session, company_id, employee_id)
    return BalanceResponse(
        employee_id=employee.id,
        total_leave_balance=employee.total_leave_balance,
        used_leave=employee.used_leave,
        remaining_leave=remaining(employee),
    )
