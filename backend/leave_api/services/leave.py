# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update
from sqlalchemy.orm.attributes import set_committed_value
from sqlmodel import col

from leave_api.exceptions import ConcurrencyConflict, LeaveNotFound
from leave_api.models.enums import LeaveStatus, LeaveType
from leave_api.models.leave import LeaveRequest
from leave_api.schemas.leave import LeaveListResponse, LeaveResponse

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_api.models.employee import Employee
    from leave_api.schemas.leave import ApplyLeavePayload

logger = logging.getLogger(__name__)


def build_leave_response(leave: LeaveRequest) -> LeaveResponse:
    """Map a leave model to its response schema."""
    return LeaveResponse(
        id=leave.id,
        company_id=leave.company_id,
        user_id=leave.user_id,
        start_date=leave.start_date,
        end_date=leave.end_date,
        leave_days=leave.leave_days,
        reason=leave.reason,
        leave_type=LeaveType(leave.leave_type),
        status=LeaveStatus(leave.status),
        decided_at=leave.decided_at,
        decided_by=leave.decided_by,
        created_at=leave.created_at,
    )


def create_leave(
    session: AsyncSession,
    employee: Employee,
    payload: ApplyLeavePayload,
    *,
    created_at: datetime,
) -> LeaveRequest:
    """Stage a new PENDING leave for ``employee``.

    The tenant is copied from the owner, never taken from the caller.
    """
    leave = LeaveRequest(
        company_id=employee.company_id,
        user_id=employee.id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        reason=payload.reason,
        leave_type=payload.leave_type.value,
        status=LeaveStatus.PENDING.value,
        created_at=created_at,
    )
    session.add(leave)
    return leave


async def get_leave_in_company(
    session: AsyncSession,
    company_id: uuid.UUID,
    leave_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> LeaveRequest:
    """Fetch a leave by ID scoped to company. Raises 404 if not found.

    A leave that exists under another company is reported exactly like a
    missing one.
    """
    query = select(LeaveRequest).where(col(LeaveRequest.id) == leave_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    leave = result.scalar_one_or_none()
    if leave is None:
        raise LeaveNotFound()
    if leave.company_id != company_id:
        logger.warning("Tenant mismatch: company %s requested leave %s of another company", company_id, leave_id)
        raise LeaveNotFound()
    return leave


async def get_leave_for_owner(
    session: AsyncSession,
    company_id: uuid.UUID,
    user_id: uuid.UUID,
    leave_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> LeaveRequest:
    """Fetch a leave the caller owns. Someone else's leave is a 404."""
    leave = await get_leave_in_company(session, company_id, leave_id, for_update=for_update)
    if leave.user_id != user_id:
        raise LeaveNotFound()
    return leave


async def transition_status(
    session: AsyncSession,
    leave: LeaveRequest,
    expected: LeaveStatus,
    new_status: LeaveStatus,
    *,
    actor_id: uuid.UUID,
    decided_at: datetime,
) -> None:
    """Move ``leave`` from ``expected`` to ``new_status`` with a compare-and-set.

    Zero affected rows means a concurrent transaction already moved it.
    """
    result = await session.execute(
        update(LeaveRequest)
        .where(
            col(LeaveRequest.id) == leave.id,
            col(LeaveRequest.status) == expected.value,
        )
        .values(status=new_status.value, decided_at=decided_at, decided_by=actor_id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:  # type: ignore[attr-defined]
        logger.warning("Status compare-and-set missed for leave %s (%s -> %s)", leave.id, expected, new_status)
        raise ConcurrencyConflict()

    set_committed_value(leave, "status", new_status.value)
    set_committed_value(leave, "decided_at", decided_at)
    set_committed_value(leave, "decided_by", actor_id)


async def get_leave(
    session: AsyncSession,
    company_id: uuid.UUID,
    leave_id: uuid.UUID,
) -> LeaveResponse:
    """Get a single leave by ID."""
    leave = await get_leave_in_company(session, company_id, leave_id)
    return build_leave_response(leave)


async def list_leaves(
    session: AsyncSession,
    company_id: uuid.UUID,
    status_filter: LeaveStatus | None = None,
    user_id: uuid.UUID | None = None,
    leave_type: LeaveType | None = None,
    offset: int = 0,
    limit: int = 50,
) -> LeaveListResponse:
    """List leaves with optional filters, ordered by created_at DESC."""
    base_filters = [col(LeaveRequest.company_id) == company_id]

    if status_filter is not None:
        base_filters.append(col(LeaveRequest.status) == status_filter.value)
    if user_id is not None:
        base_filters.append(col(LeaveRequest.user_id) == user_id)
    if leave_type is not None:
        base_filters.append(col(LeaveRequest.leave_type) == leave_type.value)

    count_result = await session.execute(select(func.count()).select_from(LeaveRequest).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveRequest)
        .where(*base_filters)
        .order_by(col(LeaveRequest.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    leaves = list(result.scalars().all())

    return LeaveListResponse(
        items=[build_leave_response(leave) for leave in leaves],
        total=total,
    )
