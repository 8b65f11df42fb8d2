"""Leave lifecycle: apply, approve, reject and cancel.

Each transition runs as:

1. Validate inputs that need no state.
2. Hold the owning employee's lock and open a unit of work.
3. Re-read the leave and employee rows (locked where supported), check
   preconditions, write status and balance with compare-and-set updates,
   stage notifications and an audit entry.
4. Commit. Any failure rolls back everything from step 3.
5. Apply the post-commit effects: evict report caches, push notifications.

A compare-and-set miss raises ``ConcurrencyConflict``; the whole attempt is
retried from a fresh read up to ``max_attempts`` times.
"""

# ruff: noqa: TC003
from __future__ import annotations

import asyncio
import logging
import uuid
import weakref
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

from leave_api.config import get_settings
from leave_api.db import unit_of_work
from leave_api.exceptions import AlreadyProcessed, AlreadyStarted, ConcurrencyConflict, InvalidDateRange, NotApproved
from leave_api.models.enums import AuditAction, AuditEntityType, LeaveStatus
from leave_api.services import balance as ledger
from leave_api.services.audit import model_to_audit_dict, write_audit_log
from leave_api.services.cache import aggregate_cache_keys, evict_keys, get_cache
from leave_api.services.clock import get_clock, today
from leave_api.services.employee import get_employee, list_admins
from leave_api.services.leave import (
    build_leave_response,
    create_leave,
    get_leave_for_owner,
    get_leave_in_company,
    transition_status,
)
from leave_api.services.notification import (
    get_push_channel,
    push_notifications,
    stage_application_notices,
    stage_decision_notice,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_api.models.leave import LeaveRequest
    from leave_api.models.notification import Notification
    from leave_api.schemas.auth import AuthContext
    from leave_api.schemas.leave import ApplyLeavePayload, LeaveResponse
    from leave_api.services.cache import Cache
    from leave_api.services.clock import Clock
    from leave_api.services.notification import PushChannel

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Collaborators and effects
# ---------------------------------------------------------------------------


class EmployeeLocks:
    """One ``asyncio.Lock`` per employee, alive only while someone uses it."""

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[uuid.UUID, asyncio.Lock] = weakref.WeakValueDictionary()

    def _lock_for(self, employee_id: uuid.UUID) -> asyncio.Lock:
        lock = self._locks.get(employee_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[employee_id] = lock
        return lock

    @asynccontextmanager
    async def hold(self, employee_id: uuid.UUID) -> AsyncIterator[None]:
        lock = self._lock_for(employee_id)
        async with lock:
            yield


_employee_locks = EmployeeLocks()


@dataclass
class LifecycleContext:
    """External collaborators used by every transition."""

    cache: Cache
    push: PushChannel
    clock: Clock
    locks: EmployeeLocks
    max_attempts: int = 3


def get_lifecycle_context() -> LifecycleContext:
    """Build a context from the process-wide collaborators."""
    return LifecycleContext(
        cache=get_cache(),
        push=get_push_channel(),
        clock=get_clock(),
        locks=_employee_locks,
        max_attempts=get_settings().lifecycle_max_attempts,
    )


@dataclass
class LifecycleEffects:
    """Side effects of a committed transition, applied after the commit."""

    notifications: list[Notification] = field(default_factory=list)
    cache_keys: list[str] = field(default_factory=list)


async def apply_effects(ctx: LifecycleContext, effects: LifecycleEffects) -> None:
    """Evict first so a client reacting to the push reads fresh aggregates."""
    await evict_keys(ctx.cache, effects.cache_keys)
    await push_notifications(ctx.push, effects.notifications)


def _effects_for(ctx: LifecycleContext, leave: LeaveRequest, notifications: list[Notification]) -> LifecycleEffects:
    return LifecycleEffects(
        notifications=notifications,
        cache_keys=aggregate_cache_keys(leave.company_id, ctx.clock.now().year, leave.start_date.year),
    )


async def run_with_retry(operation: Callable[[], Awaitable[T]], max_attempts: int) -> T:
    """Run ``operation``, retrying on ``ConcurrencyConflict`` up to ``max_attempts`` in total."""
    attempt = 1
    while True:
        try:
            return await operation()
        except ConcurrencyConflict:
            if attempt >= max_attempts:
                logger.warning("Giving up after %d conflicting attempts", attempt)
                raise
            logger.info("Concurrency conflict on attempt %d/%d, retrying", attempt, max_attempts)
            attempt += 1


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


async def apply_leave(
    session: AsyncSession,
    auth: AuthContext,
    payload: ApplyLeavePayload,
    ctx: LifecycleContext | None = None,
) -> LeaveResponse:
    """Create a PENDING leave for the caller and notify the company's admins.

    The balance check here is advisory; nothing is debited until approval.
    """
    if payload.end_date < payload.start_date:
        raise InvalidDateRange()
    ctx = ctx or get_lifecycle_context()

    async def _attempt() -> LeaveResponse:
        now = ctx.clock.now()
        async with ctx.locks.hold(auth.user_id):
            async with unit_of_work(session):
                employee = await get_employee(session, auth.company_id, auth.user_id, for_update=True)
                leave = create_leave(session, employee, payload, created_at=now)
                ledger.ensure_available(employee, leave.leave_days)
                await session.flush()

                admins = await list_admins(session, employee.company_id)
                notifications = stage_application_notices(session, employee, leave, admins, created_at=now)
                write_audit_log(
                    session,
                    company_id=leave.company_id,
                    actor_id=auth.user_id,
                    entity_type=AuditEntityType.LEAVE,
                    entity_id=leave.id,
                    action=AuditAction.APPLY,
                    after_json=model_to_audit_dict(leave, leave_days=leave.leave_days),
                    created_at=now,
                )

        logger.info("Leave %s applied by %s for %d day(s)", leave.id, auth.user_id, leave.leave_days)
        await apply_effects(ctx, _effects_for(ctx, leave, notifications))
        return build_leave_response(leave)

    return await run_with_retry(_attempt, ctx.max_attempts)


async def approve_leave(
    session: AsyncSession,
    auth: AuthContext,
    leave_id: uuid.UUID,
    ctx: LifecycleContext | None = None,
) -> LeaveResponse:
    """Approve a PENDING leave and debit the owner's balance.

    The balance is checked again here because other approvals may have
    consumed it since the leave was applied for.
    """
    ctx = ctx or get_lifecycle_context()

    async def _attempt() -> LeaveResponse:
        now = ctx.clock.now()
        # Unlocked read used only to pick the lock key; the row is re-read and
        # re-checked under the lock. A LeaveNotFound here has written nothing.
        owner_id = (await get_leave_in_company(session, auth.company_id, leave_id)).user_id
        async with ctx.locks.hold(owner_id):
            async with unit_of_work(session):
                leave = await get_leave_in_company(session, auth.company_id, leave_id, for_update=True)
                if leave.status != LeaveStatus.PENDING:
                    raise AlreadyProcessed(leave.status)
                before = model_to_audit_dict(leave, leave_days=leave.leave_days)

                owner = await get_employee(session, leave.company_id, leave.user_id, for_update=True)
                await ledger.reserve(session, owner, leave.leave_days)
                await transition_status(
                    session,
                    leave,
                    LeaveStatus.PENDING,
                    LeaveStatus.APPROVED,
                    actor_id=auth.user_id,
                    decided_at=now,
                )

                notifications = [stage_decision_notice(session, leave, created_at=now)]
                write_audit_log(
                    session,
                    company_id=leave.company_id,
                    actor_id=auth.user_id,
                    entity_type=AuditEntityType.LEAVE,
                    entity_id=leave.id,
                    action=AuditAction.APPROVE,
                    before_json=before,
                    after_json=model_to_audit_dict(leave, leave_days=leave.leave_days),
                    created_at=now,
                )

        logger.info("Leave %s approved by %s; owner used_leave=%d", leave.id, auth.user_id, owner.used_leave)
        await apply_effects(ctx, _effects_for(ctx, leave, notifications))
        return build_leave_response(leave)

    return await run_with_retry(_attempt, ctx.max_attempts)


async def reject_leave(
    session: AsyncSession,
    auth: AuthContext,
    leave_id: uuid.UUID,
    ctx: LifecycleContext | None = None,
) -> LeaveResponse:
    """Reject a PENDING leave. The balance is untouched."""
    ctx = ctx or get_lifecycle_context()

    async def _attempt() -> LeaveResponse:
        now = ctx.clock.now()
        # Unlocked read used only to pick the lock key; the row is re-read and
        # re-checked under the lock. A LeaveNotFound here has written nothing.
        owner_id = (await get_leave_in_company(session, auth.company_id, leave_id)).user_id
        async with ctx.locks.hold(owner_id):
            async with unit_of_work(session):
                leave = await get_leave_in_company(session, auth.company_id, leave_id, for_update=True)
                if leave.status != LeaveStatus.PENDING:
                    raise AlreadyProcessed(leave.status)
                before = model_to_audit_dict(leave, leave_days=leave.leave_days)

                await transition_status(
                    session,
                    leave,
                    LeaveStatus.PENDING,
                    LeaveStatus.REJECTED,
                    actor_id=auth.user_id,
                    decided_at=now,
                )

                notifications = [stage_decision_notice(session, leave, created_at=now)]
                write_audit_log(
                    session,
                    company_id=leave.company_id,
                    actor_id=auth.user_id,
                    entity_type=AuditEntityType.LEAVE,
                    entity_id=leave.id,
                    action=AuditAction.REJECT,
                    before_json=before,
                    after_json=model_to_audit_dict(leave, leave_days=leave.leave_days),
                    created_at=now,
                )

        logger.info("Leave %s rejected by %s", leave.id, auth.user_id)
        await apply_effects(ctx, _effects_for(ctx, leave, notifications))
        return build_leave_response(leave)

    return await run_with_retry(_attempt, ctx.max_attempts)


async def cancel_leave(
    session: AsyncSession,
    auth: AuthContext,
    leave_id: uuid.UUID,
    ctx: LifecycleContext | None = None,
) -> LeaveResponse:
    """Cancel the caller's APPROVED leave before it starts and credit the days back.

    The full ``leave_days`` is released as approved; no policy is re-evaluated.
    """
    ctx = ctx or get_lifecycle_context()

    async def _attempt() -> LeaveResponse:
        now = ctx.clock.now()
        async with ctx.locks.hold(auth.user_id):
            async with unit_of_work(session):
                leave = await get_leave_for_owner(session, auth.company_id, auth.user_id, leave_id, for_update=True)
                if leave.status != LeaveStatus.APPROVED:
                    raise NotApproved()
                if leave.start_date <= today(ctx.clock):
                    raise AlreadyStarted()
                before = model_to_audit_dict(leave, leave_days=leave.leave_days)

                owner = await get_employee(session, leave.company_id, leave.user_id, for_update=True)
                await ledger.release(session, owner, leave.leave_days)
                await transition_status(
                    session,
                    leave,
                    LeaveStatus.APPROVED,
                    LeaveStatus.CANCELLED,
                    actor_id=auth.user_id,
                    decided_at=now,
                )

                notifications = [stage_decision_notice(session, leave, created_at=now)]
                write_audit_log(
                    session,
                    company_id=leave.company_id,
                    actor_id=auth.user_id,
                    entity_type=AuditEntityType.LEAVE,
                    entity_id=leave.id,
                    action=AuditAction.CANCEL,
                    before_json=before,
                    after_json=model_to_audit_dict(leave, leave_days=leave.leave_days),
                    created_at=now,
                )

        logger.info("Leave %s cancelled by %s; owner used_leave=%d", leave.id, auth.user_id, owner.used_leave)
        await apply_effects(ctx, _effects_for(ctx, leave, notifications))
        return build_leave_response(leave)

    return await run_with_retry(_attempt, ctx.max_attempts)
