"""Dashboard aggregates, read through the aggregate cache.

A miss recomputes from ``leave_request`` and repopulates the entry with a
TTL, so a transition only has to evict.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from leave_api.config import get_settings
from leave_api.models.employee import Employee
from leave_api.models.enums import LeaveStatus, UserRole
from leave_api.models.leave import LeaveRequest
from leave_api.schemas.report import DashboardSummaryResponse, MonthlyTrend, MonthlyTrendsResponse
from leave_api.services.cache import AggregateKind, cache_key

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_api.services.cache import Cache

logger = logging.getLogger(__name__)


async def _leave_rows_for_year(
    session: AsyncSession,
    company_id: uuid.UUID,
    year: int,
) -> list[tuple[date, str]]:
    """(start_date, status) for every leave of the company starting in ``year``."""
    result = await session.execute(
        select(col(LeaveRequest.start_date), col(LeaveRequest.status)).where(
            col(LeaveRequest.company_id) == company_id,
            col(LeaveRequest.start_date) >= date(year, 1, 1),
            col(LeaveRequest.start_date) <= date(year, 12, 31),
        )
    )
    return [(row[0], row[1]) for row in result.all()]


async def get_dashboard_summary(
    session: AsyncSession,
    cache: Cache,
    company_id: uuid.UUID,
    year: int,
) -> DashboardSummaryResponse:
    """Company leave counts by status for ``year``."""
    key = cache_key(AggregateKind.DASHBOARD, company_id, year)
    cached = await cache.get(key)
    if cached is not None:
        return DashboardSummaryResponse.model_validate_json(cached)

    employees = await session.execute(
        select(func.count())
        .select_from(Employee)
        .where(
            col(Employee.company_id) == company_id,
            col(Employee.role) == UserRole.EMPLOYEE.value,
        )
    )
    counts = Counter(status for _, status in await _leave_rows_for_year(session, company_id, year))

    summary = DashboardSummaryResponse(
        company_id=company_id,
        year=year,
        total_employees=employees.scalar_one(),
        total_leaves=sum(counts.values()),
        pending_leaves=counts[LeaveStatus.PENDING.value],
        approved_leaves=counts[LeaveStatus.APPROVED.value],
        rejected_leaves=counts[LeaveStatus.REJECTED.value],
        cancelled_leaves=counts[LeaveStatus.CANCELLED.value],
    )
    await cache.set(key, summary.model_dump_json(), get_settings().report_cache_ttl_seconds)
    logger.debug("Recomputed %s", key)
    return summary


async def get_monthly_trends(
    session: AsyncSession,
    cache: Cache,
    company_id: uuid.UUID,
    year: int,
) -> MonthlyTrendsResponse:
    """Per-month leave counts for ``year``; months without leaves are omitted."""
    key = cache_key(AggregateKind.MONTHLY_TRENDS, company_id, year)
    cached = await cache.get(key)
    if cached is not None:
        return MonthlyTrendsResponse.model_validate_json(cached)

    by_month: dict[int, Counter[str]] = {}
    for start_date, status in await _leave_rows_for_year(session, company_id, year):
        by_month.setdefault(start_date.month, Counter())[status] += 1

    trends = MonthlyTrendsResponse(
        company_id=company_id,
        year=year,
        months=[
            MonthlyTrend(
                month=month,
                total_leaves=sum(counts.values()),
                approved=counts[LeaveStatus.APPROVED.value],
                pending=counts[LeaveStatus.PENDING.value],
                rejected=counts[LeaveStatus.REJECTED.value],
                cancelled=counts[LeaveStatus.CANCELLED.value],
            )
            for month, counts in sorted(by_month.items())
        ],
    )
    await cache.set(key, trends.model_dump_json(), get_settings().report_cache_ttl_seconds)
    logger.debug("Recomputed %s", key)
    return trends
