from __future__ import annotations

import os
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from leave_api.api.deps import get_lifecycle_context
from leave_api.db import get_session
from leave_api.main import app
from leave_api.models import Employee, SQLModel
from leave_api.models.enums import UserRole
from leave_api.services.cache import InMemoryCache
from leave_api.services.clock import FixedClock
from leave_api.services.lifecycle import EmployeeLocks, LifecycleContext
from leave_api.services.notification import InMemoryPushChannel

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine

# Saturday 1 March 2025, 09:00 UTC.
DEFAULT_NOW = datetime(2025, 3, 1, 9, 0, tzinfo=UTC)


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """A fresh database per test.

    Defaults to a SQLite file so that separate sessions really use separate
    connections. Set TEST_DATABASE_URL to run against PostgreSQL instead.
    """
    url = os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'leave.db'}"
    _engine = create_async_engine(url)
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await _engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(DEFAULT_NOW)


@pytest.fixture
def cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def push() -> InMemoryPushChannel:
    return InMemoryPushChannel()


@pytest.fixture
def ctx(cache: InMemoryCache, push: InMemoryPushChannel, clock: FixedClock) -> LifecycleContext:
    return LifecycleContext(cache=cache, push=push, clock=clock, locks=EmployeeLocks(), max_attempts=3)


@pytest.fixture
def make_employee(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[Employee]]:
    """Insert an employee directly and return it."""

    async def _make(
        company_id: uuid.UUID,
        *,
        role: UserRole = UserRole.EMPLOYEE,
        full_name: str = "Test Employee",
        total_leave_balance: int = 20,
        used_leave: int = 0,
    ) -> Employee:
        employee = Employee(
            company_id=company_id,
            full_name=full_name,
            email=f"{uuid.uuid4().hex[:12]}@example.com",
            role=role.value,
            total_leave_balance=total_leave_balance,
            used_leave=used_leave,
        )
        async with session_factory() as session:
            session.add(employee)
            await session.commit()
        return employee

    return _make


@pytest.fixture
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
    ctx: LifecycleContext,
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with a fresh session per request and in-memory collaborators."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _override_get_session
    app.dependency_overrides[get_lifecycle_context] = lambda: ctx
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
