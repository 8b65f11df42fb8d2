from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from leave_api.models.enums import UserRole

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from httpx import AsyncClient

    from leave_api.models import Employee
    from leave_api.services.clock import FixedClock

COMPANY_ID = uuid.uuid4()


def _headers(person: Employee) -> dict[str, str]:
    return {
        "X-Company-Id": str(person.company_id),
        "X-User-Id": str(person.id),
        "X-Role": person.role,
    }


def _url(suffix: str = "", company_id: uuid.UUID = COMPANY_ID) -> str:
    return f"/companies/{company_id}/leaves{suffix}"


@pytest.fixture
async def admin(make_employee: Callable[..., Awaitable[Employee]]) -> Employee:
    return await make_employee(COMPANY_ID, role=UserRole.ADMIN, full_name="Ada Admin")


@pytest.fixture
async def employee(make_employee: Callable[..., Awaitable[Employee]]) -> Employee:
    return await make_employee(COMPANY_ID, full_name="Erin Employee")


async def _apply(client: AsyncClient, person: Employee, start: str = "2025-03-10", end: str = "2025-03-14") -> dict:
    response = await client.post(
        _url(),
        json={"start_date": start, "end_date": end, "reason": "Family trip", "leave_type": "ANNUAL"},
        headers=_headers(person),
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _balance(client: AsyncClient, person: Employee) -> dict:
    response = await client.get(
        f"/companies/{COMPANY_ID}/employees/{person.id}/balance",
        headers=_headers(person),
    )
    assert response.status_code == 200, response.text
    return response.json()


# ---------------------------------------------------------------------------
# POST /leaves
# ---------------------------------------------------------------------------


async def test_apply_leave(async_client: AsyncClient, admin: Employee, employee: Employee) -> None:
    data = await _apply(async_client, employee)

    assert data["status"] == "PENDING"
    assert data["leave_days"] == 5
    assert data["user_id"] == str(employee.id)
    assert data["company_id"] == str(COMPANY_ID)
    assert data["decided_at"] is None

    balance = await _balance(async_client, employee)
    assert balance == {
        "employee_id": str(employee.id),
        "total_leave_balance": 20,
        "used_leave": 0,
        "remaining_leave": 20,
    }


async def test_apply_inverted_range_returns_422(async_client: AsyncClient, employee: Employee) -> None:
    response = await async_client.post(
        _url(),
        json={"start_date": "2025-03-14", "end_date": "2025-03-10"},
        headers=_headers(employee),
    )

    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "InvalidDateRange"
    assert body["status_code"] == 422


async def test_apply_insufficient_balance_returns_400(
    async_client: AsyncClient,
    make_employee: Callable[..., Awaitable[Employee]],
) -> None:
    employee = await make_employee(COMPANY_ID, used_leave=5)

    response = await async_client.post(
        _url(),
        json={"start_date": "2025-04-01", "end_date": "2025-04-18"},
        headers=_headers(employee),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "InsufficientBalance"


async def test_apply_malformed_body_returns_422(async_client: AsyncClient, employee: Employee) -> None:
    response = await async_client.post(_url(), json={"start_date": "not-a-date"}, headers=_headers(employee))
    assert response.status_code == 422
    assert response.json()["error"] == "ValidationError"


async def test_missing_auth_headers_returns_422(async_client: AsyncClient) -> None:
    response = await async_client.get(_url())
    assert response.status_code == 422


async def test_company_mismatch_returns_403(async_client: AsyncClient, employee: Employee) -> None:
    response = await async_client.get(_url(company_id=uuid.uuid4()), headers=_headers(employee))
    assert response.status_code == 403


# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------


async def test_approve_leave(async_client: AsyncClient, admin: Employee, employee: Employee) -> None:
    leave = await _apply(async_client, employee)

    response = await async_client.post(_url(f"/{leave['id']}/approve"), headers=_headers(admin))

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "APPROVED"
    assert data["decided_by"] == str(admin.id)
    assert (await _balance(async_client, employee))["used_leave"] == 5


async def test_approve_requires_admin(async_client: AsyncClient, employee: Employee) -> None:
    leave = await _apply(async_client, employee)

    response = await async_client.post(_url(f"/{leave['id']}/approve"), headers=_headers(employee))

    assert response.status_code == 403
    assert (await _balance(async_client, employee))["used_leave"] == 0


async def test_approve_twice_returns_409(async_client: AsyncClient, admin: Employee, employee: Employee) -> None:
    leave = await _apply(async_client, employee)
    await async_client.post(_url(f"/{leave['id']}/approve"), headers=_headers(admin))

    response = await async_client.post(_url(f"/{leave['id']}/approve"), headers=_headers(admin))

    assert response.status_code == 409
    assert response.json()["error"] == "AlreadyProcessed"
    assert (await _balance(async_client, employee))["used_leave"] == 5


async def test_reject_leave(async_client: AsyncClient, admin: Employee, employee: Employee) -> None:
    leave = await _apply(async_client, employee)

    response = await async_client.post(_url(f"/{leave['id']}/reject"), headers=_headers(admin))

    assert response.status_code == 200
    assert response.json()["status"] == "REJECTED"
    assert (await _balance(async_client, employee))["used_leave"] == 0


async def test_approve_leave_of_other_company_returns_404(
    async_client: AsyncClient,
    make_employee: Callable[..., Awaitable[Employee]],
    employee: Employee,
) -> None:
    other_company = uuid.uuid4()
    foreign_admin = await make_employee(other_company, role=UserRole.ADMIN)
    leave = await _apply(async_client, employee)

    response = await async_client.post(
        _url(f"/{leave['id']}/approve", company_id=other_company),
        headers=_headers(foreign_admin),
    )

    assert response.status_code == 404
    assert response.json()["error"] == "LeaveNotFound"


# ---------------------------------------------------------------------------
# Cancel
# ---------------------------------------------------------------------------


async def test_cancel_before_start(
    async_client: AsyncClient,
    clock: FixedClock,
    admin: Employee,
    employee: Employee,
) -> None:
    leave = await _apply(async_client, employee)
    await async_client.post(_url(f"/{leave['id']}/approve"), headers=_headers(admin))

    clock.set(datetime(2025, 3, 9, 18, 0, tzinfo=UTC))
    response = await async_client.post(_url(f"/{leave['id']}/cancel"), headers=_headers(employee))

    assert response.status_code == 200
    assert response.json()["status"] == "CANCELLED"
    assert (await _balance(async_client, employee))["used_leave"] == 0


async def test_cancel_started_leave_returns_400(
    async_client: AsyncClient,
    clock: FixedClock,
    admin: Employee,
    employee: Employee,
) -> None:
    leave = await _apply(async_client, employee)
    await async_client.post(_url(f"/{leave['id']}/approve"), headers=_headers(admin))

    clock.set(datetime(2025, 3, 11, 9, 0, tzinfo=UTC))
    response = await async_client.post(_url(f"/{leave['id']}/cancel"), headers=_headers(employee))

    assert response.status_code == 400
    assert response.json()["error"] == "AlreadyStarted"
    assert (await _balance(async_client, employee))["used_leave"] == 5


async def test_cancel_pending_returns_400(async_client: AsyncClient, employee: Employee) -> None:
    leave = await _apply(async_client, employee)

    response = await async_client.post(_url(f"/{leave['id']}/cancel"), headers=_headers(employee))

    assert response.status_code == 400
    assert response.json()["error"] == "NotApproved"


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def test_list_leaves_employee_sees_only_own(
    async_client: AsyncClient,
    make_employee: Callable[..., Awaitable[Employee]],
    admin: Employee,
    employee: Employee,
) -> None:
    colleague = await make_employee(COMPANY_ID, full_name="Colleague")
    await _apply(async_client, employee)
    await _apply(async_client, colleague, "2025-05-05", "2025-05-06")

    own = await async_client.get(_url(), headers=_headers(employee))
    assert own.json()["total"] == 1
    assert own.json()["items"][0]["user_id"] == str(employee.id)

    # An explicit user_id filter does not widen an employee's view.
    widened = await async_client.get(_url(), params={"user_id": str(colleague.id)}, headers=_headers(employee))
    assert widened.json()["total"] == 1
    assert widened.json()["items"][0]["user_id"] == str(employee.id)

    everything = await async_client.get(_url(), headers=_headers(admin))
    assert everything.json()["total"] == 2


async def test_list_leaves_status_filter(async_client: AsyncClient, admin: Employee, employee: Employee) -> None:
    first = await _apply(async_client, employee)
    await _apply(async_client, employee, "2025-06-02", "2025-06-03")
    await async_client.post(_url(f"/{first['id']}/approve"), headers=_headers(admin))

    response = await async_client.get(_url(), params={"status": "APPROVED"}, headers=_headers(admin))

    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["id"] == first["id"]


async def test_get_leave(
    async_client: AsyncClient,
    make_employee: Callable[..., Awaitable[Employee]],
    admin: Employee,
    employee: Employee,
) -> None:
    leave = await _apply(async_client, employee)
    colleague = await make_employee(COMPANY_ID, full_name="Colleague")

    assert (await async_client.get(_url(f"/{leave['id']}"), headers=_headers(employee))).status_code == 200
    assert (await async_client.get(_url(f"/{leave['id']}"), headers=_headers(admin))).status_code == 200
    assert (await async_client.get(_url(f"/{leave['id']}"), headers=_headers(colleague))).status_code == 404
    assert (await async_client.get(_url(f"/{uuid.uuid4()}"), headers=_headers(admin))).status_code == 404
