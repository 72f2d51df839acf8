"""
Tests for leave requests, the admin-only decision flow and its payroll effect.
"""

import pytest
from httpx import AsyncClient


def _leave(employee_id: int, start: str = "2024-01-08", end: str = "2024-01-12", **extra) -> dict:
    return {
        "employee_id": employee_id,
        "leave_type": "Annual",
        "start_date": start,
        "end_date": end,
        "reason": "Family trip",
        **extra,
    }


@pytest.fixture
async def staff(make_user, create_employee):
    """An employee record plus a self-service login sharing its email."""
    employee = await create_employee(email="staff@example.com")
    _user, headers = await make_user("staff@example.com", "employee")
    return employee, headers


@pytest.mark.asyncio
async def test_hr_leave_is_auto_approved(async_client: AsyncClient, hr_headers: dict, create_employee):
    emp = await create_employee()
    resp = await async_client.post("/api/leaves", json=_leave(emp["id"]), headers=hr_headers)
    assert resp.status_code == 201
    data = resp.json()
    assert data["status"] == "approved"
    assert data["days"] == 5
    assert data["approved_by"] is not None


@pytest.mark.asyncio
async def test_self_service_leave_is_pending(async_client: AsyncClient, staff):
    employee, headers = staff
    resp = await async_client.post("/api/leaves", json=_leave(employee["id"]), headers=headers)
    assert resp.status_code == 201
    assert resp.json()["status"] == "pending"
    assert resp.json()["approved_by"] is None


@pytest.mark.asyncio
async def test_self_service_cannot_file_for_others(async_client: AsyncClient, staff, create_employee):
    _employee, headers = staff
    other = await create_employee()
    resp = await async_client.post("/api/leaves", json=_leave(other["id"]), headers=headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_self_service_list_is_scoped(
    async_client: AsyncClient, staff, hr_headers: dict, create_employee
):
    employee, headers = staff
    other = await create_employee()
    await async_client.post("/api/leaves", json=_leave(employee["id"]), headers=headers)
    await async_client.post("/api/leaves", json=_leave(other["id"]), headers=hr_headers)

    mine = await async_client.get("/api/leaves", headers=headers)
    assert [row["employee_id"] for row in mine.json()] == [employee["id"]]

    everyone = await async_client.get("/api/leaves", headers=hr_headers)
    assert len(everyone.json()) == 2


@pytest.mark.asyncio
async def test_end_before_start_is_400(async_client: AsyncClient, hr_headers: dict, create_employee):
    emp = await create_employee()
    resp = await async_client.post(
        "/api/leaves", json=_leave(emp["id"], start="2024-01-12", end="2024-01-08"), headers=hr_headers
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_hr_cannot_approve(async_client: AsyncClient, staff, hr_headers: dict):
    """Only admins decide leave requests."""
    employee, headers = staff
    leave = (await async_client.post("/api/leaves", json=_leave(employee["id"]), headers=headers)).json()

    resp = await async_client.post(f"/api/leaves/{leave['id']}/approve", headers=hr_headers)
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Access denied. Required role: admin"


@pytest.mark.asyncio
async def test_admin_approves_once(async_client: AsyncClient, staff, admin_headers: dict):
    employee, headers = staff
    leave = (await async_client.post("/api/leaves", json=_leave(employee["id"]), headers=headers)).json()

    resp = await async_client.put(f"/api/leaves/{leave['id']}/approve", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "approved"
    assert resp.json()["approved_at"] is not None

    again = await async_client.post(f"/api/leaves/{leave['id']}/reject", headers=admin_headers)
    assert again.status_code == 400
    assert again.json()["detail"] == "Leave request is already approved"


@pytest.mark.asyncio
async def test_admin_rejects_with_reason(async_client: AsyncClient, staff, admin_headers: dict):
    employee, headers = staff
    leave = (await async_client.post("/api/leaves", json=_leave(employee["id"]), headers=headers)).json()

    resp = await async_client.post(
        f"/api/leaves/{leave['id']}/reject",
        json={"rejection_reason": "Quarter close"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "rejected"
    assert resp.json()["rejection_reason"] == "Quarter close"


@pytest.mark.asyncio
async def test_decide_missing_leave_is_404(async_client: AsyncClient, admin_headers: dict):
    resp = await async_client.post("/api/leaves/777/approve", headers=admin_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_leave_filters(async_client: AsyncClient, hr_headers: dict, staff, create_employee):
    employee, headers = staff
    await async_client.post("/api/leaves", json=_leave(employee["id"]), headers=headers)
    hr_emp = await create_employee()
    await async_client.post("/api/leaves", json=_leave(hr_emp["id"]), headers=hr_headers)

    pending = await async_client.get("/api/leaves", params={"status": "pending"}, headers=hr_headers)
    assert [row["employee_id"] for row in pending.json()] == [employee["id"]]

    bad = await async_client.get("/api/leaves", params={"status": "maybe"}, headers=hr_headers)
    assert bad.status_code == 400

    per_employee = await async_client.get(f"/api/leaves/employee/{hr_emp['id']}", headers=hr_headers)
    assert len(per_employee.json()) == 1


@pytest.mark.asyncio
async def test_approval_recalculates_payroll(
    async_client: AsyncClient, staff, admin_headers: dict, hr_headers: dict
):
    """Approving five leave days deducts three days of salary (two are allowed)."""
    employee, headers = staff
    await async_client.put(f"/api/employees/{employee['id']}", json={"salary": 30000}, headers=hr_headers)
    payroll = await async_client.post(
        "/api/payroll", json={"employee_id": employee["id"], "month": 1, "year": 2024}, headers=hr_headers
    )
    assert payroll.json()["leave_deduction"] == 0

    leave = (await async_client.post("/api/leaves", json=_leave(employee["id"]), headers=headers)).json()
    await async_client.post(f"/api/leaves/{leave['id']}/approve", headers=admin_headers)

    resp = await async_client.get(f"/api/payroll/{payroll.json()['id']}", headers=hr_headers)
    data = resp.json()
    assert data["leave_days"] == 5
    assert data["leave_deduction"] == 3000.0
    assert data["tds"] == 3000.0
    assert data["net_salary"] == 24000.0


@pytest.mark.asyncio
async def test_rejection_clears_leave_deduction(
    async_client: AsyncClient, staff, admin_headers: dict, hr_headers: dict
):
    employee, headers = staff
    payroll = await async_client.post(
        "/api/payroll", json={"employee_id": employee["id"], "month": 1, "year": 2024}, headers=hr_headers
    )
    leave = (await async_client.post("/api/leaves", json=_leave(employee["id"]), headers=headers)).json()

    # pending requests already count toward leave days
    pending = await async_client.get(f"/api/payroll/{payroll.json()['id']}", headers=hr_headers)
    assert pending.json()["leave_deduction"] > 0

    await async_client.post(f"/api/leaves/{leave['id']}/reject", headers=admin_headers)
    resp = await async_client.get(f"/api/payroll/{payroll.json()['id']}", headers=hr_headers)
    assert resp.json()["leave_deduction"] == 0
    assert resp.json()["leave_days"] == 0
