"""
Tests for payroll derivation and the payroll endpoints.
"""

from datetime import date

import pytest
from httpx import AsyncClient

from hrms.services.payroll import (PayrollPolicy, calculate_leave_deduction,
                                   calculate_payroll, months_between)

POLICY = PayrollPolicy(tds_rate=0.10, leave_allowance_days=2, days_per_month=30)


# ── Pure arithmetic ─────────────────────────────────────────────────
def test_basic_salary_only():
    figures = calculate_payroll(50000, policy=POLICY)
    assert figures.gross_salary == 50000.0
    assert figures.tds == 5000.0
    assert figures.leave_deduction == 0.0
    assert figures.deductions == 5000.0
    assert figures.net_salary == 45000.0


def test_allowances_are_taxed():
    figures = calculate_payroll(40000, allowances=4000, other_deductions=1500, policy=POLICY)
    assert figures.gross_salary == 44000.0
    assert figures.tds == 4400.0
    assert figures.deductions == 5900.0
    assert figures.net_salary == 38100.0


@pytest.mark.parametrize("leave_days,expected", [(0, 0), (2, 0), (3, 1000), (7, 5000)])
def test_leave_deduction_beyond_allowance(leave_days, expected):
    assert float(calculate_leave_deduction(30000, leave_days, POLICY)) == expected


def test_leave_deduction_rounds_to_cents():
    # 10000 / 30 = 333.333...
    assert float(calculate_leave_deduction(10000, 3, POLICY)) == 333.33


@pytest.mark.parametrize(
    "basic,allowances,other,leave_days",
    [(50000, 0, 0, 0), (33333.33, 1234.56, 99.99, 4), (12000, 500, 0, 11), (0, 0, 0, 5)],
)
def test_net_identity(basic, allowances, other, leave_days):
    """net = gross - (tds + leave_deduction + other_deductions), to the cent."""
    f = calculate_payroll(basic, allowances, other, leave_days, POLICY)
    assert round(f.gross_salary - (f.tds + f.leave_deduction + f.other_deductions), 2) == f.net_salary
    assert round(f.tds + f.leave_deduction + f.other_deductions, 2) == f.deductions


def test_months_between_spans_year_end():
    assert months_between(date(2023, 12, 28), date(2024, 2, 2)) == [(2023, 12), (2024, 1), (2024, 2)]


# ── Endpoints ───────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_create_payroll_uses_employee_salary(
    async_client: AsyncClient, hr_headers: dict, create_employee
):
    """An employee earning 50000 with no leave nets 45000."""
    emp = await create_employee(salary=50000)
    resp = await async_client.post(
        "/api/payroll", json={"employee_id": emp["id"], "month": 2, "year": 2024}, headers=hr_headers
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["basic_salary"] == 50000.0
    assert data["tds"] == 5000.0
    assert data["leave_deduction"] == 0.0
    assert data["net_salary"] == 45000.0
    assert data["status"] == "pending"


@pytest.mark.asyncio
async def test_payroll_upsert_keeps_one_row(async_client: AsyncClient, hr_headers: dict, create_employee):
    emp = await create_employee(salary=20000)
    body = {"employee_id": emp["id"], "month": 2, "year": 2024}
    first = await async_client.post("/api/payroll", json=body, headers=hr_headers)
    second = await async_client.post(
        "/api/payroll", json={**body, "basic_salary": 25000, "allowances": 1000}, headers=hr_headers
    )
    assert first.json()["id"] == second.json()["id"]
    assert second.json()["basic_salary"] == 25000.0
    assert second.json()["gross_salary"] == 26000.0

    rows = await async_client.get("/api/payroll", params={"month": 2, "year": 2024}, headers=hr_headers)
    assert len(rows.json()) == 1


@pytest.mark.asyncio
async def test_update_payroll_status_sets_processed_at(
    async_client: AsyncClient, hr_headers: dict, create_employee
):
    emp = await create_employee(salary=20000)
    created = await async_client.post(
        "/api/payroll", json={"employee_id": emp["id"], "month": 2, "year": 2024}, headers=hr_headers
    )
    resp = await async_client.put(
        f"/api/payroll/{created.json()['id']}", json={"status": "paid"}, headers=hr_headers
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "paid"
    assert resp.json()["processed_at"] is not None

    bad = await async_client.put(
        f"/api/payroll/{created.json()['id']}", json={"status": "lost"}, headers=hr_headers
    )
    assert bad.status_code == 400


@pytest.mark.asyncio
async def test_reopening_payroll_clears_processed_stamp(
    async_client: AsyncClient, hr_headers: dict, create_employee
):
    emp = await create_employee(salary=20000)
    created = await async_client.post(
        "/api/payroll", json={"employee_id": emp["id"], "month": 3, "year": 2024}, headers=hr_headers
    )
    row_id = created.json()["id"]
    paid = await async_client.put(f"/api/payroll/{row_id}", json={"status": "paid"}, headers=hr_headers)
    assert paid.json()["processed_at"] is not None

    reopened = await async_client.put(
        f"/api/payroll/{row_id}", json={"status": "pending"}, headers=hr_headers
    )
    assert reopened.status_code == 200
    assert reopened.json()["status"] == "pending"
    assert reopened.json()["processed_at"] is None


@pytest.mark.asyncio
async def test_all_employees_preview_does_not_write(
    async_client: AsyncClient, hr_headers: dict, create_employee
):
    saved = await create_employee(salary=10000)
    await create_employee(salary=20000)
    await async_client.post(
        "/api/payroll", json={"employee_id": saved["id"], "month": 5, "year": 2024}, headers=hr_headers
    )

    preview = await async_client.get(
        "/api/payroll", params={"month": 5, "year": 2024, "all_employees": "true"}, headers=hr_headers
    )
    assert preview.status_code == 200
    rows = preview.json()
    assert len(rows) == 2
    unsaved = [row for row in rows if row["id"] is None]
    assert len(unsaved) == 1
    # preview applies the default 10% allowance
    assert unsaved[0]["allowances"] == 2000.0
    assert unsaved[0]["gross_salary"] == 22000.0

    stored = await async_client.get("/api/payroll", params={"month": 5, "year": 2024}, headers=hr_headers)
    assert len(stored.json()) == 1


@pytest.mark.asyncio
async def test_all_employees_requires_period(async_client: AsyncClient, hr_headers: dict):
    resp = await async_client.get("/api/payroll", params={"all_employees": "true"}, headers=hr_headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_process_payroll(
    async_client: AsyncClient, admin_headers: dict, hr_headers: dict, create_employee
):
    """POST /payroll/process covers active salaried employees without a row."""
    await create_employee(salary=10000)
    await create_employee(salary=0)
    await create_employee(salary=10000, status="inactive")

    resp = await async_client.post("/api/payroll/process", json={"month": 6, "year": 2024}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["processed"] == 1

    rows = (await async_client.get("/api/payroll", params={"month": 6, "year": 2024}, headers=hr_headers)).json()
    assert len(rows) == 1
    row = rows[0]
    assert row["status"] == "processed"
    assert row["allowances"] == 1000.0
    assert row["other_deductions"] == 500.0
    assert row["tds"] == 1100.0
    assert row["net_salary"] == 9400.0

    again = await async_client.post("/api/payroll/process", json={"month": 6, "year": 2024}, headers=admin_headers)
    assert again.json()["processed"] == 0


@pytest.mark.asyncio
async def test_process_and_delete_are_admin_only(
    async_client: AsyncClient, hr_headers: dict, create_employee
):
    emp = await create_employee()
    created = await async_client.post(
        "/api/payroll", json={"employee_id": emp["id"], "month": 2, "year": 2024}, headers=hr_headers
    )
    assert (
        await async_client.post("/api/payroll/process", json={"month": 2, "year": 2024}, headers=hr_headers)
    ).status_code == 403
    assert (
        await async_client.delete(f"/api/payroll/{created.json()['id']}", headers=hr_headers)
    ).status_code == 403


@pytest.mark.asyncio
async def test_delete_payroll(async_client: AsyncClient, admin_headers: dict, create_employee):
    emp = await create_employee()
    created = await async_client.post(
        "/api/payroll", json={"employee_id": emp["id"], "month": 2, "year": 2024}, headers=admin_headers
    )
    resp = await async_client.delete(f"/api/payroll/{created.json()['id']}", headers=admin_headers)
    assert resp.status_code == 200
    assert (await async_client.get(f"/api/payroll/{created.json()['id']}", headers=admin_headers)).status_code == 404


@pytest.mark.asyncio
async def test_payroll_unknown_employee_is_404(async_client: AsyncClient, hr_headers: dict):
    resp = await async_client.post(
        "/api/payroll", json={"employee_id": 321, "month": 2, "year": 2024}, headers=hr_headers
    )
    assert resp.status_code == 404
