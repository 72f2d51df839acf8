"""
Tests for the accounting ledger.
"""

import pytest
from httpx import AsyncClient


def _entry(**overrides) -> dict:
    return {
        "head": "Rent",
        "tds_percentage": 10,
        "gst_percentage": 18,
        "frequency": "Monthly",
        "amount": 25000,
        "month": 4,
        "year": 2024,
        **overrides,
    }


@pytest.mark.asyncio
async def test_hr_has_no_ledger_access(async_client: AsyncClient, hr_headers: dict):
    resp = await async_client.get("/api/accounting", params={"month": 4, "year": 2024}, headers=hr_headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_initialize_default_heads(async_client: AsyncClient, accountant_headers: dict):
    resp = await async_client.post(
        "/api/accounting/initialize", json={"month": 4, "year": 2024}, headers=accountant_headers
    )
    assert resp.status_code == 201
    heads = {row["head"]: row for row in resp.json()}
    assert len(heads) == 13
    assert heads["Travel & Conveyance"]["gst_percentage"] == 5
    assert heads["TDS Payable"]["tds_percentage"] == 0
    assert all(row["amount"] == 0 for row in heads.values())

    again = await async_client.post(
        "/api/accounting/initialize", json={"month": 4, "year": 2024}, headers=accountant_headers
    )
    assert again.status_code == 400


@pytest.mark.asyncio
async def test_recurring_entry_updates_in_place(async_client: AsyncClient, admin_headers: dict):
    first = await async_client.post("/api/accounting", json=_entry(), headers=admin_headers)
    second = await async_client.post("/api/accounting", json=_entry(amount=27000), headers=admin_headers)
    assert first.status_code == 201
    assert first.json()["id"] == second.json()["id"]
    assert second.json()["amount"] == 27000

    listed = await async_client.get("/api/accounting", params={"month": 4, "year": 2024}, headers=admin_headers)
    assert len(listed.json()) == 1


@pytest.mark.asyncio
async def test_once_entries_always_insert(async_client: AsyncClient, admin_headers: dict):
    body = _entry(head="Office Party", frequency="Once", amount=5000)
    first = await async_client.post("/api/accounting", json=body, headers=admin_headers)
    second = await async_client.post("/api/accounting", json=body, headers=admin_headers)
    assert first.json()["id"] != second.json()["id"]


@pytest.mark.asyncio
async def test_subhead_distinguishes_recurring_entries(async_client: AsyncClient, admin_headers: dict):
    a = await async_client.post("/api/accounting", json=_entry(subhead="HQ"), headers=admin_headers)
    b = await async_client.post("/api/accounting", json=_entry(subhead="Branch"), headers=admin_headers)
    assert a.json()["id"] != b.json()["id"]


@pytest.mark.asyncio
async def test_invalid_frequency_is_400(async_client: AsyncClient, admin_headers: dict):
    resp = await async_client.post("/api/accounting", json=_entry(frequency="Hourly"), headers=admin_headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_update_and_delete_entry(async_client: AsyncClient, accountant_headers: dict):
    created = (await async_client.post("/api/accounting", json=_entry(), headers=accountant_headers)).json()
    resp = await async_client.put(
        f"/api/accounting/{created['id']}", json={"amount": 100, "remarks": "Adjusted"}, headers=accountant_headers
    )
    assert resp.json()["amount"] == 100
    assert resp.json()["remarks"] == "Adjusted"

    deleted = await async_client.delete(f"/api/accounting/{created['id']}", headers=accountant_headers)
    assert deleted.status_code == 200
    missing = await async_client.put(
        f"/api/accounting/{created['id']}", json={"amount": 1}, headers=accountant_headers
    )
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_sync_salary_sums_paid_payroll(
    async_client: AsyncClient, admin_headers: dict, hr_headers: dict, create_employee
):
    """Salary & Wages takes the gross of paid payroll only."""
    paid = await create_employee(salary=10000)
    unpaid = await create_employee(salary=20000)
    row = await async_client.post(
        "/api/payroll",
        json={"employee_id": paid["id"], "month": 4, "year": 2024, "allowances": 500},
        headers=hr_headers,
    )
    await async_client.put(f"/api/payroll/{row.json()['id']}", json={"status": "paid"}, headers=hr_headers)
    await async_client.post(
        "/api/payroll", json={"employee_id": unpaid["id"], "month": 4, "year": 2024}, headers=hr_headers
    )

    resp = await async_client.post(
        "/api/accounting/sync-salary", json={"month": 4, "year": 2024}, headers=admin_headers
    )
    assert resp.status_code == 200
    assert resp.json()["head"] == "Salary & Wages"
    assert resp.json()["amount"] == 10500.0

    again = await async_client.post(
        "/api/accounting/sync-salary", json={"month": 4, "year": 2024}, headers=admin_headers
    )
    assert again.json()["id"] == resp.json()["id"]
