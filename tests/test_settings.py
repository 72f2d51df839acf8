"""
Tests for the key-value settings store.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_put_single_setting_creates_then_updates(async_client: AsyncClient, admin_headers: dict):
    resp = await async_client.put(
        "/api/settings/company_name", json={"value": "Acme", "type": "text"}, headers=admin_headers
    )
    assert resp.status_code == 201
    assert resp.json()["setting_value"] == "Acme"

    resp = await async_client.put(
        "/api/settings/company_name", json={"value": "Acme Ltd"}, headers=admin_headers
    )
    assert resp.status_code == 200
    assert resp.json()["setting_value"] == "Acme Ltd"
    assert resp.json()["setting_type"] == "text"


@pytest.mark.asyncio
async def test_bulk_update_and_list(async_client: AsyncClient, admin_headers: dict, hr_headers: dict):
    resp = await async_client.put(
        "/api/settings",
        json={
            "settings": [
                {"key": "work_start", "value": "09:00", "type": "time"},
                {"key": "currency", "value": "INR"},
            ]
        },
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert len(resp.json()) == 2

    listed = await async_client.get("/api/settings", headers=hr_headers)
    assert [s["setting_key"] for s in listed.json()] == ["currency", "work_start"]

    one = await async_client.get("/api/settings/work_start", headers=hr_headers)
    assert one.json()["setting_type"] == "time"


@pytest.mark.asyncio
async def test_bulk_update_requires_items(async_client: AsyncClient, admin_headers: dict):
    resp = await async_client.put("/api/settings", json={"settings": []}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Settings array is required"


@pytest.mark.asyncio
async def test_missing_setting_is_404(async_client: AsyncClient, hr_headers: dict):
    resp = await async_client.get("/api/settings/nope", headers=hr_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_settings_writes_are_admin_only(async_client: AsyncClient, hr_headers: dict):
    resp = await async_client.put("/api/settings/theme", json={"value": "dark"}, headers=hr_headers)
    assert resp.status_code == 403
