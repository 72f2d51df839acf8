"""
System settings: a key-value store where the last write wins.

Reads are open to any authenticated user; writes are admin only.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.api.v1.deps import get_current_user, get_db, require_admin
from hrms.models.setting import SystemSetting
from hrms.schemas.setting import SettingRead, SettingsBulkUpdate, SettingValue
from hrms.schemas.user import CurrentUser

router = APIRouter(prefix="/settings", tags=["settings"])
logger = logging.getLogger(__name__)


async def _upsert(
    db: AsyncSession, key: str, value: str | None, setting_type: str | None
) -> tuple[SystemSetting, bool]:
    result = await db.execute(select(SystemSetting).where(SystemSetting.setting_key == key))
    setting = result.scalar_one_or_none()
    created = setting is None
    if setting is None:
        setting = SystemSetting(setting_key=key, setting_type=setting_type or "text")
        db.add(setting)
    elif setting_type:
        setting.setting_type = setting_type
    setting.setting_value = value
    return setting, created


@router.get("", response_model=list[SettingRead])
async def list_settings(
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
) -> list[SystemSetting]:
    """Return every setting ordered by key."""
    result = await db.execute(select(SystemSetting).order_by(SystemSetting.setting_key))
    return list(result.scalars().all())


@router.put("", response_model=list[SettingRead])
async def update_settings(
    body: SettingsBulkUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: CurrentUser = Depends(require_admin),
) -> list[SystemSetting]:
    """Upsert several settings in one transaction."""
    if not body.settings:
        raise HTTPException(status_code=400, detail="Settings array is required")
    rows = []
    for item in body.settings:
        setting, _created = await _upsert(db, item.key, item.value, item.type)
        rows.append(setting)
    await db.commit()
    for setting in rows:
        await db.refresh(setting)
    logger.info("Updated %d settings", len(rows))
    return rows


@router.get("/{key}", response_model=SettingRead)
async def get_setting(
    key: str,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
) -> SystemSetting:
    """Return one setting by key."""
    result = await db.execute(select(SystemSetting).where(SystemSetting.setting_key == key))
    setting = result.scalar_one_or_none()
    if setting is None:
        raise HTTPException(status_code=404, detail="Setting not found")
    return setting


@router.put("/{key}", response_model=SettingRead)
async def update_setting(
    key: str,
    body: SettingValue,
    response: Response,
    db: AsyncSession = Depends(get_db),
    _admin: CurrentUser = Depends(require_admin),
) -> SystemSetting:
    """Set one setting; 201 when the key did not exist yet."""
    setting, created = await _upsert(db, key, body.value, body.type)
    await db.commit()
    await db.refresh(setting)
    if created:
        response.status_code = 201
    return setting
