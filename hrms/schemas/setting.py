"""Pydantic schemas for key-value settings."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class SettingRead(BaseModel):
    setting_key: str
    setting_value: str | None
    setting_type: str
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class SettingValue(BaseModel):
    value: str | None
    type: str | None = None


class SettingItem(BaseModel):
    key: str = Field(min_length=1, max_length=100)
    value: str | None
    type: str | None = None


class SettingsBulkUpdate(BaseModel):
    settings: list[SettingItem]
