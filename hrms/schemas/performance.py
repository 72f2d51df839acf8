"""Pydantic schemas for monthly performance."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class PerformanceUpsert(BaseModel):
    employee_id: int
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=2100)
    performance_percentage: float = Field(ge=0, le=100)
    total_working_days: int = Field(default=0, ge=0)
    present_days: int = Field(default=0, ge=0)
    absent_days: int = Field(default=0, ge=0)
    late_days: int = Field(default=0, ge=0)
    on_leave_days: int = Field(default=0, ge=0)
    total_working_hours: float = Field(default=0, ge=0)
    expected_working_hours: float = Field(default=0, ge=0)


class PerformanceCalculateRequest(BaseModel):
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=2100)
    employee_id: int | None = None


class PerformanceRead(BaseModel):
    id: int
    employee_id: int
    month: int
    year: int
    total_working_days: int
    present_days: int
    absent_days: int
    late_days: int
    on_leave_days: int
    total_working_hours: float
    expected_working_hours: float
    performance_percentage: float
    calculated_at: datetime | None = None
    updated_at: datetime | None = None
    first_name: str | None = None
    last_name: str | None = None
    employee_code: str | None = None
    department: str | None = None

    model_config = {"from_attributes": True}
