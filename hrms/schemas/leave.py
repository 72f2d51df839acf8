"""Pydantic schemas for leave requests."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, field_validator, model_validator


class LeaveCreate(BaseModel):
    employee_id: int
    leave_type: str
    start_date: date
    end_date: date
    reason: str | None = None

    @field_validator("leave_type")
    @classmethod
    def _leave_type(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Leave type must not be empty")
        return v

    @model_validator(mode="after")
    def _date_range(self) -> "LeaveCreate":
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class LeaveRejection(BaseModel):
    rejection_reason: str | None = None


class LeaveRead(BaseModel):
    id: int
    employee_id: int
    leave_type: str
    start_date: date
    end_date: date
    days: int
    reason: str | None = None
    status: str
    applied_by: int | None = None
    approved_by: int | None = None
    approved_at: datetime | None = None
    rejection_reason: str | None = None
    created_at: datetime | None = None
    first_name: str | None = None
    last_name: str | None = None
    employee_code: str | None = None

    model_config = {"from_attributes": True}
