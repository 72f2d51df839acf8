"""Pydantic schemas for attendance marking and lookups."""

from __future__ import annotations

from datetime import date, time

from pydantic import BaseModel, field_validator

from hrms.models.employee import ATTENDANCE_LOCATIONS, ATTENDANCE_STATUSES


class AttendanceMark(BaseModel):
    employee_id: int
    date: date
    status: str
    check_in_time: time | None = None
    check_out_time: time | None = None
    location: str = "office"
    notes: str | None = None

    @field_validator("status")
    @classmethod
    def _status(cls, v: str) -> str:
        if v not in ATTENDANCE_STATUSES:
            raise ValueError(
                f"Invalid status. Must be one of: {', '.join(ATTENDANCE_STATUSES)}"
            )
        return v

    @field_validator("location")
    @classmethod
    def _location(cls, v: str) -> str:
        if v not in ATTENDANCE_LOCATIONS:
            raise ValueError(f"Location must be one of: {', '.join(ATTENDANCE_LOCATIONS)}")
        return v


class AttendanceRead(BaseModel):
    id: int
    employee_id: int
    date: date
    status: str
    check_in_time: time | None = None
    check_out_time: time | None = None
    location: str
    notes: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    employee_code: str | None = None
    department: str | None = None

    model_config = {"from_attributes": True}


class RosterEntry(BaseModel):
    """An active employee with their status for one day."""

    id: int
    employee_id: str
    first_name: str
    last_name: str
    department: str | None = None
    position: str | None = None
    attendance_id: int | None = None
    status: str
    check_in_time: time | None = None
    check_out_time: time | None = None
    location: str | None = None
    notes: str | None = None
