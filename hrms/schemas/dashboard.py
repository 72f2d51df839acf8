"""Pydantic schemas for dashboard, activity feed and health."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel


class TodayAttendance(BaseModel):
    present: int = 0
    absent: int = 0
    late: int = 0
    on_leave: int = 0


class DashboardStats(BaseModel):
    total_employees: int
    active_employees: int
    on_leave: int
    pending_leaves: int
    active_job_postings: int
    today: TodayAttendance


class DailyAttendanceCount(TodayAttendance):
    date: date


class ActivityRead(BaseModel):
    id: int
    type: str
    description: str
    user_id: int | None = None
    employee_id: int | None = None
    metadata: dict | None = None
    created_at: datetime | None = None
    user_email: str | None = None
    employee_name: str | None = None


class HealthResponse(BaseModel):
    status: str
    db: bool
    environment: str
