"""
Dashboard statistics.

Each endpoint fetches its counts in grouped SQL queries and fills gaps in
Python rather than issuing one query per day or per status.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.api.v1.deps import get_current_user, get_db
from hrms.models.employee import Attendance, Employee
from hrms.models.leave import Leave
from hrms.models.recruitment import JobPosting
from hrms.schemas.dashboard import (DailyAttendanceCount, DashboardStats,
                                    TodayAttendance)
from hrms.schemas.user import CurrentUser

router = APIRouter(prefix="/dashboard", tags=["dashboard"])
logger = logging.getLogger(__name__)


async def _count(db: AsyncSession, stmt) -> int:
    return int((await db.execute(stmt)).scalar_one() or 0)


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
) -> DashboardStats:
    """Head-count, leave and today's attendance summary."""
    today = date.today()
    by_status = dict(
        (await db.execute(select(Employee.status, func.count(Employee.id)).group_by(Employee.status))).all()
    )
    today_counts = dict(
        (
            await db.execute(
                select(Attendance.status, func.count(Attendance.id))
                .where(Attendance.date == today)
                .group_by(Attendance.status)
            )
        ).all()
    )
    pending_leaves = await _count(
        db, select(func.count(Leave.id)).where(Leave.status == "pending")
    )
    active_jobs = await _count(
        db, select(func.count(JobPosting.id)).where(JobPosting.status == "active")
    )
    return DashboardStats(
        total_employees=sum(by_status.values()),
        active_employees=by_status.get("active", 0),
        on_leave=by_status.get("on_leave", 0),
        pending_leaves=pending_leaves,
        active_job_postings=active_jobs,
        today=TodayAttendance(**today_counts),
    )


@router.get("/attendance-stats", response_model=list[DailyAttendanceCount])
async def attendance_stats(
    days: int = Query(default=7, ge=1, le=90),
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
) -> list[DailyAttendanceCount]:
    """Per-day attendance counts for the last *days* days, oldest first."""
    end = date.today()
    start = end - timedelta(days=days - 1)
    result = await db.execute(
        select(Attendance.date, Attendance.status, func.count(Attendance.id))
        .where(Attendance.date.between(start, end))
        .group_by(Attendance.date, Attendance.status)
    )
    counts: dict[date, dict[str, int]] = {}
    for day, status, count in result.all():
        counts.setdefault(day, {})[status] = count

    return [
        DailyAttendanceCount(date=start + timedelta(days=i), **counts.get(start + timedelta(days=i), {}))
        for i in range(days)
    ]
