"""
Monthly performance derivation from attendance.

``compute_performance`` is pure; ``recalculate_performance`` loads one
employee-month of attendance and upserts the ``Performance`` row.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.core.config import settings
from hrms.models.employee import Attendance, Employee
from hrms.models.performance import Performance
from hrms.services.payroll import month_bounds, round_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PerformanceFigures:
    total_working_days: int
    present_days: int
    absent_days: int
    late_days: int
    on_leave_days: int
    total_working_hours: float
    expected_working_hours: float
    performance_percentage: float


def clamp_percentage(value: float) -> float:
    return float(round_money(min(100.0, max(0.0, value))))


def count_working_days(start: date, end: date) -> int:
    """Count business days (Mon-Fri) in the inclusive range."""
    if end < start:
        return 0
    days = 0
    current = start
    while current <= end:
        if current.weekday() < 5:
            days += 1
        current += timedelta(days=1)
    return days


def hours_worked(
    check_in: time | None, check_out: time | None, workday_hours: float
) -> float:
    """Hours between check-in and check-out; a full workday when either is missing."""
    if check_in is None or check_out is None:
        return workday_hours
    start = datetime.combine(date.min, check_in)
    end = datetime.combine(date.min, check_out)
    if end <= start:
        return 0.0
    return (end - start).total_seconds() / 3600


def compute_performance(
    records: Iterable[Attendance],
    working_days: int,
    workday_hours: float | None = None,
) -> PerformanceFigures:
    workday_hours = settings.STANDARD_WORKDAY_HOURS if workday_hours is None else workday_hours
    counts = {"present": 0, "absent": 0, "late": 0, "on_leave": 0}
    actual = 0.0
    for record in records:
        counts[record.status] = counts.get(record.status, 0) + 1
        if record.status in ("present", "late"):
            actual += hours_worked(record.check_in_time, record.check_out_time, workday_hours)

    expected = max(working_days - counts["on_leave"], 0) * workday_hours
    percentage = clamp_percentage(actual / expected * 100) if expected > 0 else 0.0
    return PerformanceFigures(
        total_working_days=working_days,
        present_days=counts["present"],
        absent_days=counts["absent"],
        late_days=counts["late"],
        on_leave_days=counts["on_leave"],
        total_working_hours=round(actual, 2),
        expected_working_hours=round(expected, 2),
        performance_percentage=percentage,
    )


async def recalculate_performance(
    db: AsyncSession, employee: Employee, month: int, year: int
) -> Performance:
    """Derive and upsert the performance row for one employee-month.

    Working days run from the later of the month start and the hire date.
    The caller commits.
    """
    start, end = month_bounds(year, month)
    if employee.hire_date and employee.hire_date > start:
        start = employee.hire_date

    result = await db.execute(
        select(Attendance).where(
            Attendance.employee_id == employee.id,
            Attendance.date.between(start, end),
        )
    )
    figures = compute_performance(result.scalars().all(), count_working_days(start, end))

    existing = (
        await db.execute(
            select(Performance).where(
                Performance.employee_id == employee.id,
                Performance.month == month,
                Performance.year == year,
            )
        )
    ).scalar_one_or_none()
    row = existing or Performance(employee_id=employee.id, month=month, year=year)
    for field, value in asdict(figures).items():
        setattr(row, field, value)
    row.calculated_at = datetime.now(timezone.utc)
    if existing is None:
        db.add(row)
    await db.flush()
    logger.info(
        "Performance for employee %s (%02d/%d): %.2f%%",
        employee.id,
        month,
        year,
        figures.performance_percentage,
    )
    return row
