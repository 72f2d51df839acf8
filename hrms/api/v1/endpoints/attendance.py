"""
Attendance endpoints: one row per (employee, date).

Marking a day that already has a row updates it in place.  Any mark that
moves a day into or out of ``on_leave`` recomputes that month's payroll.
"""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.api.v1.deps import get_current_user, get_db, require_hr
from hrms.models.employee import Attendance, Employee
from hrms.schemas.attendance import AttendanceMark, AttendanceRead, RosterEntry
from hrms.schemas.user import CurrentUser
from hrms.services.activity import record_activity
from hrms.services.payroll import month_bounds, recalculate_for_months

router = APIRouter(prefix="/attendance", tags=["attendance"])
logger = logging.getLogger(__name__)


def _with_employee(att: Attendance, emp: Employee) -> AttendanceRead:
    read = AttendanceRead.model_validate(att)
    read.first_name = emp.first_name
    read.last_name = emp.last_name
    read.employee_code = emp.employee_id
    read.department = emp.department
    return read


async def _attendance_rows(db: AsyncSession, *conditions, limit: int | None = None) -> list[AttendanceRead]:
    stmt = (
        select(Attendance, Employee)
        .join(Employee, Attendance.employee_id == Employee.id)
        .where(*conditions)
        .order_by(Attendance.date.desc(), Employee.first_name, Employee.last_name)
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return [_with_employee(att, emp) for att, emp in result.all()]


# ── Mark ────────────────────────────────────────────────────────────
@router.post("", response_model=AttendanceRead)
async def mark_attendance(
    body: AttendanceMark,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_hr),
) -> AttendanceRead:
    """Create or update the attendance row for (employee_id, date)."""
    employee = await db.get(Employee, body.employee_id)
    if employee is None:
        raise HTTPException(status_code=404, detail="Employee not found")
    if employee.hire_date and body.date < employee.hire_date:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Cannot mark attendance before the employee's hire date "
                f"({employee.hire_date.isoformat()})"
            ),
        )

    result = await db.execute(
        select(Attendance).where(
            Attendance.employee_id == body.employee_id,
            Attendance.date == body.date,
        )
    )
    attendance = result.scalar_one_or_none()
    previous_status = attendance.status if attendance else None

    if attendance is None:
        attendance = Attendance(**body.model_dump())
        db.add(attendance)
    else:
        for field, value in body.model_dump(exclude={"employee_id", "date"}).items():
            setattr(attendance, field, value)

    record_activity(
        db,
        "attendance_marked",
        f"{employee.first_name} {employee.last_name} marked {body.status} on {body.date.isoformat()}",
        user_id=user.id,
        employee_id=employee.id,
        details={"status": body.status, "previous_status": previous_status},
    )
    await db.flush()

    if "on_leave" in (body.status, previous_status):
        await recalculate_for_months(db, employee.id, [(body.date.year, body.date.month)])

    await db.commit()
    await db.refresh(attendance)
    return _with_employee(attendance, employee)


# ── Queries ─────────────────────────────────────────────────────────
@router.get("/employees", response_model=list[RosterEntry])
async def attendance_roster(
    day: date | None = Query(default=None, alias="date"),
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
) -> list[RosterEntry]:
    """Active employees with their status for *date* (``present`` when unmarked)."""
    day = day or date.today()
    result = await db.execute(
        select(Employee, Attendance)
        .outerjoin(
            Attendance,
            (Attendance.employee_id == Employee.id) & (Attendance.date == day),
        )
        .where(Employee.status == "active")
        .order_by(Employee.first_name, Employee.last_name)
    )
    return [
        RosterEntry(
            id=emp.id,
            employee_id=emp.employee_id,
            first_name=emp.first_name,
            last_name=emp.last_name,
            department=emp.department,
            position=emp.position,
            attendance_id=att.id if att else None,
            status=att.status if att else "present",
            check_in_time=att.check_in_time if att else None,
            check_out_time=att.check_out_time if att else None,
            location=att.location if att else None,
            notes=att.notes if att else None,
        )
        for emp, att in result.all()
    ]


@router.get("/daily/{day}", response_model=list[AttendanceRead])
async def daily_attendance(
    day: date,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
) -> list[AttendanceRead]:
    """All attendance rows for one day."""
    return await _attendance_rows(db, Attendance.date == day)


@router.get("/monthly/{year}/{month}", response_model=list[AttendanceRead])
async def monthly_attendance(
    year: int,
    month: int,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
) -> list[AttendanceRead]:
    """All attendance rows in a calendar month."""
    if not 1 <= month <= 12:
        raise HTTPException(status_code=400, detail="Month must be between 1 and 12")
    start, end = month_bounds(year, month)
    return await _attendance_rows(db, Attendance.date.between(start, end))


@router.get("/employee/{employee_id}", response_model=list[AttendanceRead])
async def employee_attendance(
    employee_id: int,
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
) -> list[AttendanceRead]:
    """One employee's attendance history (latest 100 rows)."""
    conditions = [Attendance.employee_id == employee_id]
    if start_date:
        conditions.append(Attendance.date >= start_date)
    if end_date:
        conditions.append(Attendance.date <= end_date)
    return await _attendance_rows(db, *conditions, limit=100)


@router.get("/{attendance_id}", response_model=AttendanceRead)
async def get_attendance(
    attendance_id: int,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
) -> AttendanceRead:
    """Fetch a single attendance row."""
    rows = await _attendance_rows(db, Attendance.id == attendance_id)
    if not rows:
        raise HTTPException(status_code=404, detail="Attendance record not found")
    return rows[0]
