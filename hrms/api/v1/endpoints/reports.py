"""
Reporting endpoints: employees, attendance, leaves and payroll.

Each report is one joined SQL query; attendance can also be streamed as CSV.
"""

from __future__ import annotations

import csv
import io
import logging
from collections import Counter
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.api.v1.deps import get_db, require_hr
from hrms.models.employee import Attendance, Employee
from hrms.models.leave import Leave
from hrms.models.payroll import Payroll
from hrms.schemas.user import CurrentUser

router = APIRouter(prefix="/reports", tags=["reports"])
logger = logging.getLogger(__name__)


def _name(emp: Employee) -> str:
    return f"{emp.first_name} {emp.last_name}"


# ── Employees ───────────────────────────────────────────────────────
@router.get("/employees")
async def employee_report(
    department: str | None = Query(default=None),
    status: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(require_hr),
) -> dict:
    """Employee roster with counts per department and status."""
    stmt = select(Employee).order_by(Employee.department, Employee.first_name)
    if department:
        stmt = stmt.where(Employee.department == department)
    if status:
        stmt = stmt.where(Employee.status == status)
    employees = list((await db.execute(stmt)).scalars().all())
    return {
        "total": len(employees),
        "by_department": dict(Counter(e.department or "Unassigned" for e in employees)),
        "by_status": dict(Counter(e.status for e in employees)),
        "employees": [
            {
                "id": e.id,
                "employee_id": e.employee_id,
                "name": _name(e),
                "email": e.email,
                "department": e.department,
                "position": e.position,
                "status": e.status,
                "hire_date": e.hire_date.isoformat() if e.hire_date else None,
                "salary": e.salary,
            }
            for e in employees
        ],
    }


# ── Attendance ──────────────────────────────────────────────────────
@router.get("/attendance")
async def attendance_report(
    start_date: date = Query(...),
    end_date: date = Query(...),
    employee_id: int | None = Query(default=None),
    format: str = Query(default="json", pattern="^(json|csv)$"),
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(require_hr),
):
    """Attendance rows in a date range, as JSON or a CSV download."""
    if start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must be on or before end_date")

    stmt = (
        select(Attendance, Employee)
        .join(Employee, Attendance.employee_id == Employee.id)
        .where(Attendance.date.between(start_date, end_date))
        .order_by(Attendance.date, Employee.first_name, Employee.last_name)
    )
    if employee_id is not None:
        stmt = stmt.where(Attendance.employee_id == employee_id)
    rows = (await db.execute(stmt)).all()

    if format == "csv":

        def iter_csv():
            buffer = io.StringIO()
            writer = csv.writer(buffer)
            writer.writerow(
                ["date", "employee_id", "name", "department", "status", "check_in", "check_out", "location"]
            )
            for att, emp in rows:
                writer.writerow(
                    [
                        att.date.isoformat(),
                        emp.employee_id,
                        _name(emp),
                        emp.department or "",
                        att.status,
                        att.check_in_time.strftime("%H:%M") if att.check_in_time else "",
                        att.check_out_time.strftime("%H:%M") if att.check_out_time else "",
                        att.location,
                    ]
                )
                yield buffer.getvalue()
                buffer.seek(0)
                buffer.truncate(0)
            remainder = buffer.getvalue()
            if remainder:
                yield remainder

        return StreamingResponse(
            iter_csv(),
            media_type="text/csv",
            headers={
                "Content-Disposition": (
                    f"attachment; filename=attendance_{start_date.isoformat()}_{end_date.isoformat()}.csv"
                )
            },
        )

    return {
        "start_date": start_date.isoformat(),
        "end_date": end_date.isoformat(),
        "total": len(rows),
        "by_status": dict(Counter(att.status for att, _ in rows)),
        "records": [
            {
                "id": att.id,
                "date": att.date.isoformat(),
                "employee_id": att.employee_id,
                "employee_code": emp.employee_id,
                "name": _name(emp),
                "department": emp.department,
                "status": att.status,
                "check_in_time": att.check_in_time.isoformat() if att.check_in_time else None,
                "check_out_time": att.check_out_time.isoformat() if att.check_out_time else None,
                "location": att.location,
            }
            for att, emp in rows
        ],
    }


# ── Leaves ──────────────────────────────────────────────────────────
@router.get("/leaves")
async def leave_report(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    status: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(require_hr),
) -> dict:
    """Leave requests overlapping a date range, with totals by status and type."""
    stmt = (
        select(Leave, Employee)
        .join(Employee, Leave.employee_id == Employee.id)
        .order_by(Leave.start_date.desc())
    )
    if start_date:
        stmt = stmt.where(Leave.end_date >= start_date)
    if end_date:
        stmt = stmt.where(Leave.start_date <= end_date)
    if status:
        stmt = stmt.where(Leave.status == status)
    rows = (await db.execute(stmt)).all()
    return {
        "total": len(rows),
        "total_days": sum(leave.days for leave, _ in rows),
        "by_status": dict(Counter(leave.status for leave, _ in rows)),
        "by_type": dict(Counter(leave.leave_type for leave, _ in rows)),
        "leaves": [
            {
                "id": leave.id,
                "employee_id": leave.employee_id,
                "employee_code": emp.employee_id,
                "name": _name(emp),
                "leave_type": leave.leave_type,
                "start_date": leave.start_date.isoformat(),
                "end_date": leave.end_date.isoformat(),
                "days": leave.days,
                "status": leave.status,
            }
            for leave, emp in rows
        ],
    }


# ── Payroll ─────────────────────────────────────────────────────────
@router.get("/payroll")
async def payroll_report(
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(require_hr),
) -> dict:
    """Payroll rows with gross, deduction and net totals."""
    stmt = (
        select(Payroll, Employee)
        .join(Employee, Payroll.employee_id == Employee.id)
        .order_by(Payroll.year.desc(), Payroll.month.desc(), Employee.first_name)
    )
    if month is not None:
        stmt = stmt.where(Payroll.month == month)
    if year is not None:
        stmt = stmt.where(Payroll.year == year)
    rows = (await db.execute(stmt)).all()
    return {
        "total": len(rows),
        "total_gross": round(sum(p.gross_salary for p, _ in rows), 2),
        "total_tds": round(sum(p.tds or 0 for p, _ in rows), 2),
        "total_deductions": round(sum(p.deductions or 0 for p, _ in rows), 2),
        "total_net": round(sum(p.net_salary or 0 for p, _ in rows), 2),
        "payroll": [
            {
                "id": p.id,
                "employee_id": p.employee_id,
                "employee_code": emp.employee_id,
                "name": _name(emp),
                "department": emp.department,
                "month": p.month,
                "year": p.year,
                "gross_salary": p.gross_salary,
                "tds": p.tds,
                "leave_deduction": p.leave_deduction,
                "deductions": p.deductions,
                "net_salary": p.net_salary,
                "status": p.status,
            }
            for p, emp in rows
        ],
    }
