"""
Payroll endpoints.

Every write goes through ``services.payroll.upsert_payroll`` so TDS, leave
deduction and net salary are always derived, never taken from the client.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.api.v1.deps import get_current_user, get_db, require_admin, require_hr
from hrms.core.config import settings
from hrms.models.employee import Employee
from hrms.models.payroll import PAYROLL_STATUSES, Payroll
from hrms.schemas.common import DeleteResponse
from hrms.schemas.payroll import (PayrollCreate, PayrollProcessRequest,
                                  PayrollProcessResponse, PayrollRead,
                                  PayrollUpdate)
from hrms.schemas.user import CurrentUser
from hrms.services.activity import record_activity
from hrms.services.payroll import (PayrollFigures, calculate_payroll,
                                   count_leave_days, upsert_payroll)

router = APIRouter(prefix="/payroll", tags=["payroll"])
logger = logging.getLogger(__name__)


def _read(payroll: Payroll, emp: Employee, leave_days: int | None = None) -> PayrollRead:
    return PayrollRead(
        id=payroll.id,
        employee_id=payroll.employee_id,
        month=payroll.month,
        year=payroll.year,
        basic_salary=payroll.basic_salary or 0,
        allowances=payroll.allowances or 0,
        gross_salary=payroll.gross_salary,
        other_deductions=payroll.other_deductions or 0,
        leave_deduction=payroll.leave_deduction or 0,
        leave_days=leave_days,
        tds=payroll.tds or 0,
        deductions=payroll.deductions or 0,
        net_salary=payroll.net_salary or 0,
        status=payroll.status,
        processed_at=payroll.processed_at,
        processed_by=payroll.processed_by,
        first_name=emp.first_name,
        last_name=emp.last_name,
        employee_code=emp.employee_id,
        department=emp.department,
    )


def _preview(emp: Employee, month: int, year: int, figures: PayrollFigures) -> PayrollRead:
    """Unsaved payroll row for an employee with no payroll in the period."""
    return PayrollRead(
        employee_id=emp.id,
        month=month,
        year=year,
        basic_salary=figures.basic_salary,
        allowances=figures.allowances,
        gross_salary=figures.gross_salary,
        other_deductions=figures.other_deductions,
        leave_deduction=figures.leave_deduction,
        leave_days=figures.leave_days,
        tds=figures.tds,
        deductions=figures.deductions,
        net_salary=figures.net_salary,
        status="pending",
        first_name=emp.first_name,
        last_name=emp.last_name,
        employee_code=emp.employee_id,
        department=emp.department,
    )


async def _get_payroll_or_404(db: AsyncSession, payroll_id: int) -> tuple[Payroll, Employee]:
    result = await db.execute(
        select(Payroll, Employee)
        .join(Employee, Payroll.employee_id == Employee.id)
        .where(Payroll.id == payroll_id)
    )
    row = result.first()
    if row is None:
        raise HTTPException(status_code=404, detail="Payroll record not found")
    return row[0], row[1]


# ── Queries ─────────────────────────────────────────────────────────
@router.get("", response_model=list[PayrollRead])
async def list_payroll(
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None),
    status: str | None = Query(default=None),
    employee_id: int | None = Query(default=None),
    all_employees: bool = Query(default=False),
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(require_hr),
) -> list[PayrollRead]:
    """List payroll rows.

    With ``all_employees=true`` (requires month and year) every active employee
    is listed; those without a row get an unsaved preview.
    """
    if status is not None and status not in PAYROLL_STATUSES:
        raise HTTPException(
            status_code=400, detail=f"Status must be one of: {', '.join(PAYROLL_STATUSES)}"
        )

    if all_employees:
        if month is None or year is None:
            raise HTTPException(
                status_code=400, detail="month and year are required with all_employees"
            )
        result = await db.execute(
            select(Employee, Payroll)
            .outerjoin(
                Payroll,
                (Payroll.employee_id == Employee.id)
                & (Payroll.month == month)
                & (Payroll.year == year),
            )
            .where(Employee.status == "active")
            .order_by(Employee.first_name, Employee.last_name)
        )
        rows: list[PayrollRead] = []
        for emp, payroll in result.all():
            if payroll is not None:
                if status and payroll.status != status:
                    continue
                rows.append(_read(payroll, emp))
                continue
            if status and status != "pending":
                continue
            leave_days = await count_leave_days(db, emp.id, month, year)
            basic = float(emp.salary or 0)
            figures = calculate_payroll(
                basic, basic * settings.DEFAULT_ALLOWANCE_RATE, 0, leave_days
            )
            rows.append(_preview(emp, month, year, figures))
        return rows

    stmt = (
        select(Payroll, Employee)
        .join(Employee, Payroll.employee_id == Employee.id)
        .order_by(Payroll.year.desc(), Payroll.month.desc(), Employee.first_name)
    )
    if month is not None:
        stmt = stmt.where(Payroll.month == month)
    if year is not None:
        stmt = stmt.where(Payroll.year == year)
    if status:
        stmt = stmt.where(Payroll.status == status)
    if employee_id is not None:
        stmt = stmt.where(Payroll.employee_id == employee_id)
    result = await db.execute(stmt)
    return [_read(payroll, emp) for payroll, emp in result.all()]


@router.get("/{payroll_id}", response_model=PayrollRead)
async def get_payroll(
    payroll_id: int,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(require_hr),
) -> PayrollRead:
    """Fetch one payroll row with its current leave-day count."""
    payroll, emp = await _get_payroll_or_404(db, payroll_id)
    leave_days = await count_leave_days(db, emp.id, payroll.month, payroll.year)
    return _read(payroll, emp, leave_days)


# ── Writes ──────────────────────────────────────────────────────────
@router.post("", response_model=PayrollRead)
async def create_payroll(
    body: PayrollCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_hr),
) -> PayrollRead:
    """Create or overwrite the payroll row for (employee, month, year)."""
    employee = await db.get(Employee, body.employee_id)
    if employee is None:
        raise HTTPException(status_code=404, detail="Employee not found")

    payroll, figures, created = await upsert_payroll(
        db,
        employee,
        body.month,
        body.year,
        basic_salary=body.basic_salary,
        allowances=body.allowances,
        other_deductions=body.other_deductions,
    )
    record_activity(
        db,
        "payroll_created" if created else "payroll_updated",
        f"Payroll for {employee.first_name} {employee.last_name} "
        f"({body.month:02d}/{body.year}) net {figures.net_salary:.2f}",
        user_id=user.id,
        employee_id=employee.id,
        details={"payroll_id": payroll.id, "net_salary": figures.net_salary},
    )
    await db.commit()
    await db.refresh(payroll)
    return _read(payroll, employee, figures.leave_days)


@router.put("/{payroll_id}", response_model=PayrollRead)
async def update_payroll(
    payroll_id: int,
    body: PayrollUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_hr),
) -> PayrollRead:
    """Change pay components or status; derived fields are recomputed."""
    payroll, employee = await _get_payroll_or_404(db, payroll_id)
    payroll, figures, _created = await upsert_payroll(
        db,
        employee,
        payroll.month,
        payroll.year,
        basic_salary=body.basic_salary,
        allowances=body.allowances,
        other_deductions=body.other_deductions,
        status=body.status,
        processed_by=user.id,
    )
    await db.commit()
    await db.refresh(payroll)
    return _read(payroll, employee, figures.leave_days)


@router.post("/process", response_model=PayrollProcessResponse)
async def process_payroll(
    body: PayrollProcessRequest,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
) -> PayrollProcessResponse:
    """Generate processed payroll for every active employee without one."""
    result = await db.execute(
        select(Employee)
        .outerjoin(
            Payroll,
            (Payroll.employee_id == Employee.id)
            & (Payroll.month == body.month)
            & (Payroll.year == body.year),
        )
        .where(Employee.status == "active", Payroll.id.is_(None))
    )
    employees = list(result.scalars().all())

    processed = 0
    for employee in employees:
        basic = float(employee.salary or 0)
        if basic <= 0:
            logger.warning("Skipping payroll for employee %s: no salary set", employee.id)
            continue
        await upsert_payroll(
            db,
            employee,
            body.month,
            body.year,
            allowances=basic * settings.DEFAULT_ALLOWANCE_RATE,
            other_deductions=basic * settings.DEFAULT_DEDUCTION_RATE,
            status="processed",
            processed_by=admin.id,
        )
        processed += 1

    record_activity(
        db,
        "payroll_processed",
        f"Payroll processed for {processed} employees ({body.month:02d}/{body.year})",
        user_id=admin.id,
        details={"month": body.month, "year": body.year, "count": processed},
    )
    await db.commit()
    logger.info("Processed payroll for %d employees (%02d/%d)", processed, body.month, body.year)
    return PayrollProcessResponse(
        message=f"Payroll processed for {processed} employees", processed=processed
    )


@router.delete("/{payroll_id}", response_model=DeleteResponse)
async def delete_payroll(
    payroll_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: CurrentUser = Depends(require_admin),
) -> DeleteResponse:
    """Delete a payroll row."""
    payroll, _employee = await _get_payroll_or_404(db, payroll_id)
    await db.delete(payroll)
    await db.commit()
    return DeleteResponse(message="Payroll record deleted", id=payroll_id)
