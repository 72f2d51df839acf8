"""
Monthly performance endpoints: manual entry or derivation from attendance.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.api.v1.deps import get_current_user, get_db, require_hr
from hrms.models.employee import Employee
from hrms.models.performance import Performance
from hrms.schemas.common import DeleteResponse
from hrms.schemas.performance import (PerformanceCalculateRequest,
                                      PerformanceRead, PerformanceUpsert)
from hrms.schemas.user import CurrentUser
from hrms.services.performance import clamp_percentage, recalculate_performance

router = APIRouter(prefix="/performance", tags=["performance"])
logger = logging.getLogger(__name__)


def _with_employee(row: Performance, emp: Employee) -> PerformanceRead:
    read = PerformanceRead.model_validate(row)
    read.first_name = emp.first_name
    read.last_name = emp.last_name
    read.employee_code = emp.employee_id
    read.department = emp.department
    return read


async def _performance_rows(db: AsyncSession, *conditions) -> list[PerformanceRead]:
    result = await db.execute(
        select(Performance, Employee)
        .join(Employee, Performance.employee_id == Employee.id)
        .where(*conditions)
        .order_by(Performance.year.desc(), Performance.month.desc(), Employee.first_name)
    )
    return [_with_employee(row, emp) for row, emp in result.all()]


@router.get("/monthly", response_model=list[PerformanceRead])
async def monthly_performance(
    month: int = Query(ge=1, le=12),
    year: int = Query(ge=2000, le=2100),
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
) -> list[PerformanceRead]:
    """Performance rows for every employee in one month."""
    return await _performance_rows(db, Performance.month == month, Performance.year == year)


@router.get("/employee/{employee_id}", response_model=list[PerformanceRead])
async def employee_performance(
    employee_id: int,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
) -> list[PerformanceRead]:
    """Performance history of one employee."""
    return await _performance_rows(db, Performance.employee_id == employee_id)


@router.post("", response_model=PerformanceRead)
async def upsert_performance(
    body: PerformanceUpsert,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(require_hr),
) -> PerformanceRead:
    """Record performance figures for (employee, month, year) by hand."""
    employee = await db.get(Employee, body.employee_id)
    if employee is None:
        raise HTTPException(status_code=404, detail="Employee not found")

    result = await db.execute(
        select(Performance).where(
            Performance.employee_id == body.employee_id,
            Performance.month == body.month,
            Performance.year == body.year,
        )
    )
    row = result.scalar_one_or_none()
    if row is None:
        row = Performance(employee_id=body.employee_id, month=body.month, year=body.year)
        db.add(row)
    for field, value in body.model_dump(exclude={"employee_id", "month", "year"}).items():
        setattr(row, field, value)
    row.performance_percentage = clamp_percentage(body.performance_percentage)
    await db.commit()
    await db.refresh(row)
    return _with_employee(row, employee)


@router.post("/calculate", response_model=list[PerformanceRead])
async def calculate_performance(
    body: PerformanceCalculateRequest,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(require_hr),
) -> list[PerformanceRead]:
    """Derive performance from attendance for one employee, or every active one."""
    if body.employee_id is not None:
        employee = await db.get(Employee, body.employee_id)
        if employee is None:
            raise HTTPException(status_code=404, detail="Employee not found")
        employees = [employee]
    else:
        result = await db.execute(select(Employee).where(Employee.status == "active"))
        employees = list(result.scalars().all())

    rows = []
    for employee in employees:
        row = await recalculate_performance(db, employee, body.month, body.year)
        rows.append((row, employee))
    await db.commit()
    logger.info(
        "Performance calculated for %d employees (%02d/%d)", len(rows), body.month, body.year
    )
    return [_with_employee(row, emp) for row, emp in rows]


@router.delete("/{performance_id}", response_model=DeleteResponse)
async def delete_performance(
    performance_id: int,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(require_hr),
) -> DeleteResponse:
    """Delete a performance row."""
    row = await db.get(Performance, performance_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Performance record not found")
    await db.delete(row)
    await db.commit()
    return DeleteResponse(message="Performance record deleted", id=performance_id)
