"""
Leave request endpoints.

Requests filed by admin / hr_executive are approved immediately; everyone
else's start as ``pending``.  Only an admin can decide a pending request, and
every decision recomputes payroll for the months the leave touches.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.api.v1.deps import get_current_user, get_db, require_admin
from hrms.models.employee import Employee
from hrms.models.leave import LEAVE_STATUSES, Leave
from hrms.schemas.leave import LeaveCreate, LeaveRead, LeaveRejection
from hrms.schemas.user import CurrentUser
from hrms.services.activity import record_activity
from hrms.services.payroll import months_between, recalculate_for_months

router = APIRouter(prefix="/leaves", tags=["leaves"])
logger = logging.getLogger(__name__)

_AUTO_APPROVE_ROLES = {"admin", "hr_executive"}


def _with_employee(leave: Leave, emp: Employee) -> LeaveRead:
    read = LeaveRead.model_validate(leave)
    read.first_name = emp.first_name
    read.last_name = emp.last_name
    read.employee_code = emp.employee_id
    return read


async def _own_employee_id(db: AsyncSession, user: CurrentUser) -> int | None:
    """Employee row linked to a self-service user by email."""
    result = await db.execute(
        select(Employee.id).where(Employee.email == user.email.lower())
    )
    return result.scalar_one_or_none()


async def _leave_rows(db: AsyncSession, *conditions) -> list[LeaveRead]:
    result = await db.execute(
        select(Leave, Employee)
        .join(Employee, Leave.employee_id == Employee.id)
        .where(*conditions)
        .order_by(Leave.created_at.desc(), Leave.id.desc())
    )
    return [_with_employee(leave, emp) for leave, emp in result.all()]


async def _get_leave_or_404(db: AsyncSession, leave_id: int) -> tuple[Leave, Employee]:
    result = await db.execute(
        select(Leave, Employee)
        .join(Employee, Leave.employee_id == Employee.id)
        .where(Leave.id == leave_id)
    )
    row = result.first()
    if row is None:
        raise HTTPException(status_code=404, detail="Leave request not found")
    return row[0], row[1]


async def _recalculate(db: AsyncSession, leave: Leave) -> None:
    await recalculate_for_months(
        db, leave.employee_id, months_between(leave.start_date, leave.end_date)
    )


# ── Apply ───────────────────────────────────────────────────────────
@router.post("", response_model=LeaveRead, status_code=201)
async def apply_leave(
    body: LeaveCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> LeaveRead:
    """File a leave request."""
    employee = await db.get(Employee, body.employee_id)
    if employee is None:
        raise HTTPException(status_code=404, detail="Employee not found")
    if user.role not in _AUTO_APPROVE_ROLES and await _own_employee_id(db, user) != employee.id:
        raise HTTPException(
            status_code=403, detail="You can only apply for leave for yourself"
        )

    leave = Leave(**body.model_dump(), applied_by=user.id)
    if user.role in _AUTO_APPROVE_ROLES:
        leave.status = "approved"
        leave.approved_by = user.id
        leave.approved_at = datetime.now(timezone.utc)
    else:
        leave.status = "pending"
    db.add(leave)
    await db.flush()

    record_activity(
        db,
        "leave_applied",
        f"{employee.first_name} {employee.last_name} applied for {leave.leave_type} leave",
        user_id=user.id,
        employee_id=employee.id,
        details={"leave_id": leave.id, "status": leave.status},
    )
    await _recalculate(db, leave)
    await db.commit()
    await db.refresh(leave)
    logger.info("Leave %s filed for employee %s (%s)", leave.id, employee.id, leave.status)
    return _with_employee(leave, employee)


# ── Queries ─────────────────────────────────────────────────────────
@router.get("", response_model=list[LeaveRead])
async def list_leaves(
    status: str | None = Query(default=None),
    employee_id: int | None = Query(default=None),
    upcoming: bool = Query(default=False),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> list[LeaveRead]:
    """List leave requests; self-service users only see their own."""
    if status is not None and status not in LEAVE_STATUSES:
        raise HTTPException(
            status_code=400, detail=f"Status must be one of: {', '.join(LEAVE_STATUSES)}"
        )
    conditions = []
    if user.role not in _AUTO_APPROVE_ROLES:
        own = await _own_employee_id(db, user)
        if own is None:
            return []
        conditions.append(Leave.employee_id == own)
    if status:
        conditions.append(Leave.status == status)
    if employee_id is not None:
        conditions.append(Leave.employee_id == employee_id)
    if upcoming:
        conditions.append(Leave.end_date >= date.today())
    return await _leave_rows(db, *conditions)


@router.get("/employee/{employee_id}", response_model=list[LeaveRead])
async def employee_leaves(
    employee_id: int,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
) -> list[LeaveRead]:
    """All leave requests of one employee."""
    return await _leave_rows(db, Leave.employee_id == employee_id)


@router.get("/{leave_id}", response_model=LeaveRead)
async def get_leave(
    leave_id: int,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
) -> LeaveRead:
    """Fetch a single leave request."""
    leave, employee = await _get_leave_or_404(db, leave_id)
    return _with_employee(leave, employee)


# ── Decisions (admin only) ──────────────────────────────────────────
async def _decide(
    db: AsyncSession,
    leave_id: int,
    user: CurrentUser,
    new_status: str,
    rejection_reason: str | None = None,
) -> LeaveRead:
    leave, employee = await _get_leave_or_404(db, leave_id)
    if leave.status != "pending":
        raise HTTPException(
            status_code=400, detail=f"Leave request is already {leave.status}"
        )
    leave.status = new_status
    leave.approved_by = user.id
    leave.approved_at = datetime.now(timezone.utc)
    if new_status == "rejected":
        leave.rejection_reason = rejection_reason

    record_activity(
        db,
        f"leave_{new_status}",
        f"{leave.leave_type} leave for {employee.first_name} {employee.last_name} {new_status}",
        user_id=user.id,
        employee_id=employee.id,
        details={"leave_id": leave.id, "rejection_reason": rejection_reason},
    )
    await db.flush()
    await _recalculate(db, leave)
    await db.commit()
    await db.refresh(leave)
    logger.info("Leave %s %s by user %s", leave.id, new_status, user.id)
    return _with_employee(leave, employee)


@router.api_route("/{leave_id}/approve", methods=["POST", "PUT"], response_model=LeaveRead)
async def approve_leave(
    leave_id: int,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
) -> LeaveRead:
    """Approve a pending leave request."""
    return await _decide(db, leave_id, admin, "approved")


@router.api_route("/{leave_id}/reject", methods=["POST", "PUT"], response_model=LeaveRead)
async def reject_leave(
    leave_id: int,
    body: LeaveRejection | None = None,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
) -> LeaveRead:
    """Reject a pending leave request."""
    reason = body.rejection_reason if body else None
    return await _decide(db, leave_id, admin, "rejected", reason)
