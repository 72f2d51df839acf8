"""
Employee CRUD + photo / identity-document uploads.

- GET operations require any authenticated user.
- POST / PUT require admin or hr_executive.
- DELETE requires admin and cascades to attendance, leaves, payroll, performance.
"""

from __future__ import annotations

import logging
import re

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.api.v1.deps import get_current_user, get_db, require_admin, require_hr
from hrms.core.config import settings
from hrms.models.employee import Employee
from hrms.schemas.common import DeleteResponse
from hrms.schemas.employee import (DocumentRejection, EmployeeCreate,
                                   EmployeeRead, EmployeeUpdate)
from hrms.schemas.user import CurrentUser
from hrms.services.activity import record_activity
from hrms.services.uploads import (UploadError, delete_file, store_file,
                                   validate_document, validate_image)

router = APIRouter(prefix="/employees", tags=["employees"])
logger = logging.getLogger(__name__)

# URL slug -> Employee column holding the stored path
DOCUMENT_KINDS = {
    "bank-details": "bank_details_url",
    "pan-card": "pan_card_url",
    "aadhar-card": "aadhar_card_url",
}

_CODE_RE = re.compile(r"^EMP(\d+)$")


async def _get_employee_or_404(db: AsyncSession, employee_id: int) -> Employee:
    employee = await db.get(Employee, employee_id)
    if employee is None:
        raise HTTPException(status_code=404, detail="Employee not found")
    return employee


async def _next_employee_code(db: AsyncSession) -> str:
    """Next ``EMPnnnn`` code after the highest one in use."""
    result = await db.execute(
        select(Employee.employee_id).where(Employee.employee_id.like("EMP%"))
    )
    highest = 0
    for (code,) in result.all():
        match = _CODE_RE.match(code or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return f"EMP{highest + 1:04d}"


async def _email_taken(db: AsyncSession, email: str, exclude_id: int | None = None) -> bool:
    stmt = select(Employee.id).where(func.lower(Employee.email) == email.lower())
    if exclude_id is not None:
        stmt = stmt.where(Employee.id != exclude_id)
    return (await db.execute(stmt)).first() is not None


# ── Employee CRUD ───────────────────────────────────────────────────
@router.get("", response_model=list[EmployeeRead])
async def list_employees(
    department: str | None = Query(default=None),
    status: str | None = Query(default=None),
    search: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
) -> list[Employee]:
    """List employees, newest first, optionally filtered."""
    stmt = select(Employee).order_by(Employee.created_at.desc(), Employee.id.desc())
    if department:
        stmt = stmt.where(Employee.department == department)
    if status:
        stmt = stmt.where(Employee.status == status)
    if search:
        pattern = f"%{search.lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(Employee.first_name).like(pattern),
                func.lower(Employee.last_name).like(pattern),
                func.lower(Employee.email).like(pattern),
                func.lower(Employee.employee_id).like(pattern),
            )
        )
    result = await db.execute(stmt)
    return list(result.scalars().all())


@router.get("/{employee_id}", response_model=EmployeeRead)
async def get_employee(
    employee_id: int,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
) -> Employee:
    """Fetch a single employee by primary key."""
    return await _get_employee_or_404(db, employee_id)


@router.post("", response_model=EmployeeRead, status_code=201)
async def create_employee(
    body: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_hr),
) -> Employee:
    """Create an employee; the ``EMPnnnn`` code is generated when absent or taken."""
    if await _email_taken(db, body.email):
        raise HTTPException(status_code=400, detail="Employee with this email already exists")

    data = body.model_dump(exclude_unset=True)
    code = (data.pop("employee_id", None) or "").strip()
    if code:
        taken = await db.execute(select(Employee.id).where(Employee.employee_id == code))
        if taken.first() is not None:
            logger.info("Employee code %s already in use; generating a new one", code)
            code = ""
    data["employee_id"] = code or await _next_employee_code(db)
    if not data.get("employee_type"):
        data["employee_type"] = "Employee"

    employee = Employee(**data)
    db.add(employee)
    await db.flush()
    record_activity(
        db,
        "employee_created",
        f"New employee {employee.first_name} {employee.last_name} added",
        user_id=user.id,
        employee_id=employee.id,
        details={"employee_code": employee.employee_id},
    )
    await db.commit()
    await db.refresh(employee)
    logger.info("Employee created: %s (%s)", employee.employee_id, employee.email)
    return employee


@router.put("/{employee_id}", response_model=EmployeeRead)
async def update_employee(
    employee_id: int,
    body: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_hr),
) -> Employee:
    """Partial update. Only supplied, non-null fields change."""
    employee = await _get_employee_or_404(db, employee_id)
    update_data = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}

    if "email" in update_data and await _email_taken(db, update_data["email"], employee.id):
        raise HTTPException(status_code=400, detail="Employee with this email already exists")

    for field, value in update_data.items():
        setattr(employee, field, value)

    record_activity(
        db,
        "employee_updated",
        f"Employee {employee.first_name} {employee.last_name} updated",
        user_id=user.id,
        employee_id=employee.id,
        details={"fields": sorted(update_data)},
    )
    await db.commit()
    await db.refresh(employee)
    return employee


@router.delete("/{employee_id}", response_model=DeleteResponse)
async def delete_employee(
    employee_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_admin),
) -> DeleteResponse:
    """Hard-delete an employee and every row that belongs to them."""
    employee = await _get_employee_or_404(db, employee_id)
    name = f"{employee.first_name} {employee.last_name}"
    files = [
        employee.profile_photo,
        employee.bank_details_url,
        employee.pan_card_url,
        employee.aadhar_card_url,
    ]
    await db.delete(employee)
    record_activity(
        db,
        "employee_deleted",
        f"Employee {name} deleted",
        user_id=user.id,
        details={"employee_id": employee_id},
    )
    await db.commit()
    for path in files:
        delete_file(path)
    logger.info("Employee %s deleted", employee_id)
    return DeleteResponse(message="Employee deleted successfully", id=employee_id)


# ── Uploads ─────────────────────────────────────────────────────────
@router.post("/{employee_id}/photo", response_model=EmployeeRead)
async def upload_photo(
    employee_id: int,
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(require_hr),
) -> Employee:
    """Upload a profile photo (JPEG, PNG, GIF or WebP, at most 5 MB)."""
    employee = await _get_employee_or_404(db, employee_id)
    content = await file.read(settings.MAX_PHOTO_SIZE + 1)
    try:
        extension = validate_image(content, file.content_type)
    except UploadError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    previous = employee.profile_photo
    employee.profile_photo = store_file(
        content, f"employees/{employee.id}", "photo", extension
    )
    await db.commit()
    await db.refresh(employee)
    delete_file(previous)
    return employee


@router.post("/{employee_id}/documents/{kind}", response_model=EmployeeRead)
async def upload_document(
    employee_id: int,
    kind: str,
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_hr),
) -> Employee:
    """Upload an identity document (image or PDF, at most 10 MB).

    A new upload puts the employee's documents back under review.
    """
    column = DOCUMENT_KINDS.get(kind)
    if column is None:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown document type. Must be one of: {', '.join(DOCUMENT_KINDS)}",
        )
    employee = await _get_employee_or_404(db, employee_id)
    content = await file.read(settings.MAX_DOCUMENT_SIZE + 1)
    try:
        extension = validate_document(content, file.content_type)
    except UploadError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    previous = getattr(employee, column)
    setattr(
        employee,
        column,
        store_file(content, f"employees/{employee.id}", kind, extension),
    )
    employee.documents_status = "pending"
    employee.documents_rejection_reason = None
    record_activity(
        db,
        "document_uploaded",
        f"{kind.replace('-', ' ').title()} uploaded for {employee.first_name} {employee.last_name}",
        user_id=user.id,
        employee_id=employee.id,
    )
    await db.commit()
    await db.refresh(employee)
    delete_file(previous)
    return employee


@router.post("/{employee_id}/approve-documents", response_model=EmployeeRead)
async def approve_documents(
    employee_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_hr),
) -> Employee:
    """Mark the employee's uploaded documents as verified."""
    employee = await _get_employee_or_404(db, employee_id)
    if not any(getattr(employee, column) for column in DOCUMENT_KINDS.values()):
        raise HTTPException(status_code=400, detail="No documents uploaded for this employee")
    employee.documents_status = "approved"
    employee.documents_rejection_reason = None
    record_activity(
        db,
        "documents_approved",
        f"Documents approved for {employee.first_name} {employee.last_name}",
        user_id=user.id,
        employee_id=employee.id,
    )
    await db.commit()
    await db.refresh(employee)
    return employee


@router.post("/{employee_id}/reject-documents", response_model=EmployeeRead)
async def reject_documents(
    employee_id: int,
    body: DocumentRejection,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_hr),
) -> Employee:
    """Reject the employee's uploaded documents with an optional reason."""
    employee = await _get_employee_or_404(db, employee_id)
    employee.documents_status = "rejected"
    employee.documents_rejection_reason = body.reason
    record_activity(
        db,
        "documents_rejected",
        f"Documents rejected for {employee.first_name} {employee.last_name}",
        user_id=user.id,
        employee_id=employee.id,
        details={"reason": body.reason},
    )
    await db.commit()
    await db.refresh(employee)
    return employee
