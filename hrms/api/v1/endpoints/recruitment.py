"""
Recruitment: job postings and their application counters.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.api.v1.deps import get_current_user, get_db, require_admin, require_hr
from hrms.models.recruitment import JobPosting
from hrms.schemas.common import DeleteResponse
from hrms.schemas.recruitment import (ApplicationCountUpdate, JobPostingCreate,
                                      JobPostingRead, JobPostingUpdate)
from hrms.schemas.user import CurrentUser
from hrms.services.activity import record_activity

router = APIRouter(prefix="/recruitment", tags=["recruitment"])
logger = logging.getLogger(__name__)


async def _get_posting_or_404(db: AsyncSession, posting_id: int) -> JobPosting:
    posting = await db.get(JobPosting, posting_id)
    if posting is None:
        raise HTTPException(status_code=404, detail="Job posting not found")
    return posting


@router.get("", response_model=list[JobPostingRead])
async def list_postings(
    status: str | None = Query(default=None),
    department: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
) -> list[JobPosting]:
    """List job postings, newest first."""
    stmt = select(JobPosting).order_by(JobPosting.created_at.desc(), JobPosting.id.desc())
    if status:
        stmt = stmt.where(JobPosting.status == status)
    if department:
        stmt = stmt.where(JobPosting.department == department)
    result = await db.execute(stmt)
    return list(result.scalars().all())


@router.get("/{posting_id}", response_model=JobPostingRead)
async def get_posting(
    posting_id: int,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
) -> JobPosting:
    return await _get_posting_or_404(db, posting_id)


@router.post("", response_model=JobPostingRead, status_code=201)
async def create_posting(
    body: JobPostingCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_hr),
) -> JobPosting:
    """Open a new job posting."""
    posting = JobPosting(**body.model_dump(), created_by=user.id)
    db.add(posting)
    await db.flush()
    record_activity(
        db,
        "job_posted",
        f"New job posting: {posting.title}",
        user_id=user.id,
        details={"job_posting_id": posting.id},
    )
    await db.commit()
    await db.refresh(posting)
    return posting


@router.put("/{posting_id}", response_model=JobPostingRead)
async def update_posting(
    posting_id: int,
    body: JobPostingUpdate,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(require_hr),
) -> JobPosting:
    """Partial update of a job posting."""
    posting = await _get_posting_or_404(db, posting_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(posting, field, value)
    await db.commit()
    await db.refresh(posting)
    return posting


@router.delete("/{posting_id}", response_model=DeleteResponse)
async def delete_posting(
    posting_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: CurrentUser = Depends(require_admin),
) -> DeleteResponse:
    posting = await _get_posting_or_404(db, posting_id)
    await db.delete(posting)
    await db.commit()
    return DeleteResponse(message="Job posting deleted", id=posting_id)


@router.put("/{posting_id}/applications", response_model=JobPostingRead)
async def update_application_count(
    posting_id: int,
    body: ApplicationCountUpdate,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(require_hr),
) -> JobPosting:
    """Bump the application counter up or down; it never drops below zero."""
    posting = await _get_posting_or_404(db, posting_id)
    current = posting.total_applications or 0
    if body.action == "increment":
        posting.total_applications = current + 1
    else:
        posting.total_applications = max(current - 1, 0)
    await db.commit()
    await db.refresh(posting)
    return posting
