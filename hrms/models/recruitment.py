"""
Job posting model: recruitment pipeline.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import (CheckConstraint, Column, Date, DateTime, ForeignKey,
                        Integer, String, Text)

from hrms.db.base import Base

JOB_STATUSES = ("active", "closed", "draft")
POSITION_TYPES = ("full_time", "part_time", "contract", "internship")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobPosting(Base):
    __tablename__ = "job_postings"
    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'closed', 'draft')", name="job_postings_status_check"
        ),
        CheckConstraint(
            "total_applications >= 0", name="job_postings_total_applications_check"
        ),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    title: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    department: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    position_type: str = Column(  # type: ignore[assignment]
        String(50), nullable=False, default="full_time", server_default="full_time"
    )
    location: str = Column(  # type: ignore[assignment]
        String(100), nullable=False, default="office", server_default="office"
    )
    description: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    requirements: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    salary_range: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    application_deadline: date | None = Column(Date, nullable=True)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(20), nullable=False, default="active", server_default="active", index=True
    )
    total_applications: int = Column(  # type: ignore[assignment]
        Integer, nullable=False, default=0, server_default="0"
    )
    created_by: int | None = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: datetime = Column(DateTime(timezone=True), default=_utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )
