"""Pydantic schemas for job postings."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, field_validator

from hrms.models.recruitment import JOB_STATUSES


def _validate_status(v: str | None) -> str | None:
    if v is not None and v not in JOB_STATUSES:
        raise ValueError(f"Status must be one of: {', '.join(JOB_STATUSES)}")
    return v


class JobPostingBase(BaseModel):
    department: str | None = None
    description: str | None = None
    requirements: str | None = None
    salary_range: str | None = None
    application_deadline: date | None = None


class JobPostingCreate(JobPostingBase):
    title: str
    position_type: str = "full_time"
    location: str = "office"
    status: str = "active"

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title must not be empty")
        return v

    @field_validator("status")
    @classmethod
    def _status(cls, v: str) -> str:
        return _validate_status(v)  # type: ignore[return-value]


class JobPostingUpdate(JobPostingBase):
    title: str | None = None
    position_type: str | None = None
    location: str | None = None
    status: str | None = None

    @field_validator("status")
    @classmethod
    def _status(cls, v: str | None) -> str | None:
        return _validate_status(v)


class ApplicationCountUpdate(BaseModel):
    action: str

    @field_validator("action")
    @classmethod
    def _action(cls, v: str) -> str:
        if v not in ("increment", "decrement"):
            raise ValueError("Action must be 'increment' or 'decrement'")
        return v


class JobPostingRead(JobPostingBase):
    id: int
    title: str
    position_type: str
    location: str
    status: str
    total_applications: int
    created_by: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
