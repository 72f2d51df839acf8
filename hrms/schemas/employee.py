"""Pydantic schemas for Employee CRUD and document review."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from hrms.models.employee import EMPLOYEE_STATUSES


def _validate_status(v: str | None) -> str | None:
    if v is not None and v not in EMPLOYEE_STATUSES:
        raise ValueError(f"Status must be one of: {', '.join(EMPLOYEE_STATUSES)}")
    return v


class EmployeeBase(BaseModel):
    phone: str | None = None
    department: str | None = None
    position: str | None = None
    employee_type: str | None = None
    salary: float | None = Field(default=None, ge=0)
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    emergency_contact_name: str | None = None
    emergency_contact_phone: str | None = None
    emergency_contact_relation: str | None = None


class EmployeeCreate(EmployeeBase):
    employee_id: str | None = None
    first_name: str
    last_name: str
    email: str
    hire_date: date
    status: str = "active"

    @field_validator("first_name", "last_name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be empty")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v

    @field_validator("status")
    @classmethod
    def _status(cls, v: str) -> str:
        return _validate_status(v)  # type: ignore[return-value]


class EmployeeUpdate(EmployeeBase):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    hire_date: date | None = None
    status: str | None = None

    @field_validator("email")
    @classmethod
    def _email(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v

    @field_validator("status")
    @classmethod
    def _status(cls, v: str | None) -> str | None:
        return _validate_status(v)


class EmployeeRead(EmployeeBase):
    id: int
    employee_id: str
    first_name: str
    last_name: str
    email: str
    hire_date: date
    status: str
    employee_type: str | None = None
    profile_photo: str | None = None
    bank_details_url: str | None = None
    pan_card_url: str | None = None
    aadhar_card_url: str | None = None
    documents_status: str | None = None
    documents_rejection_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class DocumentRejection(BaseModel):
    reason: str | None = None
