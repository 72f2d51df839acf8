"""Pydantic schemas for payroll."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from hrms.models.payroll import PAYROLL_STATUSES


class PayrollCreate(BaseModel):
    employee_id: int
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=2100)
    basic_salary: float | None = Field(default=None, ge=0)
    allowances: float = Field(default=0, ge=0)
    other_deductions: float = Field(default=0, ge=0)


class PayrollUpdate(BaseModel):
    basic_salary: float | None = Field(default=None, ge=0)
    allowances: float | None = Field(default=None, ge=0)
    other_deductions: float | None = Field(default=None, ge=0)
    status: str | None = None

    @field_validator("status")
    @classmethod
    def _status(cls, v: str | None) -> str | None:
        if v is not None and v not in PAYROLL_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(PAYROLL_STATUSES)}")
        return v


class PayrollProcessRequest(BaseModel):
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=2100)


class PayrollProcessResponse(BaseModel):
    success: bool = True
    message: str
    processed: int


class PayrollRead(BaseModel):
    id: int | None = None
    employee_id: int
    month: int
    year: int
    basic_salary: float
    allowances: float
    gross_salary: float
    other_deductions: float
    leave_deduction: float
    leave_days: int | None = None
    tds: float
    deductions: float
    net_salary: float
    status: str
    processed_at: datetime | None = None
    processed_by: int | None = None
    first_name: str | None = None
    last_name: str | None = None
    employee_code: str | None = None
    department: str | None = None

    model_config = {"from_attributes": True}
