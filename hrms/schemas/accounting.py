"""Pydantic schemas for accounting ledger entries."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from hrms.models.accounting import FREQUENCIES


class AccountingEntryCreate(BaseModel):
    head: str
    subhead: str | None = None
    tds_percentage: float = Field(default=0, ge=0, le=100)
    gst_percentage: float = Field(default=0, ge=0, le=100)
    frequency: str = "Monthly"
    remarks: str | None = None
    amount: float = Field(default=0, ge=0)
    entry_id: str | None = None
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=2100)

    @field_validator("head")
    @classmethod
    def _head(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Head must not be empty")
        return v

    @field_validator("frequency")
    @classmethod
    def _frequency(cls, v: str) -> str:
        if v not in FREQUENCIES:
            raise ValueError(f"Frequency must be one of: {', '.join(FREQUENCIES)}")
        return v


class AccountingAmountUpdate(BaseModel):
    amount: float = Field(ge=0)
    remarks: str | None = None


class AccountingPeriod(BaseModel):
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=2100)


class AccountingEntryRead(BaseModel):
    id: int
    entry_id: str | None = None
    head: str
    subhead: str | None = None
    tds_percentage: float
    gst_percentage: float
    frequency: str
    remarks: str | None = None
    amount: float
    month: int
    year: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
