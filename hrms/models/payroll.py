"""
Payroll model: one row per (employee, month, year).

``deductions`` always equals ``tds + leave_deduction + other_deductions`` and
``net_salary`` equals ``basic_salary + allowances - deductions``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (CheckConstraint, Column, DateTime, ForeignKey, Integer,
                        Numeric, String, UniqueConstraint)
from sqlalchemy.orm import relationship

from hrms.db.base import Base

PAYROLL_STATUSES = ("pending", "processed", "paid")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _money(**kwargs) -> Column:
    return Column(Numeric(10, 2, asdecimal=False), default=0, server_default="0", **kwargs)


class Payroll(Base):
    __tablename__ = "payroll"
    __table_args__ = (
        UniqueConstraint(
            "employee_id", "month", "year", name="payroll_employee_id_month_year_key"
        ),
        CheckConstraint("month BETWEEN 1 AND 12", name="payroll_month_check"),
        CheckConstraint(
            "status IN ('pending', 'processed', 'paid')", name="payroll_status_check"
        ),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    employee_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True
    )
    month: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    year: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    basic_salary: float = Column(Numeric(10, 2, asdecimal=False), nullable=False)  # type: ignore[assignment]
    allowances: float = _money()  # type: ignore[assignment]
    other_deductions: float = _money()  # type: ignore[assignment]
    leave_deduction: float = _money()  # type: ignore[assignment]
    tds: float = _money()  # type: ignore[assignment]
    deductions: float = _money()  # type: ignore[assignment]
    net_salary: float = Column(Numeric(10, 2, asdecimal=False), nullable=False)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(20), nullable=False, default="pending", server_default="pending"
    )
    processed_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    processed_by: int | None = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: datetime = Column(DateTime(timezone=True), default=_utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    employee = relationship("Employee", back_populates="payrolls")

    @property
    def gross_salary(self) -> float:
        return round((self.basic_salary or 0) + (self.allowances or 0), 2)
