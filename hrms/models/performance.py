"""
Monthly performance model: derived from attendance, recomputable.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (CheckConstraint, Column, DateTime, ForeignKey, Integer,
                        Numeric, UniqueConstraint)
from sqlalchemy.orm import relationship

from hrms.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Performance(Base):
    __tablename__ = "performance"
    __table_args__ = (
        UniqueConstraint(
            "employee_id", "month", "year", name="performance_employee_id_month_year_key"
        ),
        CheckConstraint("month BETWEEN 1 AND 12", name="performance_month_check"),
        CheckConstraint(
            "performance_percentage >= 0 AND performance_percentage <= 100",
            name="performance_percentage_check",
        ),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    employee_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True
    )
    month: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    year: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    total_working_days: int = Column(Integer, default=0, server_default="0")  # type: ignore[assignment]
    present_days: int = Column(Integer, default=0, server_default="0")  # type: ignore[assignment]
    absent_days: int = Column(Integer, default=0, server_default="0")  # type: ignore[assignment]
    late_days: int = Column(Integer, default=0, server_default="0")  # type: ignore[assignment]
    on_leave_days: int = Column(Integer, default=0, server_default="0")  # type: ignore[assignment]
    total_working_hours: float = Column(  # type: ignore[assignment]
        Numeric(10, 2, asdecimal=False), default=0, server_default="0"
    )
    expected_working_hours: float = Column(  # type: ignore[assignment]
        Numeric(10, 2, asdecimal=False), default=0, server_default="0"
    )
    performance_percentage: float = Column(  # type: ignore[assignment]
        Numeric(5, 2, asdecimal=False), nullable=False, default=0, server_default="0"
    )
    calculated_at: datetime = Column(DateTime(timezone=True), default=_utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    employee = relationship("Employee", back_populates="performances")
