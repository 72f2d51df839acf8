"""
Employee & Attendance models: core business domain.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone

from sqlalchemy import (CheckConstraint, Column, Date, DateTime, ForeignKey,
                        Index, Integer, Numeric, String, Text, Time,
                        UniqueConstraint)
from sqlalchemy.orm import relationship

from hrms.db.base import Base

EMPLOYEE_STATUSES = ("active", "on_leave", "inactive")
ATTENDANCE_STATUSES = ("present", "absent", "late", "on_leave")
ATTENDANCE_LOCATIONS = ("office", "remote")
DOCUMENT_STATUSES = ("pending", "approved", "rejected")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Employee(Base):
    __tablename__ = "employees"
    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'on_leave', 'inactive')",
            name="employees_status_check",
        ),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    employee_id: str = Column(String(50), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    first_name: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    last_name: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    email: str = Column(String(255), unique=True, nullable=False)  # type: ignore[assignment]
    phone: str | None = Column(String(20), nullable=True)  # type: ignore[assignment]
    department: str | None = Column(String(100), nullable=True, index=True)  # type: ignore[assignment]
    position: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    employee_type: str = Column(  # type: ignore[assignment]
        String(50), nullable=False, default="Employee", server_default="Employee"
    )
    hire_date: date = Column(Date, nullable=False)  # type: ignore[assignment]
    salary: float | None = Column(Numeric(10, 2, asdecimal=False), nullable=True)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(20), nullable=False, default="active", server_default="active", index=True
    )
    address: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    city: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    state: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    zip_code: str | None = Column(String(20), nullable=True)  # type: ignore[assignment]
    country: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    emergency_contact_name: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    emergency_contact_phone: str | None = Column(String(20), nullable=True)  # type: ignore[assignment]
    emergency_contact_relation: str | None = Column(String(50), nullable=True)  # type: ignore[assignment]

    # Uploaded files (relative paths under UPLOAD_DIR)
    profile_photo: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    bank_details_url: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    pan_card_url: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    aadhar_card_url: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    documents_status: str = Column(  # type: ignore[assignment]
        String(20), nullable=False, default="pending", server_default="pending"
    )
    documents_rejection_reason: str | None = Column(Text, nullable=True)  # type: ignore[assignment]

    created_at: datetime = Column(DateTime(timezone=True), default=_utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    attendances = relationship(
        "Attendance", back_populates="employee", cascade="all, delete-orphan"
    )
    leaves = relationship("Leave", back_populates="employee", cascade="all, delete-orphan")
    payrolls = relationship("Payroll", back_populates="employee", cascade="all, delete-orphan")
    performances = relationship(
        "Performance", back_populates="employee", cascade="all, delete-orphan"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("employee_id", "date", name="attendance_employee_id_date_key"),
        CheckConstraint(
            "status IN ('present', 'absent', 'late', 'on_leave')",
            name="attendance_status_check",
        ),
        CheckConstraint(
            "location IN ('office', 'remote')",
            name="attendance_location_check",
        ),
        Index("idx_attendance_employee_date", "employee_id", "date"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    employee_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False
    )
    date: date = Column(Date, nullable=False, index=True)  # type: ignore[assignment]
    status: str = Column(String(20), nullable=False)  # type: ignore[assignment]
    check_in_time: time | None = Column(Time, nullable=True)  # type: ignore[assignment]
    check_out_time: time | None = Column(Time, nullable=True)  # type: ignore[assignment]
    location: str = Column(  # type: ignore[assignment]
        String(20), nullable=False, default="office", server_default="office"
    )
    notes: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=_utcnow)  # type: ignore[assignment]

    employee = relationship("Employee", back_populates="attendances")
