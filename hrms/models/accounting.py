"""
Accounting ledger entries: one-off or recurring heads per month.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (CheckConstraint, Column, DateTime, Index, Integer,
                        Numeric, String, Text, func, text)

from hrms.db.base import Base

FREQUENCIES = ("Once", "Monthly", "Quarterly", "Yearly")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccountingEntry(Base):
    __tablename__ = "accounting_entries"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="accounting_entries_amount_check"),
        CheckConstraint("month BETWEEN 1 AND 12", name="accounting_entries_month_check"),
        Index("idx_accounting_month_year", "month", "year"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    entry_id: str | None = Column(String(50), nullable=True)  # type: ignore[assignment]
    head: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    subhead: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    tds_percentage: float = Column(  # type: ignore[assignment]
        Numeric(5, 2, asdecimal=False), default=0, server_default="0"
    )
    gst_percentage: float = Column(  # type: ignore[assignment]
        Numeric(5, 2, asdecimal=False), default=0, server_default="0"
    )
    frequency: str = Column(  # type: ignore[assignment]
        String(20), nullable=False, default="Monthly", server_default="Monthly"
    )
    remarks: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    amount: float = Column(  # type: ignore[assignment]
        Numeric(12, 2, asdecimal=False), nullable=False, default=0, server_default="0"
    )
    month: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    year: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=_utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )


# Recurring heads are unique per month; one-off entries may repeat.
Index(
    "idx_accounting_unique_recurring",
    AccountingEntry.head,
    func.coalesce(AccountingEntry.subhead, ""),
    AccountingEntry.month,
    AccountingEntry.year,
    unique=True,
    postgresql_where=text("frequency != 'Once'"),
    sqlite_where=text("frequency != 'Once'"),
)
