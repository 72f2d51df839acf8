"""
Activity model: append-only audit log.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB

from hrms.db.base import Base


class Activity(Base):
    __tablename__ = "activities"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    type: str = Column(String(50), nullable=False)  # type: ignore[assignment]
    description: str = Column(Text, nullable=False)  # type: ignore[assignment]
    user_id: int | None = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    employee_id: int | None = Column(  # type: ignore[assignment]
        Integer, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True
    )
    # "metadata" is reserved on declarative classes
    details: dict | None = Column(  # type: ignore[assignment]
        "metadata", JSON().with_variant(JSONB(), "postgresql"), nullable=True
    )
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
