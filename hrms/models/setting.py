"""
Key-value system settings: last write wins.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text

from hrms.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SystemSetting(Base):
    __tablename__ = "settings"

    id: int = Column(Integer, primary_key=True)  # type: ignore[assignment]
    setting_key: str = Column(String(100), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    setting_value: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    setting_type: str = Column(  # type: ignore[assignment]
        String(50), nullable=False, default="text", server_default="text"
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )
