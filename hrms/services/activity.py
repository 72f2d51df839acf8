"""Audit trail helper: appends ``Activity`` rows in the caller's transaction."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from hrms.models.activity import Activity

logger = logging.getLogger(__name__)


def record_activity(
    db: AsyncSession,
    type: str,
    description: str,
    *,
    user_id: int | None = None,
    employee_id: int | None = None,
    details: dict | None = None,
) -> Activity:
    """Stage an activity row; it is written when the caller commits."""
    activity = Activity(
        type=type,
        description=description,
        user_id=user_id,
        employee_id=employee_id,
        details=details,
    )
    db.add(activity)
    logger.debug("Activity %s: %s", type, description)
    return activity
