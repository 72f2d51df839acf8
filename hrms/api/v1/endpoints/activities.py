"""
Activity feed: newest audit entries with the acting user and employee.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.api.v1.deps import get_current_user, get_db
from hrms.models.activity import Activity
from hrms.models.employee import Employee
from hrms.models.user import User
from hrms.schemas.dashboard import ActivityRead
from hrms.schemas.user import CurrentUser

router = APIRouter(prefix="/activities", tags=["activities"])


@router.get("", response_model=list[ActivityRead])
async def list_activities(
    limit: int = Query(default=50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
) -> list[ActivityRead]:
    result = await db.execute(
        select(Activity, User.email, Employee.first_name, Employee.last_name)
        .outerjoin(User, Activity.user_id == User.id)
        .outerjoin(Employee, Activity.employee_id == Employee.id)
        .order_by(Activity.created_at.desc(), Activity.id.desc())
        .limit(limit)
    )
    return [
        ActivityRead(
            id=activity.id,
            type=activity.type,
            description=activity.description,
            user_id=activity.user_id,
            employee_id=activity.employee_id,
            metadata=activity.details,
            created_at=activity.created_at,
            user_email=email,
            employee_name=f"{first} {last}" if first else None,
        )
        for activity, email, first, last in result.all()
    ]
