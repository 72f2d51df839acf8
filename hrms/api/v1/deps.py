"""
FastAPI dependencies: auth guards and database session.

The caller's identity comes entirely from the signed bearer token; there is
no session store and no per-request user lookup.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Callable
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.core.config import settings
from hrms.core.security import decode_access_token
from hrms.db.session import async_session_factory
from hrms.schemas.user import CurrentUser

logger = logging.getLogger(__name__)

# auto_error=False so a missing header yields our own 401 body
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_PREFIX}/auth/login", auto_error=False
)


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Auth dependencies ───────────────────────────────────────────────
def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
) -> CurrentUser:
    """Verify the bearer token and return the identity it carries."""
    if not token:
        raise _unauthorized("No token provided")

    payload = decode_access_token(token)
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    try:
        return CurrentUser(id=payload.get("id"), email=payload.get("email"), role=payload.get("role"))
    except ValidationError:
        logger.warning("Token for subject %s is missing identity claims", payload.get("sub"))
        raise _unauthorized("Invalid or expired token")


def require_roles(*roles: str) -> Callable[..., CurrentUser]:
    """Dependency factory: only allow callers whose token role is in *roles*."""

    async def _guard(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {' or '.join(roles)}",
            )
        return current_user

    return _guard


require_admin = require_roles("admin")
require_hr = require_roles("admin", "hr_executive")
require_accounts = require_roles("admin", "accountant")
