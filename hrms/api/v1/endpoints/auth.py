"""
Auth endpoints: login, registration and password reset.
"""

import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.api.v1.deps import get_current_user, get_db, require_admin
from hrms.core.config import settings
from hrms.core.limiter import limiter
from hrms.core.security import (create_access_token, generate_reset_token,
                                get_password_hash, verify_password)
from hrms.models.user import PasswordResetToken, User
from hrms.schemas.common import MessageResponse
from hrms.schemas.user import (CurrentUser, ForgotPasswordRequest,
                               ForgotPasswordResponse, LoginRequest,
                               LoginResponse, ResetPasswordRequest, UserCreate,
                               UserRead)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


async def _create_user(db: AsyncSession, body: UserCreate) -> User:
    existing = await db.execute(select(User).where(User.email == body.email))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="User already exists")

    user = User(
        email=body.email,
        hashed_password=get_password_hash(body.password),
        role=body.role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("User %s registered with role %s", user.email, user.role)
    return user


# ── Login ───────────────────────────────────────────────────────────
@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """Exchange email + password for a bearer token."""
    if not body.email or not body.password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    result = await db.execute(select(User).where(User.email == body.email))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(body.password, user.hashed_password):
        logger.warning("Failed login for %s", body.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = create_access_token(user.id, user.email, user.role)
    return LoginResponse(
        token=token,
        user=CurrentUser(id=user.id, email=user.email, role=user.role),
    )


# ── Registration ────────────────────────────────────────────────────
@router.post("/register", response_model=UserRead, status_code=201)
async def register(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    _admin: CurrentUser = Depends(require_admin),
) -> User:
    """Create a new user account (admin only)."""
    return await _create_user(db, body)


@router.post("/register-first", response_model=UserRead, status_code=201)
async def register_first(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Public sign-up; only HR executive accounts can be created this way."""
    if body.role != "hr_executive":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only HR executive accounts can be self-registered",
        )
    return await _create_user(db, body)


@router.get("/me", response_model=CurrentUser)
async def read_current_user(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Return the identity carried by the caller's token."""
    return current_user


@router.get("/users", response_model=list[UserRead])
async def list_users(
    db: AsyncSession = Depends(get_db),
    _admin: CurrentUser = Depends(require_admin),
) -> list[User]:
    """List every user account (admin only)."""
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return list(result.scalars().all())


# ── Password reset ──────────────────────────────────────────────────
@router.post("/forgot-password", response_model=ForgotPasswordResponse)
async def forgot_password(
    body: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
) -> ForgotPasswordResponse:
    """Issue a reset token.  The response never reveals whether the email exists."""
    generic = "If an account exists for that email, a reset link has been sent"
    result = await db.execute(select(User).where(User.email == body.email))
    user = result.scalar_one_or_none()
    if user is None:
        return ForgotPasswordResponse(message=generic)

    token = generate_reset_token()
    db.add(
        PasswordResetToken(
            user_id=user.id,
            token=token,
            expires_at=datetime.now(timezone.utc)
            + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES),
        )
    )
    await db.commit()
    link = f"{settings.FRONTEND_URL}/reset-password?token={token}"
    logger.info("Password reset requested for %s", user.email)
    if settings.is_production:
        return ForgotPasswordResponse(message=generic)
    return ForgotPasswordResponse(message=generic, reset_link=link)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Set a new password using a one-time reset token."""
    result = await db.execute(
        select(PasswordResetToken).where(PasswordResetToken.token == body.token)
    )
    reset = result.scalar_one_or_none()
    invalid = HTTPException(status_code=400, detail="Invalid or expired reset token")
    if reset is None or reset.used:
        raise invalid
    expires_at = reset.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if expires_at < datetime.now(timezone.utc):
        raise invalid

    user = await db.get(User, reset.user_id)
    if user is None:
        raise invalid
    user.hashed_password = get_password_hash(body.password)
    reset.used = True
    await db.commit()
    logger.info("Password reset completed for %s", user.email)
    return MessageResponse(message="Password has been reset successfully")
