"""Pydantic schemas for users, login and password reset."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator

from hrms.core.security import password_policy_errors
from hrms.models.user import USER_ROLES


def _normalise_email(v: str) -> str:
    v = v.strip().lower()
    if "@" not in v or v.startswith("@") or v.endswith("@"):
        raise ValueError("Invalid email address")
    return v


def _strong_password(v: str) -> str:
    errors = password_policy_errors(v)
    if errors:
        raise ValueError("Password must contain " + ", ".join(errors))
    return v


class UserCreate(BaseModel):
    email: str
    password: str
    role: str = "hr_executive"

    @field_validator("role")
    @classmethod
    def _validate_role(cls, v: str) -> str:
        if v not in USER_ROLES:
            raise ValueError(f"Role must be one of: {', '.join(USER_ROLES)}")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _normalise_email(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return _strong_password(v)


class UserRead(BaseModel):
    id: int
    email: str
    role: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class CurrentUser(BaseModel):
    """Identity carried by a verified access token."""

    id: int
    email: str
    role: str


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return v.strip().lower()


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: CurrentUser


class ForgotPasswordRequest(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return v.strip().lower()


class ForgotPasswordResponse(BaseModel):
    message: str
    reset_link: str | None = None


class ResetPasswordRequest(BaseModel):
    token: str
    password: str

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return _strong_password(v)
