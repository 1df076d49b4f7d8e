from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator

from tertulia.core.capabilities import Capability


def _normalize_username(v: str) -> str:
    if not v.replace("_", "").isalnum():
        raise ValueError("Username must be alphanumeric with optional underscores")
    return v.lower()


def _check_password_strength(v: str) -> str:
    if not any(c.isdigit() for c in v):
        raise ValueError("Password must contain at least one number")
    if not any(c in "!@#$%^&*()_+-=[]{}|;:,.<>?" for c in v):
        raise ValueError("Password must contain at least one special character")
    return v


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=20)
    email: EmailStr
    password: str = Field(..., min_length=8)
    invitation_token: str | None = Field(None, max_length=64)

    @field_validator("username")
    @classmethod
    def username_alphanumeric(cls, v: str) -> str:
        return _normalize_username(v)

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        return _check_password_strength(v)


class UserLogin(BaseModel):
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def username_lowercase(cls, v: str) -> str:
        return v.lower()


class UserResponse(BaseModel):
    """A user as seen by a particular viewer; see services.presenters.present_user."""

    id: int
    username: str
    avatar_url: str | None = None
    # Empty unless the viewer is this user (or an admin on a debug deployment)
    email: str = ""
    role: str
    permissions: list[str] = []
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
    follows_count: int | None = None
    followers_count: int | None = None
    is_followed: bool | None = None
    is_blocked: bool | None = None
    blocked_me: bool | None = None


class UserUpdate(BaseModel):
    username: str | None = Field(None, min_length=3, max_length=20)
    avatar_url: str | None = Field(None, max_length=500)

    @field_validator("username")
    @classmethod
    def username_alphanumeric(cls, v: str | None) -> str | None:
        # Runs only when the field is sent; users.username is NOT NULL
        if v is None:
            raise ValueError("Username cannot be empty")
        return _normalize_username(v)


class PasswordUpdate(BaseModel):
    current_password: str
    password: str = Field(..., min_length=8)

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        return _check_password_strength(v)


class AdminUserUpdate(BaseModel):
    role: Literal["user", "mod", "admin"] | None = None
    is_active: bool | None = None
    capabilities: list[Capability] | None = None


class Token(BaseModel):
    """Returned by register and login."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    user: UserResponse
