"""User and authentication Pydantic schemas."""

import re
from datetime import datetime
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from .common import EmailStr

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_.-]{3,32}$")


def _validate_username(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not _USERNAME_RE.match(value):
        raise ValueError(
            "Username must be 3-32 characters of letters, digits, '.', '_' or '-'"
        )
    return value


Username = Annotated[str | None, AfterValidator(_validate_username)]
Role = Literal["admin", "moderator", "user", "probation", "restricted", "banned"]


class RegisterRequest(BaseModel):
    """Schema for creating a new account."""

    email: EmailStr
    password: str = Field(..., description="At least 8 characters")
    username: Username = None
    display_name: str | None = Field(None, max_length=128)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class VerifyEmailRequest(BaseModel):
    email: EmailStr
    token: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    password: str


class UserPublic(BaseModel):
    """Profile visible to other members."""

    id: int
    username: str | None = None
    display_name: str | None = None
    bio: str | None = None
    profile_image_url: str | None = None
    role: str
    profile_private: bool
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class UserProfile(UserPublic):
    """The authenticated member's own profile."""

    email: str
    email_verified: bool
    show_friends: bool
    show_favorites: bool
    last_login_at: datetime | None = None


class UserProfileWithStats(UserProfile):
    saved_adages_count: int = 0
    collections_count: int = 0
    comments_count: int = 0


class TokenResponse(BaseModel):
    """Bearer token issued after a successful login."""

    access_token: str
    token_type: str = "bearer"
    user: UserProfile


class ProfileUpdate(BaseModel):
    """Editable profile and privacy fields; omitted fields are left untouched."""

    username: Username = None
    display_name: str | None = Field(None, max_length=128)
    bio: str | None = Field(None, max_length=2000)
    profile_image_url: str | None = None
    profile_private: bool | None = None
    show_friends: bool | None = None
    show_favorites: bool | None = None


class EmailPreferences(BaseModel):
    email_weekly_adage: bool
    email_events: bool
    email_site_updates: bool
    email_comment_notifications: bool

    model_config = ConfigDict(from_attributes=True)


class EmailPreferencesUpdate(BaseModel):
    email_weekly_adage: bool | None = None
    email_events: bool | None = None
    email_site_updates: bool | None = None
    email_comment_notifications: bool | None = None


class RoleUpdate(BaseModel):
    """Admin request to change a member's role."""

    role: Role
    ban_reason: str | None = None


class AdminUserResponse(UserProfile):
    ban_reason: str | None = None
    deleted_at: datetime | None = None
