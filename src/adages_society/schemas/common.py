"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

import re
from typing import Annotated, Any, Generic, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict

T = TypeVar("T")

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(value: str) -> str:
    """Lower-case and trim an email address, rejecting obviously invalid ones."""
    email = value.strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValueError("Invalid email address")
    return email


EmailStr = Annotated[str, AfterValidator(normalize_email)]


class ApiResponse(BaseModel, Generic[T]):
    """Envelope wrapping every successful API response."""

    success: bool = True
    data: T | None = None
    message: str | None = None


class ErrorResponse(BaseModel):
    """Envelope returned for failed requests."""

    success: bool = False
    error: str
    details: list[Any] | None = None


class UserSummary(BaseModel):
    """Public fields of a member shown next to their contributions."""

    id: int
    username: str | None = None
    display_name: str | None = None
    profile_image_url: str | None = None
    role: str | None = None

    model_config = ConfigDict(from_attributes=True)
