"""SQLAlchemy models for member accounts and credential tokens."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from adages_society.core.roles import ROLE_USER
from adages_society.db.session import Base
from adages_society.db.time import utcnow


class User(Base):
    """A registered member of the society."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False, index=True)
    email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verification_token: Mapped[str | None] = mapped_column(String(128), nullable=True)
    password_hash: Mapped[str | None] = mapped_column(Text, nullable=True)
    username: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    display_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    profile_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    # One of admin, moderator, user, probation, restricted, banned.
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=ROLE_USER)
    ban_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    profile_private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    show_friends: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    show_favorites: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    email_weekly_adage: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    email_events: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    email_site_updates: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    email_comment_notifications: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def public_name(self) -> str:
        """Name shown next to the member's contributions."""
        return self.display_name or self.username or f"user-{self.id}"


class PasswordResetToken(Base):
    """Single-use token emailed for password recovery."""

    __tablename__ = "password_reset_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
