"""Account lifecycle: registration, login, recovery and deletion."""
from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from adages_society.core import security
from adages_society.core.roles import ROLE_BANNED, ROLE_USER, is_admin
from adages_society.core.settings import settings
from adages_society.db.time import as_utc, utcnow
from adages_society.models import (
    Collection,
    Comment,
    MailingListEntry,
    PasswordResetToken,
    SavedAdage,
    User,
)
from adages_society.schemas.user import (
    ProfileUpdate,
    RegisterRequest,
    UserProfileWithStats,
    UserPublic,
)
from adages_society.services.email import (
    EmailError,
    get_email_service,
    render_account_deleted,
    render_email_verification,
    render_password_reset,
)
from adages_society.services.friends import FriendService

logger = logging.getLogger(__name__)

__all__ = [
    "authenticate",
    "can_view_profile",
    "delete_account",
    "ensure_password_strength",
    "get_active_user",
    "issue_password_reset",
    "profile_with_stats",
    "public_profile",
    "register_user",
    "reset_password",
    "search_users",
    "update_profile",
    "verify_email",
]

SEARCH_LIMIT = 20


def _send_quietly(to: str, subject: str, html: str) -> None:
    try:
        get_email_service().send(to, subject, html)
    except EmailError:
        logger.warning("Failed to send %r to %s", subject, to, exc_info=True)


def ensure_password_strength(password: str) -> None:
    if len(password) < settings.password_min_length:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at least {settings.password_min_length} characters",
        )


def get_active_user(db: Session, user_id: int) -> User | None:
    """Return a single non-deleted user by primary key."""
    return db.query(User).filter(User.id == user_id, User.deleted_at.is_(None)).first()


def _username_taken(db: Session, username: str, exclude_id: int | None = None) -> bool:
    query = db.query(User.id).filter(func.lower(User.username) == username.lower())
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return query.first() is not None


def register_user(db: Session, payload: RegisterRequest) -> User:
    """Persist a new member with an argon2id password hash."""
    ensure_password_strength(payload.password)
    if db.query(User.id).filter(User.email == payload.email).first() is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered"
        )
    if payload.username and _username_taken(db, payload.username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Username already taken"
        )

    user = User(
        email=payload.email,
        password_hash=security.hash_password(payload.password),
        username=payload.username,
        display_name=payload.display_name,
        role=ROLE_USER,
        email_verified=False,
        verification_token=security.generate_token(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    verify_url = (
        f"{settings.site_url}/verify-email?token={user.verification_token}&email={user.email}"
    )
    _send_quietly(user.email, "Confirm your email", render_email_verification(verify_url))
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """Check credentials and stamp `last_login_at`.

    Raises:
        HTTPException: 401 for bad credentials or deleted accounts, 403 if banned
    """
    user = db.query(User).filter(User.email == email).first()
    if user is None or user.deleted_at is not None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password"
        )
    if not security.verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password"
        )
    if user.role == ROLE_BANNED:
        detail = "Your account has been banned"
        if user.ban_reason:
            detail += f": {user.ban_reason}"
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)

    user.last_login_at = utcnow()
    db.commit()
    db.refresh(user)
    return user


def verify_email(db: Session, email: str, token: str) -> bool:
    """Mark the email verified; returns False if it already was."""
    user = db.query(User).filter(User.email == email, User.deleted_at.is_(None)).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid token")
    if user.email_verified:
        return False
    if not user.verification_token or user.verification_token != token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid token")
    user.email_verified = True
    user.verification_token = None
    db.commit()
    return True


def issue_password_reset(db: Session, email: str) -> PasswordResetToken | None:
    """Create a one-hour reset token and email the link; silent for unknown emails."""
    user = db.query(User).filter(User.email == email, User.deleted_at.is_(None)).first()
    if user is None:
        return None

    db.query(PasswordResetToken).filter(
        PasswordResetToken.user_id == user.id, PasswordResetToken.used.is_(False)
    ).update({PasswordResetToken.used: True}, synchronize_session="fetch")
    token = PasswordResetToken(
        user_id=user.id,
        token=security.generate_token(),
        expires_at=utcnow() + timedelta(minutes=settings.password_reset_ttl_minutes),
    )
    db.add(token)
    db.commit()
    db.refresh(token)

    reset_url = f"{settings.site_url}/reset-password?token={token.token}"
    _send_quietly(user.email, "Reset your password", render_password_reset(reset_url))
    return token


def reset_password(db: Session, token_value: str, password: str) -> User:
    ensure_password_strength(password)
    token = (
        db.query(PasswordResetToken)
        .filter(PasswordResetToken.token == token_value, PasswordResetToken.used.is_(False))
        .first()
    )
    if token is None or as_utc(token.expires_at) <= utcnow():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired reset token"
        )
    user = get_active_user(db, token.user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired reset token"
        )
    user.password_hash = security.hash_password(password)
    token.used = True
    db.commit()
    db.refresh(user)
    return user


def profile_with_stats(db: Session, user: User) -> UserProfileWithStats:
    profile = UserProfileWithStats.model_validate(user)
    profile.saved_adages_count = (
        db.query(func.count(SavedAdage.id))
        .filter(SavedAdage.user_id == user.id, SavedAdage.deleted_at.is_(None))
        .scalar()
        or 0
    )
    profile.collections_count = (
        db.query(func.count(Collection.id))
        .filter(Collection.user_id == user.id, Collection.deleted_at.is_(None))
        .scalar()
        or 0
    )
    profile.comments_count = (
        db.query(func.count(Comment.id))
        .filter(Comment.user_id == user.id, Comment.deleted_at.is_(None))
        .scalar()
        or 0
    )
    return profile


def update_profile(db: Session, user: User, payload: ProfileUpdate) -> User:
    changes = payload.model_dump(exclude_unset=True)
    username = changes.get("username")
    if username and _username_taken(db, username, exclude_id=user.id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Username already taken"
        )
    for key, value in changes.items():
        setattr(user, key, value)
    user.updated_at = utcnow()
    db.commit()
    db.refresh(user)
    return user


def can_view_profile(db: Session, profile: User, viewer: User | None) -> bool:
    """Private profiles are visible to the owner, accepted friends and admins."""
    if not profile.profile_private:
        return True
    if viewer is None:
        return False
    if viewer.id == profile.id or is_admin(viewer.role):
        return True
    return FriendService.are_friends(db, viewer.id, profile.id)


def public_profile(db: Session, profile: User, viewer: User | None) -> UserPublic:
    data = UserPublic.model_validate(profile)
    if not can_view_profile(db, profile, viewer):
        data.bio = None
        data.profile_image_url = None
    return data


def search_users(db: Session, term: str) -> list[User]:
    pattern = f"%{term.strip()}%"
    return (
        db.query(User)
        .filter(
            User.deleted_at.is_(None),
            or_(User.username.ilike(pattern), User.display_name.ilike(pattern)),
        )
        .order_by(User.username.asc())
        .limit(SEARCH_LIMIT)
        .all()
    )


def delete_account(db: Session, user: User) -> None:
    """Soft-delete and anonymize the account, then confirm by email."""
    original_email = user.email
    now = utcnow()

    entry = db.query(MailingListEntry).filter(MailingListEntry.email == original_email).first()
    if entry is not None and entry.unsubscribed_at is None:
        entry.unsubscribed_at = now

    user.email = f"deleted_{user.id}@deleted.local"
    user.username = f"deleted_{user.id}"
    user.display_name = "Deleted User"
    user.bio = None
    user.profile_image_url = None
    user.verification_token = None
    user.deleted_at = now
    db.commit()

    restore_url = f"{settings.site_url}/contact?subject=restore-account"
    _send_quietly(
        original_email, "Account Deletion Confirmation", render_account_deleted(restore_url)
    )
