"""Notification fan-out to members and administrators."""
from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.orm import Session

from adages_society.core.roles import ROLE_ADMIN
from adages_society.models import Notification, User
from adages_society.services.email import EmailError, get_email_service, render_admin_alert

logger = logging.getLogger(__name__)

__all__ = [
    "admin_users",
    "email_admins",
    "notify",
    "notify_admins",
]


def notify(
    db: Session,
    user_id: int,
    type_: str,
    title: str,
    message: str,
    *,
    related_id: int | None = None,
    related_type: str | None = None,
) -> Notification:
    """Queue a notification row in the current transaction."""
    notification = Notification(
        user_id=user_id,
        type=type_,
        title=title,
        message=message,
        related_id=related_id,
        related_type=related_type,
    )
    db.add(notification)
    return notification


def admin_users(db: Session) -> Sequence[User]:
    """Return every active administrator."""
    return (
        db.query(User)
        .filter(User.role == ROLE_ADMIN, User.deleted_at.is_(None))
        .order_by(User.id)
        .all()
    )


def notify_admins(
    db: Session,
    title: str,
    message: str,
    *,
    type_: str = "system",
    related_id: int | None = None,
    related_type: str | None = None,
) -> list[Notification]:
    """Queue the same notification for every administrator."""
    return [
        notify(
            db,
            admin.id,
            type_,
            title,
            message,
            related_id=related_id,
            related_type=related_type,
        )
        for admin in admin_users(db)
    ]


def email_admins(db: Session, subject: str, message: str) -> int:
    """Email every administrator; failures are logged and skipped.

    Returns:
        Number of messages handed to the mail server
    """
    service = get_email_service()
    sent = 0
    for admin in admin_users(db):
        try:
            if service.send(admin.email, subject, render_admin_alert(subject, message)):
                sent += 1
        except EmailError:
            logger.warning("Failed to email admin %s about %r", admin.id, subject, exc_info=True)
    return sent
