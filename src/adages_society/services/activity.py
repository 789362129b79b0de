"""Audit logging helpers; rows are added to the caller's transaction."""
from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from adages_society.models import ActivityLog, ModerationLog

__all__ = ["log_activity", "log_moderation"]


def log_activity(
    db: Session,
    user_id: int | None,
    action: str,
    target_type: str,
    target_id: int,
    details: dict[str, Any] | None = None,
) -> ActivityLog:
    """Record a content change such as `create_adage` or `delete_comment`."""
    entry = ActivityLog(
        user_id=user_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        details=details,
    )
    db.add(entry)
    return entry


def log_moderation(
    db: Session,
    moderator_id: int,
    action: str,
    target_type: str,
    target_id: int,
    reason: str | None = None,
    details: dict[str, Any] | None = None,
) -> ModerationLog:
    """Record a moderator decision such as a role change."""
    entry = ModerationLog(
        moderator_id=moderator_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        reason=reason,
        details=details,
    )
    db.add(entry)
    return entry
