"""Data access helpers shared by the content resources."""
from __future__ import annotations

from typing import Any, TypeVar

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from adages_society.db.time import utcnow
from adages_society.models import (
    Adage,
    BlogPost,
    Comment,
    ForumReply,
    ForumThread,
    ReaderChallenge,
    User,
)

ModelT = TypeVar("ModelT")

# Polymorphic `target_type` values mapped to their tables.
TARGET_MODELS: dict[str, Any] = {
    "adage": Adage,
    "blog": BlogPost,
    "comment": Comment,
    "forum_thread": ForumThread,
    "forum_reply": ForumReply,
    "user": User,
    "challenge": ReaderChallenge,
}

__all__ = [
    "TARGET_MODELS",
    "get_live_or_404",
    "get_target",
    "soft_delete",
    "target_owner_id",
    "target_title",
]


def get_live_or_404(
    db: Session,
    model: type[ModelT],
    object_id: int,
    *,
    detail: str = "Not found",
    include_hidden: bool = True,
) -> ModelT:
    """Return a non-deleted row by id or raise 404.

    Args:
        db: Database session
        model: Mapped class with `id` and `deleted_at` columns
        object_id: Primary key to look up
        detail: Error message for the 404 response
        include_hidden: When False, rows with `hidden_at` set are treated as missing
    """
    query = db.query(model).filter(
        model.id == object_id,  # type: ignore[attr-defined]
        model.deleted_at.is_(None),  # type: ignore[attr-defined]
    )
    if not include_hidden and hasattr(model, "hidden_at"):
        query = query.filter(model.hidden_at.is_(None))  # type: ignore[attr-defined]
    obj = query.first()
    if obj is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    return obj


def get_target(db: Session, target_type: str, target_id: int) -> Any | None:
    """Return the live row referenced by a polymorphic target, or None."""
    model = TARGET_MODELS.get(target_type)
    if model is None:
        return None
    return (
        db.query(model)
        .filter(model.id == target_id, model.deleted_at.is_(None))
        .first()
    )


def soft_delete(obj: Any) -> None:
    """Mark a row deleted without removing it."""
    obj.deleted_at = utcnow()


def target_owner_id(target: Any) -> int | None:
    """Return the id of the member who authored `target`, if known."""
    for attr in ("user_id", "author_id", "created_by"):
        value = getattr(target, attr, None)
        if value is not None:
            return int(value)
    return None


def target_title(target: Any, length: int = 100) -> str:
    """Human-readable label for any content row."""
    for attr in ("adage", "title", "content", "challenge_reason", "display_name", "username"):
        value = getattr(target, attr, None)
        if isinstance(value, str) and value:
            return value if len(value) <= length else value[: length - 3] + "..."
    return f"#{getattr(target, 'id', '?')}"
