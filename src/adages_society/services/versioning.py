"""Edit history for adages and blog posts.

Before an update is applied, the row's current state is copied into the
matching `*_versions` table with the next `version_number`.
"""
from __future__ import annotations

from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from adages_society.models import Adage, AdageVersion, BlogPost, BlogPostVersion

__all__ = [
    "apply_changes",
    "next_version_number",
    "snapshot_adage",
    "snapshot_blog_post",
]

_ADAGE_FIELDS = (
    "adage",
    "definition",
    "origin",
    "etymology",
    "historical_context",
    "interpretation",
    "modern_practicality",
    "tags",
)
_BLOG_FIELDS = ("title", "content", "excerpt", "tags")


def next_version_number(db: Session, version_model: Any, parent_column: Any, parent_id: int) -> int:
    """Return max(version_number) + 1 for the given parent row."""
    current = (
        db.query(func.max(version_model.version_number))
        .filter(parent_column == parent_id)
        .scalar()
    )
    return int(current or 0) + 1


def snapshot_adage(db: Session, adage: Adage, changed_by: int | None) -> AdageVersion:
    version = AdageVersion(
        adage_id=adage.id,
        version_number=next_version_number(db, AdageVersion, AdageVersion.adage_id, adage.id),
        changed_by=changed_by,
        **{field: _copy(getattr(adage, field)) for field in _ADAGE_FIELDS},
    )
    db.add(version)
    return version


def snapshot_blog_post(db: Session, post: BlogPost, changed_by: int | None) -> BlogPostVersion:
    version = BlogPostVersion(
        post_id=post.id,
        version_number=next_version_number(db, BlogPostVersion, BlogPostVersion.post_id, post.id),
        changed_by=changed_by,
        **{field: _copy(getattr(post, field)) for field in _BLOG_FIELDS},
    )
    db.add(version)
    return version


def apply_changes(obj: Any, changes: dict[str, Any]) -> list[str]:
    """Set attributes that actually differ and return the names changed."""
    changed: list[str] = []
    for key, value in changes.items():
        if getattr(obj, key) != value:
            setattr(obj, key, value)
            changed.append(key)
    return changed


def _copy(value: Any) -> Any:
    # JSON lists are mutable; keep the snapshot independent of later edits.
    return list(value) if isinstance(value, list) else value
