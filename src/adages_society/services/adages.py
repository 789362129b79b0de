"""Archive queries and admin edits for adages."""
from __future__ import annotations

import json
from collections.abc import Iterable, Sequence

from sqlalchemy import String, cast, func, or_
from sqlalchemy.orm import Query, Session

from adages_society.db.time import utcnow
from adages_society.models import Adage, Citation, Comment, SavedAdage
from adages_society.schemas.adage import (
    AdageCreate,
    AdageDetail,
    AdageResponse,
    AdageUpdate,
    CitationSummary,
)
from adages_society.services.activity import log_activity
from adages_society.services.versioning import apply_changes, snapshot_adage
from adages_society.services.votes import VoteService

__all__ = [
    "adage_detail",
    "create_adage",
    "delete_adage",
    "filter_by_tag",
    "list_adages",
    "save_counts_for",
    "to_responses",
    "update_adage",
]

MAX_PAGE_SIZE = 100


def filter_by_tag(query: Query, column, tag: str) -> Query:  # type: ignore[type-arg]
    """Match rows whose JSON tag list contains `tag` exactly."""
    # Encoded the way the JSON column stores it, with LIKE wildcards escaped.
    needle = json.dumps(tag).replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return query.filter(cast(column, String).like(f"%{needle}%", escape="\\"))


def list_adages(
    db: Session,
    *,
    search: str | None = None,
    tag: str | None = None,
    featured: bool | None = None,
    limit: int = MAX_PAGE_SIZE,
    offset: int = 0,
    include_hidden: bool = False,
) -> tuple[list[Adage], int]:
    """Return a page of adages and the total number matching the filters."""
    query = db.query(Adage).filter(Adage.deleted_at.is_(None))
    if not include_hidden:
        query = query.filter(Adage.hidden_at.is_(None))
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Adage.adage.ilike(pattern), Adage.definition.ilike(pattern)))
    if tag:
        query = filter_by_tag(query, Adage.tags, tag.strip())
    if featured is not None:
        query = query.filter(Adage.featured.is_(featured))

    total = query.count()
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    rows = (
        query.order_by(Adage.created_at.desc(), Adage.id.desc())
        .offset(max(offset, 0))
        .limit(limit)
        .all()
    )
    return rows, total


def to_responses(db: Session, adages: Sequence[Adage]) -> list[AdageResponse]:
    """Serialize adages with their current scores."""
    scores = VoteService.scores(db, "adage", [adage.id for adage in adages])
    responses = []
    for adage in adages:
        item = AdageResponse.model_validate(adage)
        item.score = scores.get(adage.id, 0)
        responses.append(item)
    return responses


def save_counts_for(db: Session, adage_ids: Iterable[int]) -> dict[int, int]:
    ids = list(adage_ids)
    if not ids:
        return {}
    rows = (
        db.query(SavedAdage.adage_id, func.count(SavedAdage.id))
        .filter(SavedAdage.adage_id.in_(ids), SavedAdage.deleted_at.is_(None))
        .group_by(SavedAdage.adage_id)
        .all()
    )
    return {adage_id: int(count) for adage_id, count in rows}


def adage_detail(db: Session, adage: Adage, viewer_id: int | None) -> AdageDetail:
    """Record a view and return the adage with per-viewer data."""
    db.query(Adage).filter(Adage.id == adage.id).update(
        {Adage.views_count: Adage.views_count + 1}, synchronize_session=False
    )
    db.commit()
    db.refresh(adage)

    votes = VoteService.summary(db, "adage", adage.id, user_id=viewer_id)
    citations = (
        db.query(Citation)
        .filter(
            Citation.adage_id == adage.id,
            Citation.verified.is_(True),
            Citation.deleted_at.is_(None),
        )
        .order_by(Citation.created_at.asc())
        .all()
    )
    comment_count = (
        db.query(func.count(Comment.id))
        .filter(
            Comment.target_type == "adage",
            Comment.target_id == adage.id,
            Comment.deleted_at.is_(None),
            Comment.hidden_at.is_(None),
        )
        .scalar()
    )
    saved = False
    if viewer_id is not None:
        saved = (
            db.query(SavedAdage.id)
            .filter(
                SavedAdage.user_id == viewer_id,
                SavedAdage.adage_id == adage.id,
                SavedAdage.deleted_at.is_(None),
            )
            .first()
            is not None
        )

    detail = AdageDetail.model_validate(adage)
    detail.score = votes.score
    detail.user_vote = votes.user_vote
    detail.save_count = save_counts_for(db, [adage.id]).get(adage.id, 0)
    detail.comment_count = int(comment_count or 0)
    detail.saved = saved
    detail.citations = [CitationSummary.model_validate(citation) for citation in citations]
    return detail


def create_adage(db: Session, payload: AdageCreate, user_id: int) -> Adage:
    adage = Adage(
        **payload.model_dump(),
        created_by=user_id,
        updated_by=user_id,
    )
    if adage.published_at is None:
        adage.published_at = utcnow()
    db.add(adage)
    db.flush()
    log_activity(db, user_id, "create_adage", "adage", adage.id)
    db.commit()
    db.refresh(adage)
    return adage


def update_adage(db: Session, adage: Adage, payload: AdageUpdate, user_id: int) -> Adage:
    """Snapshot the current state, then apply the provided fields."""
    changes = payload.model_dump(exclude_unset=True)
    hidden = changes.pop("hidden", None)
    for required in ("adage", "definition"):
        if required in changes and changes[required] is None:
            changes.pop(required)

    snapshot_adage(db, adage, user_id)
    changed = apply_changes(adage, changes)
    if hidden is not None:
        adage.hidden_at = utcnow() if hidden else None
        changed.append("hidden_at")
    adage.updated_by = user_id
    adage.updated_at = utcnow()
    log_activity(db, user_id, "update_adage", "adage", adage.id, {"fields": changed})
    db.commit()
    db.refresh(adage)
    return adage


def delete_adage(db: Session, adage: Adage, user_id: int) -> None:
    now = utcnow()
    adage.deleted_at = now
    adage.featured = False
    adage.updated_by = user_id
    log_activity(db, user_id, "delete_adage", "adage", adage.id)
    db.commit()
