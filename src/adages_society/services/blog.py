"""Blog post listing, slug allocation and versioned edits."""
from __future__ import annotations

from collections.abc import Sequence

from fastapi import HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from adages_society.db.time import utcnow
from adages_society.models import BlogPost, Comment
from adages_society.schemas.blog import BlogPostCreate, BlogPostResponse, BlogPostUpdate
from adages_society.services.activity import log_activity
from adages_society.services.adages import MAX_PAGE_SIZE, filter_by_tag
from adages_society.services.versioning import apply_changes, snapshot_blog_post
from adages_society.services.votes import VoteService
from adages_society.utils.text import slugify

__all__ = [
    "create_post",
    "delete_post",
    "get_visible_post",
    "list_posts",
    "to_responses",
    "unique_slug",
    "update_post",
]


def unique_slug(db: Session, base: str, exclude_id: int | None = None) -> str:
    """Return `base` or `base-N`, the first that no other post uses."""
    slug = slugify(base)
    candidate = slug
    suffix = 2
    while True:
        query = db.query(BlogPost.id).filter(BlogPost.slug == candidate)
        if exclude_id is not None:
            query = query.filter(BlogPost.id != exclude_id)
        if query.first() is None:
            return candidate
        candidate = f"{slug}-{suffix}"
        suffix += 1


def _visible(query, include_unpublished: bool):
    query = query.filter(BlogPost.deleted_at.is_(None))
    if not include_unpublished:
        query = query.filter(BlogPost.published.is_(True), BlogPost.hidden_at.is_(None))
    return query


def list_posts(
    db: Session,
    *,
    include_unpublished: bool = False,
    search: str | None = None,
    tag: str | None = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[BlogPost], int]:
    query = _visible(db.query(BlogPost), include_unpublished)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(BlogPost.title.ilike(pattern), BlogPost.content.ilike(pattern)))
    if tag:
        query = filter_by_tag(query, BlogPost.tags, tag.strip())
    total = query.count()
    rows = (
        query.order_by(
            func.coalesce(BlogPost.published_at, BlogPost.created_at).desc(), BlogPost.id.desc()
        )
        .offset(max(offset, 0))
        .limit(max(1, min(limit, MAX_PAGE_SIZE)))
        .all()
    )
    return rows, total


def get_visible_post(
    db: Session,
    *,
    post_id: int | None = None,
    slug: str | None = None,
    include_unpublished: bool = False,
) -> BlogPost:
    query = _visible(db.query(BlogPost), include_unpublished)
    if post_id is not None:
        query = query.filter(BlogPost.id == post_id)
    if slug is not None:
        query = query.filter(BlogPost.slug == slug)
    post = query.first()
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog post not found")
    return post


def to_responses(db: Session, posts: Sequence[BlogPost]) -> list[BlogPostResponse]:
    """Serialize posts with score and visible comment count."""
    ids = [post.id for post in posts]
    scores = VoteService.scores(db, "blog", ids)
    counts: dict[int, int] = {}
    if ids:
        rows = (
            db.query(Comment.target_id, func.count(Comment.id))
            .filter(
                Comment.target_type == "blog",
                Comment.target_id.in_(ids),
                Comment.deleted_at.is_(None),
                Comment.hidden_at.is_(None),
            )
            .group_by(Comment.target_id)
            .all()
        )
        counts = {target_id: int(count) for target_id, count in rows}

    responses = []
    for post in posts:
        item = BlogPostResponse.model_validate(post)
        item.score = scores.get(post.id, 0)
        item.comment_count = counts.get(post.id, 0)
        responses.append(item)
    return responses


def create_post(db: Session, payload: BlogPostCreate, user_id: int) -> BlogPost:
    now = utcnow()
    post = BlogPost(
        title=payload.title,
        slug=unique_slug(db, payload.slug or payload.title),
        content=payload.content,
        excerpt=payload.excerpt,
        tags=payload.tags,
        published=payload.published,
        published_at=now if payload.published else None,
        author_id=user_id,
        created_by=user_id,
        updated_by=user_id,
    )
    db.add(post)
    db.flush()
    log_activity(db, user_id, "create_blog_post", "blog", post.id)
    db.commit()
    db.refresh(post)
    return post


def update_post(db: Session, post: BlogPost, payload: BlogPostUpdate, user_id: int) -> BlogPost:
    """Snapshot the post, then apply the provided fields."""
    changes = payload.model_dump(exclude_unset=True)
    hidden = changes.pop("hidden", None)
    for required in ("title", "content"):
        if required in changes and changes[required] is None:
            changes.pop(required)

    snapshot_blog_post(db, post, user_id)
    changed = apply_changes(post, changes)
    if post.published and post.published_at is None:
        post.published_at = utcnow()
    if hidden is not None:
        post.hidden_at = utcnow() if hidden else None
        changed.append("hidden_at")
    post.updated_by = user_id
    post.updated_at = utcnow()
    log_activity(db, user_id, "update_blog_post", "blog", post.id, {"fields": changed})
    db.commit()
    db.refresh(post)
    return post


def delete_post(db: Session, post: BlogPost, user_id: int) -> None:
    post.deleted_at = utcnow()
    post.updated_by = user_id
    log_activity(db, user_id, "delete_blog_post", "blog", post.id)
    db.commit()
