"""Forum posting rules: cooldowns, locks and reply bookkeeping."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from adages_society.core.roles import ROLE_PROBATION, can_participate, is_moderator
from adages_society.core.settings import settings
from adages_society.db.time import utcnow
from adages_society.models import ForumReply, ForumSection, ForumThread, User
from adages_society.schemas.forum import ReplyCreate, ThreadCreate
from adages_society.utils.text import slugify

logger = logging.getLogger(__name__)

__all__ = ["ForumService"]


def _ensure_participant(user: User) -> None:
    if not can_participate(user.role):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account is not allowed to post in the forum",
        )


def _posted_since(db: Session, model, author_id: int, since: datetime) -> bool:
    return (
        db.query(model.id)
        .filter(model.author_id == author_id, model.created_at > since)
        .first()
        is not None
    )


def _thread_slug(db: Session, section_id: int, title: str, now: datetime) -> str:
    """Slug of `title`, suffixed with the post time and then a counter until unused."""

    def taken(candidate: str) -> bool:
        return (
            db.query(ForumThread.id)
            .filter(ForumThread.section_id == section_id, ForumThread.slug == candidate)
            .first()
            is not None
        )

    slug = slugify(title)
    if not taken(slug):
        return slug
    stamped = f"{slug}-{int(now.timestamp())}"
    candidate = stamped
    suffix = 2
    while taken(candidate):
        candidate = f"{stamped}-{suffix}"
        suffix += 1
    return candidate

class ForumService:
    """Service handling thread and reply creation."""

    @staticmethod
    def create_thread(db: Session, user: User, payload: ThreadCreate) -> ForumThread:
        """Open a thread after the role, lock and cooldown checks pass."""
        _ensure_participant(user)
        section = (
            db.query(ForumSection)
            .filter(ForumSection.id == payload.section_id, ForumSection.deleted_at.is_(None))
            .first()
        )
        if section is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Section not found")
        if section.locked and not is_moderator(user.role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="This section is locked"
            )

        now = utcnow()
        if user.role == ROLE_PROBATION:
            window = timedelta(seconds=settings.forum_probation_cooldown_seconds)
            if _posted_since(db, ForumThread, user.id, now - window):
                raise HTTPException(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    detail="Accounts on probation may open one thread per hour",
                )
        window = timedelta(seconds=settings.forum_thread_cooldown_seconds)
        if _posted_since(db, ForumThread, user.id, now - window):
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Please wait before creating another thread",
            )

        slug = _thread_slug(db, section.id, payload.title, now)

        thread = ForumThread(
            section_id=section.id,
            author_id=user.id,
            title=payload.title.strip(),
            slug=slug,
            content=payload.content.strip(),
        )
        db.add(thread)
        db.commit()
        db.refresh(thread)
        logger.info("User %s opened forum thread %s in section %s", user.id, thread.id, section.id)
        return thread

    @staticmethod
    def create_reply(db: Session, user: User, payload: ReplyCreate) -> ForumReply:
        """Post a reply and update the thread's counters."""
        _ensure_participant(user)
        thread = (
            db.query(ForumThread)
            .filter(
                ForumThread.id == payload.thread_id,
                ForumThread.deleted_at.is_(None),
                ForumThread.hidden_at.is_(None),
            )
            .first()
        )
        if thread is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Thread not found")
        if thread.frozen:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="This thread is frozen"
            )
        if thread.locked:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="This thread is locked"
            )

        now = utcnow()
        window = timedelta(seconds=settings.forum_reply_cooldown_seconds)
        if _posted_since(db, ForumReply, user.id, now - window):
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Please wait before replying again",
            )
        live_replies = (
            db.query(func.count(ForumReply.id))
            .filter(ForumReply.thread_id == thread.id, ForumReply.deleted_at.is_(None))
            .scalar()
            or 0
        )
        if live_replies >= settings.forum_max_replies_per_thread:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="This thread has reached the maximum number of replies",
            )

        reply = ForumReply(thread_id=thread.id, author_id=user.id, content=payload.content.strip())
        db.add(reply)
        thread.replies_count = live_replies + 1
        thread.last_reply_at = now
        db.commit()
        db.refresh(reply)
        return reply

    @staticmethod
    def ensure_owner_or_moderator(user: User, author_id: int) -> None:
        if author_id != user.id and not is_moderator(user.role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions"
            )

    @staticmethod
    def delete_reply(db: Session, user: User, reply: ForumReply) -> None:
        ForumService.ensure_owner_or_moderator(user, reply.author_id)
        reply.deleted_at = utcnow()
        thread = db.get(ForumThread, reply.thread_id)
        if thread is not None and thread.replies_count > 0:
            thread.replies_count -= 1
        db.commit()
