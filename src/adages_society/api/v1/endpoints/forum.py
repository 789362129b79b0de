# src/adages_society/api/v1/endpoints/forum.py
"""Forum sections, threads and replies."""

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from adages_society.api.v1.dependencies import (
    AdminUserDep,
    CurrentUserDep,
    ModeratorUserDep,
    SessionDep,
    VerifiedUserDep,
)
from adages_society.db.time import utcnow
from adages_society.models import ForumReply, ForumSection, ForumThread, User
from adages_society.repositories.content_repo import get_live_or_404
from adages_society.schemas.common import ApiResponse, UserSummary
from adages_society.schemas.forum import (
    ForumReplyReport,
    ReplyCreate,
    ReplyResponse,
    ReplyUpdate,
    SectionCreate,
    SectionDetail,
    SectionResponse,
    ThreadCreate,
    ThreadDetail,
    ThreadModeration,
    ThreadResponse,
)
from adages_society.schemas.moderation import ChallengeResponse
from adages_society.services.forum import ForumService
from adages_society.services.moderation import ModerationService
from adages_society.services.votes import VoteService
from adages_society.utils.text import slugify

router = APIRouter(prefix="/forum", tags=["forum"])


def _authors(db: Session, ids: set[int]) -> dict[int, User]:
    if not ids:
        return {}
    return {user.id: user for user in db.query(User).filter(User.id.in_(ids))}


def _thread_responses(db: Session, threads: list[ForumThread]) -> list[ThreadResponse]:
    authors = _authors(db, {thread.author_id for thread in threads})
    scores = VoteService.scores(db, "forum_thread", [thread.id for thread in threads])
    results = []
    for thread in threads:
        item = ThreadResponse.model_validate(thread)
        author = authors.get(thread.author_id)
        item.author = UserSummary.model_validate(author) if author else None
        item.score = scores.get(thread.id, 0)
        results.append(item)
    return results


def _reply_responses(db: Session, replies: list[ForumReply]) -> list[ReplyResponse]:
    authors = _authors(db, {reply.author_id for reply in replies})
    scores = VoteService.scores(db, "forum_reply", [reply.id for reply in replies])
    results = []
    for reply in replies:
        item = ReplyResponse.model_validate(reply)
        author = authors.get(reply.author_id)
        item.author = UserSummary.model_validate(author) if author else None
        item.score = scores.get(reply.id, 0)
        results.append(item)
    return results


def _section_or_404(db: Session, slug: str) -> ForumSection:
    section = (
        db.query(ForumSection)
        .filter(ForumSection.slug == slug, ForumSection.deleted_at.is_(None))
        .first()
    )
    if section is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Section not found")
    return section


def _live_threads(db: Session):
    return db.query(ForumThread).filter(
        ForumThread.deleted_at.is_(None), ForumThread.hidden_at.is_(None)
    )


@router.get("/sections", response_model=ApiResponse[list[SectionResponse]])
async def list_sections(db: SessionDep) -> ApiResponse[list[SectionResponse]]:
    sections = (
        db.query(ForumSection)
        .filter(ForumSection.deleted_at.is_(None))
        .order_by(ForumSection.order_index.asc(), ForumSection.id.asc())
        .all()
    )
    counts = dict(
        _live_threads(db)
        .with_entities(ForumThread.section_id, func.count(ForumThread.id))
        .group_by(ForumThread.section_id)
        .all()
    )
    results = []
    for section in sections:
        item = SectionResponse.model_validate(section)
        item.thread_count = int(counts.get(section.id, 0))
        results.append(item)
    return ApiResponse(data=results)


@router.get("/sections/{slug}", response_model=ApiResponse[SectionDetail])
async def get_section(slug: str, db: SessionDep) -> ApiResponse[SectionDetail]:
    """A section with its threads, pinned first and then by latest activity."""
    section = _section_or_404(db, slug)
    threads = (
        _live_threads(db)
        .filter(ForumThread.section_id == section.id)
        .order_by(
            ForumThread.pinned.desc(),
            func.coalesce(ForumThread.last_reply_at, ForumThread.created_at).desc(),
            ForumThread.id.desc(),
        )
        .all()
    )
    detail = SectionDetail.model_validate(section)
    detail.threads = _thread_responses(db, threads)
    detail.thread_count = len(threads)
    return ApiResponse(data=detail)


@router.post(
    "/sections", response_model=ApiResponse[SectionResponse], status_code=status.HTTP_201_CREATED
)
async def create_section(
    payload: SectionCreate, _admin: AdminUserDep, db: SessionDep
) -> ApiResponse[SectionResponse]:
    slug = slugify(payload.slug or payload.title)
    if db.query(ForumSection.id).filter(ForumSection.slug == slug).first() is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="A section with this slug exists"
        )
    section = ForumSection(
        title=payload.title.strip(),
        slug=slug,
        description=payload.description,
        order_index=payload.order_index,
        locked=payload.locked,
    )
    db.add(section)
    db.commit()
    db.refresh(section)
    return ApiResponse(data=SectionResponse.model_validate(section), message="Section created")


@router.post(
    "/threads", response_model=ApiResponse[ThreadResponse], status_code=status.HTTP_201_CREATED
)
async def create_thread(
    payload: ThreadCreate, current_user: VerifiedUserDep, db: SessionDep
) -> ApiResponse[ThreadResponse]:
    thread = ForumService.create_thread(db, current_user, payload)
    return ApiResponse(data=_thread_responses(db, [thread])[0], message="Thread created")


@router.get("/threads/{section_slug}/{thread_slug}", response_model=ApiResponse[ThreadDetail])
async def get_thread(section_slug: str, thread_slug: str, db: SessionDep) -> ApiResponse[ThreadDetail]:
    section = _section_or_404(db, section_slug)
    thread = (
        _live_threads(db)
        .filter(ForumThread.section_id == section.id, ForumThread.slug == thread_slug)
        .first()
    )
    if thread is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Thread not found")

    db.query(ForumThread).filter(ForumThread.id == thread.id).update(
        {ForumThread.views_count: ForumThread.views_count + 1}, synchronize_session=False
    )
    db.commit()
    db.refresh(thread)

    replies = (
        db.query(ForumReply)
        .filter(
            ForumReply.thread_id == thread.id,
            ForumReply.deleted_at.is_(None),
            ForumReply.hidden_at.is_(None),
        )
        .order_by(ForumReply.created_at.asc(), ForumReply.id.asc())
        .all()
    )
    detail = ThreadDetail.model_validate(_thread_responses(db, [thread])[0].model_dump())
    detail.section = SectionResponse.model_validate(section)
    detail.replies = _reply_responses(db, replies)
    return ApiResponse(data=detail)


@router.patch("/threads/{thread_id}", response_model=ApiResponse[ThreadResponse])
async def moderate_thread(
    thread_id: int, payload: ThreadModeration, _moderator: ModeratorUserDep, db: SessionDep
) -> ApiResponse[ThreadResponse]:
    """Pin, lock, freeze or hide a thread."""
    thread = get_live_or_404(db, ForumThread, thread_id, detail="Thread not found")
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    hidden = changes.pop("hidden", None)
    for key, value in changes.items():
        setattr(thread, key, value)
    if hidden is not None:
        thread.hidden_at = utcnow() if hidden else None
    db.commit()
    db.refresh(thread)
    return ApiResponse(data=_thread_responses(db, [thread])[0], message="Thread updated")


@router.delete("/threads/{thread_id}", response_model=ApiResponse[None])
async def delete_thread(
    thread_id: int, current_user: CurrentUserDep, db: SessionDep
) -> ApiResponse[None]:
    thread = get_live_or_404(db, ForumThread, thread_id, detail="Thread not found")
    ForumService.ensure_owner_or_moderator(current_user, thread.author_id)
    thread.deleted_at = utcnow()
    db.commit()
    return ApiResponse(message="Thread deleted")


@router.post(
    "/replies", response_model=ApiResponse[ReplyResponse], status_code=status.HTTP_201_CREATED
)
async def create_reply(
    payload: ReplyCreate, current_user: VerifiedUserDep, db: SessionDep
) -> ApiResponse[ReplyResponse]:
    reply = ForumService.create_reply(db, current_user, payload)
    return ApiResponse(data=_reply_responses(db, [reply])[0], message="Reply posted")

@router.post(
    "/replies/report",
    response_model=ApiResponse[ChallengeResponse],
    status_code=status.HTTP_201_CREATED,
)
async def report_reply(
    payload: ForumReplyReport, current_user: CurrentUserDep, db: SessionDep
) -> ApiResponse[ChallengeResponse]:
    """Report a forum reply for moderator review."""
    challenge = ModerationService.report_forum_reply(db, current_user, payload)
    return ApiResponse(
        data=ModerationService.to_response(db, challenge),
        message="Report submitted",
    )


@router.put("/replies/{reply_id}", response_model=ApiResponse[ReplyResponse])
async def update_reply(
    reply_id: int, payload: ReplyUpdate, current_user: CurrentUserDep, db: SessionDep
) -> ApiResponse[ReplyResponse]:
    reply = get_live_or_404(db, ForumReply, reply_id, detail="Reply not found")
    ForumService.ensure_owner_or_moderator(current_user, reply.author_id)
    reply.content = payload.content.strip()
    reply.updated_at = utcnow()
    db.commit()
    db.refresh(reply)
    return ApiResponse(data=_reply_responses(db, [reply])[0], message="Reply updated")


@router.delete("/replies/{reply_id}", response_model=ApiResponse[None])
async def delete_reply(
    reply_id: int, current_user: CurrentUserDep, db: SessionDep
) -> ApiResponse[None]:
    reply = get_live_or_404(db, ForumReply, reply_id, detail="Reply not found")
    ForumService.delete_reply(db, current_user, reply)
    return ApiResponse(message="Reply deleted")
