# src/adages_society/api/v1/endpoints/admin.py
"""Administrative endpoints: deleted-items queue, appeals, message replies and member roles."""

import logging

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import or_

from adages_society.api.v1.dependencies import AdminUserDep, SessionDep
from adages_society.core.roles import ROLE_BANNED
from adages_society.db.time import utcnow
from adages_society.models import ContactMessage, MessageReply, User
from adages_society.repositories.content_repo import get_live_or_404
from adages_society.schemas.common import ApiResponse
from adages_society.schemas.content import MessageReplyCreate, MessageReplyResponse
from adages_society.schemas.moderation import AppealDecision, AppealResponse, DeletedItem
from adages_society.schemas.user import AdminUserResponse, Role, RoleUpdate
from adages_society.services.activity import log_moderation
from adages_society.services.email import EmailError, get_email_service, render_message_reply
from adages_society.services.moderation import ModerationService
from adages_society.services.notifications import notify

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/deleted-items", response_model=ApiResponse[list[DeletedItem]])
async def list_deleted_items(db: SessionDep, _admin: AdminUserDep) -> ApiResponse[list[DeletedItem]]:
    """Soft-deleted content and decided challenges, newest deletion first."""
    return ApiResponse(data=ModerationService.list_deleted_items(db))


@router.post("/deleted-items/{item_type}/{item_id}/restore", response_model=ApiResponse[None])
async def restore_deleted_item(
    item_type: str,
    item_id: int,
    admin: AdminUserDep,
    db: SessionDep,
) -> ApiResponse[None]:
    ModerationService.restore_item(db, item_type, item_id, admin)
    return ApiResponse(message=f"{item_type} restored")


@router.patch("/appeals/{contact_message_id}", response_model=ApiResponse[AppealResponse])
async def decide_appeal(
    contact_message_id: int,
    payload: AppealDecision,
    admin: AdminUserDep,
    db: SessionDep,
) -> ApiResponse[AppealResponse]:
    result = ModerationService.decide_appeal(db, contact_message_id, payload, admin)
    return ApiResponse(data=result, message=f"Appeal {payload.decision}")


@router.post(
    "/messages/{message_id}/reply",
    response_model=ApiResponse[MessageReplyResponse],
    status_code=status.HTTP_201_CREATED,
)
def reply_to_message(
    message_id: int,
    payload: MessageReplyCreate,
    admin: AdminUserDep,
    db: SessionDep,
) -> ApiResponse[MessageReplyResponse]:
    """Email a response to the sender of a contact message and mark it replied."""
    message = get_live_or_404(db, ContactMessage, message_id, detail="Message not found")
    reply_text = payload.reply_text.strip()
    if not reply_text:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Reply text is required")

    reply = MessageReply(message_id=message.id, replied_by=admin.id, reply_text=reply_text)
    db.add(reply)
    message.read = True
    message.replied = True
    message.updated_at = utcnow()
    if message.user_id is not None:
        notify(
            db,
            message.user_id,
            "system",
            "Reply to Your Message",
            "An administrator replied to your message. Check your email for the full response.",
            related_id=message.id,
            related_type="contact_message",
        )
    db.commit()
    db.refresh(reply)

    sent = False
    try:
        sent = get_email_service().send(
            message.email,
            "Re: Your message to American Adages Society",
            render_message_reply(message.name, message.subject, reply_text),
        )
    except EmailError:
        logger.warning("Failed to email reply for message %s", message.id, exc_info=True)

    response = MessageReplyResponse.model_validate(reply)
    response.email_sent = sent
    return ApiResponse(data=response, message="Reply sent successfully")

@router.get("/users", response_model=ApiResponse[list[AdminUserResponse]])
async def list_users(
    db: SessionDep,
    _admin: AdminUserDep,
    role: Role | None = Query(None),
    search: str | None = Query(None),
    include_deleted: bool = Query(False),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> ApiResponse[list[AdminUserResponse]]:
    query = db.query(User)
    if not include_deleted:
        query = query.filter(User.deleted_at.is_(None))
    if role:
        query = query.filter(User.role == role)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(
                User.email.ilike(pattern),
                User.username.ilike(pattern),
                User.display_name.ilike(pattern),
            )
        )
    users = query.order_by(User.created_at.desc()).offset(offset).limit(limit).all()
    return ApiResponse(data=[AdminUserResponse.model_validate(user) for user in users])


@router.patch("/users/{user_id}/role", response_model=ApiResponse[AdminUserResponse])
async def update_user_role(
    user_id: int,
    payload: RoleUpdate,
    admin: AdminUserDep,
    db: SessionDep,
) -> ApiResponse[AdminUserResponse]:
    """Change a member's role; banning requires a reason."""
    if user_id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot change your own role",
        )
    user = db.query(User).filter(User.id == user_id, User.deleted_at.is_(None)).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    ban_reason = (payload.ban_reason or "").strip() or None
    if payload.role == ROLE_BANNED and not ban_reason:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A ban reason is required",
        )

    previous = user.role
    user.role = payload.role
    user.ban_reason = ban_reason if payload.role == ROLE_BANNED else None
    user.updated_at = utcnow()
    log_moderation(
        db,
        admin.id,
        "change_role",
        "user",
        user.id,
        reason=ban_reason,
        details={"from": previous, "to": payload.role},
    )
    notify(
        db,
        user.id,
        "system",
        "Account Role Updated",
        f"Your account role changed from {previous} to {payload.role}.",
    )
    db.commit()
    db.refresh(user)
    return ApiResponse(data=AdminUserResponse.model_validate(user), message="Role updated")


@router.post("/users/{user_id}/restore", response_model=ApiResponse[AdminUserResponse])
async def restore_user(
    user_id: int,
    admin: AdminUserDep,
    db: SessionDep,
) -> ApiResponse[AdminUserResponse]:
    user = db.query(User).filter(User.id == user_id, User.deleted_at.is_not(None)).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    user.deleted_at = None
    log_moderation(db, admin.id, "restore_user", "user", user.id)
    db.commit()
    db.refresh(user)
    return ApiResponse(data=AdminUserResponse.model_validate(user), message="User restored")
