# src/adages_society/api/v1/endpoints/notifications.py
"""The signed-in member's notification inbox."""

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from adages_society.api.v1.dependencies import CurrentUserDep, SessionDep
from adages_society.db.time import utcnow
from adages_society.models import Notification
from adages_society.schemas.common import ApiResponse
from adages_society.schemas.social import NotificationCounts, NotificationResponse

router = APIRouter(prefix="/notifications", tags=["notifications"])

INBOX_LIMIT = 100


def _inbox(db: Session, user_id: int):
    return db.query(Notification).filter(
        Notification.user_id == user_id, Notification.deleted_at.is_(None)
    )


def _owned_or_404(db: Session, notification_id: int, user_id: int) -> Notification:
    notification = _inbox(db, user_id).filter(Notification.id == notification_id).first()
    if notification is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return notification


@router.get("", response_model=ApiResponse[list[NotificationResponse]])
async def list_notifications(
    current_user: CurrentUserDep,
    db: SessionDep,
    unread: bool = Query(False),
) -> ApiResponse[list[NotificationResponse]]:
    query = _inbox(db, current_user.id)
    if unread:
        query = query.filter(Notification.read.is_(False))
    rows = query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(INBOX_LIMIT)
    return ApiResponse(data=[NotificationResponse.model_validate(n) for n in rows])


@router.get("/counts", response_model=ApiResponse[NotificationCounts])
async def notification_counts(
    current_user: CurrentUserDep, db: SessionDep
) -> ApiResponse[NotificationCounts]:
    total = _inbox(db, current_user.id).with_entities(func.count(Notification.id)).scalar() or 0
    unread = (
        _inbox(db, current_user.id)
        .filter(Notification.read.is_(False))
        .with_entities(func.count(Notification.id))
        .scalar()
        or 0
    )
    return ApiResponse(data=NotificationCounts(unread=unread, total=total))


@router.post("/read-all", response_model=ApiResponse[NotificationCounts])
async def mark_all_read(
    current_user: CurrentUserDep, db: SessionDep
) -> ApiResponse[NotificationCounts]:
    updated = (
        _inbox(db, current_user.id)
        .filter(Notification.read.is_(False))
        .update({Notification.read: True, Notification.read_at: utcnow()}, synchronize_session=False)
    )
    db.commit()
    total = _inbox(db, current_user.id).with_entities(func.count(Notification.id)).scalar() or 0
    return ApiResponse(
        data=NotificationCounts(unread=0, total=total),
        message=f"Marked {updated} notifications as read",
    )


@router.post("/{notification_id}/read", response_model=ApiResponse[NotificationResponse])
async def mark_read(
    notification_id: int, current_user: CurrentUserDep, db: SessionDep
) -> ApiResponse[NotificationResponse]:
    notification = _owned_or_404(db, notification_id, current_user.id)
    if not notification.read:
        notification.read = True
        notification.read_at = utcnow()
        db.commit()
        db.refresh(notification)
    return ApiResponse(data=NotificationResponse.model_validate(notification))


@router.delete("/{notification_id}", response_model=ApiResponse[None])
async def dismiss_notification(
    notification_id: int, current_user: CurrentUserDep, db: SessionDep
) -> ApiResponse[None]:
    notification = _owned_or_404(db, notification_id, current_user.id)
    notification.deleted_at = utcnow()
    db.commit()
    return ApiResponse(message="Notification dismissed")
