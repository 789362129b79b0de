# src/adages_society/api/v1/endpoints/mailing_list.py
"""Mailing list subscriptions and the weekly digest trigger."""

from fastapi import APIRouter, Query, Request

from adages_society.api.v1.dependencies import (
    AdminUserDep,
    SessionDep,
    client_key,
    enforce_rate_limit,
)
from adages_society.models import MailingListEntry
from adages_society.schemas.common import ApiResponse
from adages_society.schemas.content import (
    MailingListResponse,
    SubscribeRequest,
    SubscriptionStatus,
    UnsubscribeRequest,
    WeeklySendResult,
)
from adages_society.services import mailing

router = APIRouter(prefix="/mailing-list", tags=["mailing-list"])


@router.post("", response_model=ApiResponse[MailingListResponse])
async def subscribe(
    payload: SubscribeRequest, request: Request, db: SessionDep
) -> ApiResponse[MailingListResponse]:
    enforce_rate_limit(f"subscribe:{client_key(request)}")
    entry, changed = mailing.subscribe(
        db,
        payload.email.strip().lower(),
        first_name=payload.first_name,
        last_name=payload.last_name,
        source=payload.source,
    )
    message = "Subscribed to the mailing list" if changed else "Already subscribed"
    return ApiResponse(data=MailingListResponse.model_validate(entry), message=message)


@router.get("", response_model=ApiResponse[list[MailingListResponse]])
async def list_subscribers(
    _admin: AdminUserDep,
    db: SessionDep,
    include_unsubscribed: bool = Query(False),
) -> ApiResponse[list[MailingListResponse]]:
    query = db.query(MailingListEntry)
    if not include_unsubscribed:
        query = query.filter(MailingListEntry.unsubscribed_at.is_(None))
    entries = query.order_by(MailingListEntry.subscribed_at.desc()).all()
    return ApiResponse(data=[MailingListResponse.model_validate(e) for e in entries])


@router.get("/status", response_model=ApiResponse[SubscriptionStatus])
async def subscription_status(
    db: SessionDep, email: str = Query(..., min_length=3)
) -> ApiResponse[SubscriptionStatus]:
    subscribed = mailing.is_subscribed(db, email.strip().lower())
    return ApiResponse(data=SubscriptionStatus(subscribed=subscribed))


@router.post("/unsubscribe", response_model=ApiResponse[None])
async def unsubscribe(payload: UnsubscribeRequest, db: SessionDep) -> ApiResponse[None]:
    changed = mailing.unsubscribe(db, payload.email.strip().lower())
    message = "Unsubscribed from the mailing list" if changed else "Not subscribed"
    return ApiResponse(message=message)


@router.post("/send-weekly", response_model=ApiResponse[WeeklySendResult])
def send_weekly(_admin: AdminUserDep, db: SessionDep) -> ApiResponse[WeeklySendResult]:
    """Email the current featured adage to every weekly recipient."""
    result = mailing.send_weekly_digest(db)
    return ApiResponse(
        data=result, message=f"Weekly adage sent to {result.sent} recipients"
    )
