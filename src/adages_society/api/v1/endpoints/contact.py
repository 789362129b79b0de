# src/adages_society/api/v1/endpoints/contact.py
"""Contact form submissions and the admin inbox."""

from fastapi import APIRouter, Query, Request, status

from adages_society.api.v1.dependencies import (
    AdminUserDep,
    OptionalUserDep,
    SessionDep,
    client_key,
    enforce_rate_limit,
)
from adages_society.db.time import utcnow
from adages_society.models import ContactMessage, MailingListEntry
from adages_society.repositories.content_repo import get_live_or_404
from adages_society.schemas.common import ApiResponse
from adages_society.schemas.content import ContactCreate, ContactResponse, ContactUpdate
from adages_society.services import mailing

router = APIRouter(prefix="/contact", tags=["contact"])


@router.post("", response_model=ApiResponse[ContactResponse], status_code=status.HTTP_201_CREATED)
async def submit_message(
    payload: ContactCreate,
    request: Request,
    current_user: OptionalUserDep,
    db: SessionDep,
) -> ApiResponse[ContactResponse]:
    enforce_rate_limit(f"contact:{client_key(request)}")
    email = payload.email.strip().lower()
    message = ContactMessage(
        name=payload.name.strip(),
        email=email,
        subject=payload.subject,
        message=payload.message.strip(),
        category=payload.category,
        user_id=current_user.id if current_user is not None else None,
    )
    db.add(message)
    db.commit()
    db.refresh(message)

    if payload.subscribe:
        known = db.query(MailingListEntry.id).filter(MailingListEntry.email == email).first()
        if known is None:
            first_name, _, last_name = payload.name.strip().partition(" ")
            mailing.subscribe(
                db,
                email,
                first_name=first_name or None,
                last_name=last_name or None,
                source="contact",
            )

    return ApiResponse(
        data=ContactResponse.model_validate(message),
        message="Thank you for your message. We'll be in touch soon.",
    )


@router.get("", response_model=ApiResponse[list[ContactResponse]])
async def list_messages(
    _admin: AdminUserDep,
    db: SessionDep,
    category: str | None = Query(None),
    unread: bool = Query(False),
) -> ApiResponse[list[ContactResponse]]:
    query = db.query(ContactMessage).filter(ContactMessage.deleted_at.is_(None))
    if category:
        query = query.filter(ContactMessage.category == category)
    if unread:
        query = query.filter(ContactMessage.read.is_(False))
    messages = query.order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc()).all()
    return ApiResponse(data=[ContactResponse.model_validate(m) for m in messages])


@router.patch("/{message_id}", response_model=ApiResponse[ContactResponse])
async def update_message(
    message_id: int, payload: ContactUpdate, _admin: AdminUserDep, db: SessionDep
) -> ApiResponse[ContactResponse]:
    message = get_live_or_404(db, ContactMessage, message_id, detail="Message not found")
    for key, value in payload.model_dump(exclude_none=True).items():
        setattr(message, key, value)
    message.updated_at = utcnow()
    db.commit()
    db.refresh(message)
    return ApiResponse(data=ContactResponse.model_validate(message), message="Message updated")
