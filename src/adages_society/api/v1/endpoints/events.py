# src/adages_society/api/v1/endpoints/events.py
"""Society events calendar."""

from datetime import datetime

from fastapi import APIRouter, Query, status
from sqlalchemy import or_

from adages_society.api.v1.dependencies import AdminUserDep, SessionDep
from adages_society.db.time import as_utc, utcnow
from adages_society.models import Event
from adages_society.repositories.content_repo import get_live_or_404
from adages_society.schemas.common import ApiResponse
from adages_society.schemas.content import EventCreate, EventResponse, EventUpdate
from adages_society.services.activity import log_activity

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=ApiResponse[list[EventResponse]])
async def list_events(
    db: SessionDep,
    upcoming: bool = Query(False),
    past: bool = Query(False),
    event_type: str | None = Query(None),
    search: str | None = Query(None),
    date_from: datetime | None = Query(None),
    date_to: datetime | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> ApiResponse[list[EventResponse]]:
    now = utcnow()
    query = db.query(Event).filter(Event.deleted_at.is_(None), Event.hidden_at.is_(None))
    if upcoming:
        query = query.filter(Event.event_date >= now)
    if past:
        query = query.filter(Event.event_date < now)
    if event_type:
        query = query.filter(Event.event_type == event_type)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(
                Event.title.ilike(pattern),
                Event.description.ilike(pattern),
                Event.location.ilike(pattern),
            )
        )
    if date_from is not None:
        query = query.filter(Event.event_date >= as_utc(date_from))
    if date_to is not None:
        query = query.filter(Event.event_date <= as_utc(date_to))
    events = query.order_by(Event.event_date.asc(), Event.id.asc()).offset(offset).limit(limit)
    return ApiResponse(data=[EventResponse.model_validate(e) for e in events])


@router.get("/{event_id}", response_model=ApiResponse[EventResponse])
async def get_event(event_id: int, db: SessionDep) -> ApiResponse[EventResponse]:
    event = get_live_or_404(db, Event, event_id, detail="Event not found", include_hidden=False)
    return ApiResponse(data=EventResponse.model_validate(event))


@router.post("", response_model=ApiResponse[EventResponse], status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: EventCreate, admin: AdminUserDep, db: SessionDep
) -> ApiResponse[EventResponse]:
    data = payload.model_dump()
    data["event_date"] = as_utc(data["event_date"])
    event = Event(**data, created_by=admin.id)
    db.add(event)
    db.flush()
    log_activity(db, admin.id, "create_event", "event", event.id)
    db.commit()
    db.refresh(event)
    return ApiResponse(data=EventResponse.model_validate(event), message="Event created")


@router.put("/{event_id}", response_model=ApiResponse[EventResponse])
async def update_event(
    event_id: int, payload: EventUpdate, admin: AdminUserDep, db: SessionDep
) -> ApiResponse[EventResponse]:
    event = get_live_or_404(db, Event, event_id, detail="Event not found")
    changes = payload.model_dump(exclude_unset=True)
    hidden = changes.pop("hidden", None)
    for key, value in changes.items():
        if key in ("title", "event_date") and value is None:
            continue
        setattr(event, key, as_utc(value) if key == "event_date" else value)
    if hidden is not None:
        event.hidden_at = utcnow() if hidden else None
    event.updated_at = utcnow()
    log_activity(db, admin.id, "update_event", "event", event.id, {"fields": sorted(changes)})
    db.commit()
    db.refresh(event)
    return ApiResponse(data=EventResponse.model_validate(event), message="Event updated")


@router.delete("/{event_id}", response_model=ApiResponse[None])
async def delete_event(event_id: int, admin: AdminUserDep, db: SessionDep) -> ApiResponse[None]:
    event = get_live_or_404(db, Event, event_id, detail="Event not found")
    event.deleted_at = utcnow()
    log_activity(db, admin.id, "delete_event", "event", event.id)
    db.commit()
    return ApiResponse(message="Event deleted")
