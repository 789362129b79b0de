# src/adages_society/api/v1/endpoints/lore.py
"""Per-adage variants, translations, usage examples, timeline and related adages."""

from typing import Any, TypeVar

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.orm import Session

from adages_society.api.v1.dependencies import AdminUserDep, SessionDep
from adages_society.db.time import utcnow
from adages_society.models import (
    Adage,
    AdageTimelineEntry,
    AdageTranslation,
    AdageUsageExample,
    AdageVariant,
    RelatedAdage,
)
from adages_society.repositories.content_repo import get_live_or_404
from adages_society.schemas.common import ApiResponse
from adages_society.schemas.lore import (
    RelatedAdageSummary,
    RelatedCreate,
    RelatedResponse,
    RelatedUpdate,
    TimelineCreate,
    TimelineResponse,
    TimelineUpdate,
    TranslationCreate,
    TranslationResponse,
    TranslationUpdate,
    UsageExampleCreate,
    UsageExampleResponse,
    UsageExampleUpdate,
    VariantCreate,
    VariantResponse,
    VariantUpdate,
)
from adages_society.services.activity import log_activity

router = APIRouter(prefix="/adages", tags=["adages"])

ChildT = TypeVar("ChildT")


def _adage_or_404(db: Session, adage_id: int) -> Adage:
    return get_live_or_404(db, Adage, adage_id, detail="Adage not found", include_hidden=False)


def _child_or_404(db: Session, model: type[ChildT], adage_id: int, child_id: int, detail: str) -> ChildT:
    """Live child row that belongs to the given adage."""
    row = (
        db.query(model)
        .filter(
            model.id == child_id,  # type: ignore[attr-defined]
            model.adage_id == adage_id,  # type: ignore[attr-defined]
            model.deleted_at.is_(None),  # type: ignore[attr-defined]
        )
        .first()
    )
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    return row


def _apply(row: Any, changes: dict[str, Any]) -> None:
    for key, value in changes.items():
        setattr(row, key, value)
    row.updated_at = utcnow()


# Variants


@router.get("/{adage_id}/variants", response_model=ApiResponse[list[VariantResponse]])
async def list_variants(adage_id: int, db: SessionDep) -> ApiResponse[list[VariantResponse]]:
    _adage_or_404(db, adage_id)
    rows = (
        db.query(AdageVariant)
        .filter(AdageVariant.adage_id == adage_id, AdageVariant.deleted_at.is_(None))
        .order_by(AdageVariant.created_at.desc(), AdageVariant.id.desc())
        .all()
    )
    return ApiResponse(data=[VariantResponse.model_validate(row) for row in rows])


@router.post(
    "/{adage_id}/variants",
    response_model=ApiResponse[VariantResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_variant(
    adage_id: int, payload: VariantCreate, admin: AdminUserDep, db: SessionDep
) -> ApiResponse[VariantResponse]:
    _adage_or_404(db, adage_id)
    variant = AdageVariant(
        adage_id=adage_id, variant_text=payload.variant_text.strip(), notes=payload.notes
    )
    db.add(variant)
    db.flush()
    log_activity(db, admin.id, "create_variant", "adage", adage_id, {"variant_id": variant.id})
    db.commit()
    db.refresh(variant)
    return ApiResponse(data=VariantResponse.model_validate(variant), message="Variant created")


@router.put("/{adage_id}/variants/{variant_id}", response_model=ApiResponse[VariantResponse])
async def update_variant(
    adage_id: int, variant_id: int, payload: VariantUpdate, _admin: AdminUserDep, db: SessionDep
) -> ApiResponse[VariantResponse]:
    variant = _child_or_404(db, AdageVariant, adage_id, variant_id, "Variant not found")
    _apply(variant, payload.model_dump(exclude_unset=True, exclude_none=True))
    db.commit()
    db.refresh(variant)
    return ApiResponse(data=VariantResponse.model_validate(variant), message="Variant updated")


@router.delete("/{adage_id}/variants/{variant_id}", response_model=ApiResponse[None])
async def delete_variant(
    adage_id: int, variant_id: int, _admin: AdminUserDep, db: SessionDep
) -> ApiResponse[None]:
    variant = _child_or_404(db, AdageVariant, adage_id, variant_id, "Variant not found")
    variant.deleted_at = utcnow()
    db.commit()
    return ApiResponse(message="Variant deleted")


# Translations


@router.get("/{adage_id}/translations", response_model=ApiResponse[list[TranslationResponse]])
async def list_translations(
    adage_id: int, db: SessionDep
) -> ApiResponse[list[TranslationResponse]]:
    _adage_or_404(db, adage_id)
    rows = (
        db.query(AdageTranslation)
        .filter(AdageTranslation.adage_id == adage_id, AdageTranslation.deleted_at.is_(None))
        .order_by(AdageTranslation.language_code.asc(), AdageTranslation.id.asc())
        .all()
    )
    return ApiResponse(data=[TranslationResponse.model_validate(row) for row in rows])


@router.post(
    "/{adage_id}/translations",
    response_model=ApiResponse[TranslationResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_translation(
    adage_id: int, payload: TranslationCreate, admin: AdminUserDep, db: SessionDep
) -> ApiResponse[TranslationResponse]:
    _adage_or_404(db, adage_id)
    translation = AdageTranslation(
        adage_id=adage_id,
        language_code=payload.language_code.strip().lower(),
        translated_text=payload.translated_text.strip(),
        translator_notes=payload.translator_notes,
    )
    db.add(translation)
    db.flush()
    log_activity(
        db, admin.id, "create_translation", "adage", adage_id,
        {"translation_id": translation.id, "language_code": translation.language_code},
    )
    db.commit()
    db.refresh(translation)
    return ApiResponse(
        data=TranslationResponse.model_validate(translation), message="Translation created"
    )


@router.put(
    "/{adage_id}/translations/{translation_id}", response_model=ApiResponse[TranslationResponse]
)
async def update_translation(
    adage_id: int,
    translation_id: int,
    payload: TranslationUpdate,
    _admin: AdminUserDep,
    db: SessionDep,
) -> ApiResponse[TranslationResponse]:
    translation = _child_or_404(
        db, AdageTranslation, adage_id, translation_id, "Translation not found"
    )
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "language_code" in changes:
        changes["language_code"] = changes["language_code"].strip().lower()
    _apply(translation, changes)
    db.commit()
    db.refresh(translation)
    return ApiResponse(
        data=TranslationResponse.model_validate(translation), message="Translation updated"
    )


@router.delete("/{adage_id}/translations/{translation_id}", response_model=ApiResponse[None])
async def delete_translation(
    adage_id: int, translation_id: int, _admin: AdminUserDep, db: SessionDep
) -> ApiResponse[None]:
    translation = _child_or_404(
        db, AdageTranslation, adage_id, translation_id, "Translation not found"
    )
    translation.deleted_at = utcnow()
    db.commit()
    return ApiResponse(message="Translation deleted")


# Usage examples


@router.get(
    "/{adage_id}/usage-examples", response_model=ApiResponse[list[UsageExampleResponse]]
)
async def list_usage_examples(
    adage_id: int, db: SessionDep
) -> ApiResponse[list[UsageExampleResponse]]:
    _adage_or_404(db, adage_id)
    rows = (
        db.query(AdageUsageExample)
        .filter(
            AdageUsageExample.adage_id == adage_id,
            AdageUsageExample.deleted_at.is_(None),
            AdageUsageExample.hidden_at.is_(None),
        )
        .order_by(AdageUsageExample.created_at.desc(), AdageUsageExample.id.desc())
        .all()
    )
    return ApiResponse(data=[UsageExampleResponse.model_validate(row) for row in rows])


@router.post(
    "/{adage_id}/usage-examples",
    response_model=ApiResponse[UsageExampleResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_usage_example(
    adage_id: int, payload: UsageExampleCreate, admin: AdminUserDep, db: SessionDep
) -> ApiResponse[UsageExampleResponse]:
    _adage_or_404(db, adage_id)
    example = AdageUsageExample(
        adage_id=adage_id,
        example_text=payload.example_text.strip(),
        context=payload.context,
        source_type=payload.source_type,
        created_by=admin.id,
    )
    db.add(example)
    db.commit()
    db.refresh(example)
    return ApiResponse(
        data=UsageExampleResponse.model_validate(example), message="Usage example created"
    )


@router.put(
    "/{adage_id}/usage-examples/{example_id}", response_model=ApiResponse[UsageExampleResponse]
)
async def update_usage_example(
    adage_id: int,
    example_id: int,
    payload: UsageExampleUpdate,
    _admin: AdminUserDep,
    db: SessionDep,
) -> ApiResponse[UsageExampleResponse]:
    example = _child_or_404(db, AdageUsageExample, adage_id, example_id, "Usage example not found")
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    hidden = changes.pop("hidden", None)
    if hidden is not None:
        example.hidden_at = utcnow() if hidden else None
    _apply(example, changes)
    db.commit()
    db.refresh(example)
    return ApiResponse(
        data=UsageExampleResponse.model_validate(example), message="Usage example updated"
    )


@router.delete("/{adage_id}/usage-examples/{example_id}", response_model=ApiResponse[None])
async def delete_usage_example(
    adage_id: int, example_id: int, _admin: AdminUserDep, db: SessionDep
) -> ApiResponse[None]:
    example = _child_or_404(db, AdageUsageExample, adage_id, example_id, "Usage example not found")
    example.deleted_at = utcnow()
    db.commit()
    return ApiResponse(message="Usage example deleted")


# Timeline


@router.get("/{adage_id}/timeline", response_model=ApiResponse[list[TimelineResponse]])
async def list_timeline(adage_id: int, db: SessionDep) -> ApiResponse[list[TimelineResponse]]:
    _adage_or_404(db, adage_id)
    rows = (
        db.query(AdageTimelineEntry)
        .filter(AdageTimelineEntry.adage_id == adage_id, AdageTimelineEntry.deleted_at.is_(None))
        .order_by(AdageTimelineEntry.time_period_start.asc(), AdageTimelineEntry.id.asc())
        .all()
    )
    return ApiResponse(data=[TimelineResponse.model_validate(row) for row in rows])


@router.post(
    "/{adage_id}/timeline",
    response_model=ApiResponse[TimelineResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_timeline_entry(
    adage_id: int, payload: TimelineCreate, _admin: AdminUserDep, db: SessionDep
) -> ApiResponse[TimelineResponse]:
    _adage_or_404(db, adage_id)
    entry = AdageTimelineEntry(adage_id=adage_id, **payload.model_dump())
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return ApiResponse(data=TimelineResponse.model_validate(entry), message="Timeline entry created")


@router.put("/{adage_id}/timeline/{entry_id}", response_model=ApiResponse[TimelineResponse])
async def update_timeline_entry(
    adage_id: int, entry_id: int, payload: TimelineUpdate, _admin: AdminUserDep, db: SessionDep
) -> ApiResponse[TimelineResponse]:
    entry = _child_or_404(db, AdageTimelineEntry, adage_id, entry_id, "Timeline entry not found")
    changes = payload.model_dump(exclude_unset=True)
    # Start and level are required columns; an explicit null leaves them as they are.
    for key in ("time_period_start", "popularity_level", "sources"):
        if key in changes and changes[key] is None:
            del changes[key]
    end = changes.get("time_period_end", entry.time_period_end)
    start = changes.get("time_period_start", entry.time_period_start)
    if end is not None and end < start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="time_period_end cannot be before time_period_start",
        )
    _apply(entry, changes)
    db.commit()
    db.refresh(entry)
    return ApiResponse(data=TimelineResponse.model_validate(entry), message="Timeline entry updated")


@router.delete("/{adage_id}/timeline/{entry_id}", response_model=ApiResponse[None])
async def delete_timeline_entry(
    adage_id: int, entry_id: int, _admin: AdminUserDep, db: SessionDep
) -> ApiResponse[None]:
    entry = _child_or_404(db, AdageTimelineEntry, adage_id, entry_id, "Timeline entry not found")
    entry.deleted_at = utcnow()
    db.commit()
    return ApiResponse(message="Timeline entry deleted")


# Related adages


def _related_response(link: RelatedAdage, related: Adage | None) -> RelatedResponse:
    response = RelatedResponse.model_validate(link)
    if related is not None:
        response.related_adage = RelatedAdageSummary.model_validate(related)
    return response


def _link_or_404(db: Session, adage_id: int, link_id: int) -> RelatedAdage:
    link = (
        db.query(RelatedAdage)
        .filter(RelatedAdage.id == link_id, RelatedAdage.adage_id == adage_id)
        .first()
    )
    if link is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Relationship not found")
    return link


def _ensure_unique_link(
    db: Session, adage_id: int, related_id: int, relationship_type: str, exclude_id: int | None = None
) -> None:
    query = db.query(RelatedAdage).filter(
        RelatedAdage.adage_id == adage_id,
        RelatedAdage.related_adage_id == related_id,
        RelatedAdage.relationship_type == relationship_type,
    )
    if exclude_id is not None:
        query = query.filter(RelatedAdage.id != exclude_id)
    if query.first() is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="This relationship already exists"
        )


@router.get("/{adage_id}/related", response_model=ApiResponse[list[RelatedResponse]])
async def list_related(adage_id: int, db: SessionDep) -> ApiResponse[list[RelatedResponse]]:
    """Links from this adage, skipping targets that were deleted or hidden."""
    _adage_or_404(db, adage_id)
    rows = (
        db.query(RelatedAdage, Adage)
        .join(Adage, Adage.id == RelatedAdage.related_adage_id)
        .filter(
            RelatedAdage.adage_id == adage_id,
            Adage.deleted_at.is_(None),
            Adage.hidden_at.is_(None),
        )
        .order_by(RelatedAdage.created_at.desc(), RelatedAdage.id.desc())
        .all()
    )
    return ApiResponse(data=[_related_response(link, related) for link, related in rows])


@router.post(
    "/{adage_id}/related",
    response_model=ApiResponse[RelatedResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_related(
    adage_id: int, payload: RelatedCreate, admin: AdminUserDep, db: SessionDep
) -> ApiResponse[RelatedResponse]:
    _adage_or_404(db, adage_id)
    if payload.related_adage_id == adage_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="An adage cannot be related to itself",
        )
    related = get_live_or_404(db, Adage, payload.related_adage_id, detail="Related adage not found")
    _ensure_unique_link(db, adage_id, related.id, payload.relationship_type)

    link = RelatedAdage(
        adage_id=adage_id,
        related_adage_id=related.id,
        relationship_type=payload.relationship_type,
        notes=payload.notes,
    )
    db.add(link)
    db.flush()
    log_activity(
        db, admin.id, "relate_adage", "adage", adage_id,
        {"related_adage_id": related.id, "relationship_type": link.relationship_type},
    )
    db.commit()
    db.refresh(link)
    return ApiResponse(data=_related_response(link, related), message="Relationship created")


@router.put("/{adage_id}/related/{link_id}", response_model=ApiResponse[RelatedResponse])
async def update_related(
    adage_id: int, link_id: int, payload: RelatedUpdate, _admin: AdminUserDep, db: SessionDep
) -> ApiResponse[RelatedResponse]:
    link = _link_or_404(db, adage_id, link_id)
    _ensure_unique_link(
        db, adage_id, link.related_adage_id, payload.relationship_type, exclude_id=link.id
    )
    link.relationship_type = payload.relationship_type
    if "notes" in payload.model_fields_set:
        link.notes = payload.notes
    db.commit()
    db.refresh(link)
    related = db.get(Adage, link.related_adage_id)
    return ApiResponse(data=_related_response(link, related), message="Relationship updated")


@router.delete("/{adage_id}/related/{link_id}", response_model=ApiResponse[None])
async def delete_related(
    adage_id: int, link_id: int, _admin: AdminUserDep, db: SessionDep
) -> ApiResponse[None]:
    link = _link_or_404(db, adage_id, link_id)
    db.delete(link)
    db.commit()
    return ApiResponse(message="Relationship deleted")
