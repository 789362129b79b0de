# src/adages_society/api/v1/endpoints/collections.py
"""User-curated adage collections."""

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from adages_society.api.v1.dependencies import CurrentUserDep, OptionalUserDep, SessionDep
from adages_society.db.time import utcnow
from adages_society.models import Adage, Collection, CollectionItem, User
from adages_society.repositories.content_repo import get_live_or_404
from adages_society.schemas.adage import AdageResponse
from adages_society.schemas.common import ApiResponse
from adages_society.schemas.social import (
    CollectionCreate,
    CollectionDetail,
    CollectionItemCreate,
    CollectionItemResponse,
    CollectionItemUpdate,
    CollectionResponse,
    CollectionUpdate,
)

router = APIRouter(prefix="/collections", tags=["collections"])


def _adage_counts(db: Session, collection_ids: list[int]) -> dict[int, int]:
    if not collection_ids:
        return {}
    rows = (
        db.query(CollectionItem.collection_id, func.count(CollectionItem.id))
        .filter(
            CollectionItem.collection_id.in_(collection_ids),
            CollectionItem.deleted_at.is_(None),
        )
        .group_by(CollectionItem.collection_id)
        .all()
    )
    return {collection_id: int(count) for collection_id, count in rows}


def _to_response(db: Session, collection: Collection) -> CollectionResponse:
    item = CollectionResponse.model_validate(collection)
    item.adage_count = _adage_counts(db, [collection.id]).get(collection.id, 0)
    return item


def _owned_or_404(db: Session, collection_id: int, user: User) -> Collection:
    collection = get_live_or_404(db, Collection, collection_id, detail="Collection not found")
    if collection.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your collection")
    return collection


def _item_or_404(db: Session, collection: Collection, item_id: int) -> CollectionItem:
    item = (
        db.query(CollectionItem)
        .filter(
            CollectionItem.id == item_id,
            CollectionItem.collection_id == collection.id,
            CollectionItem.deleted_at.is_(None),
        )
        .first()
    )
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return item


@router.get("", response_model=ApiResponse[list[CollectionResponse]])
async def list_collections(
    current_user: CurrentUserDep,
    db: SessionDep,
    user_id: int | None = Query(None),
) -> ApiResponse[list[CollectionResponse]]:
    """The caller's collections, or another member's public ones with `user_id`."""
    query = db.query(Collection).filter(Collection.deleted_at.is_(None))
    if user_id is None or user_id == current_user.id:
        query = query.filter(Collection.user_id == current_user.id)
    else:
        query = query.filter(Collection.user_id == user_id, Collection.is_public.is_(True))
    collections = query.order_by(Collection.created_at.desc()).all()
    counts = _adage_counts(db, [c.id for c in collections])
    results = []
    for collection in collections:
        item = CollectionResponse.model_validate(collection)
        item.adage_count = counts.get(collection.id, 0)
        results.append(item)
    return ApiResponse(data=results)


@router.post(
    "", response_model=ApiResponse[CollectionResponse], status_code=status.HTTP_201_CREATED
)
async def create_collection(
    payload: CollectionCreate, current_user: CurrentUserDep, db: SessionDep
) -> ApiResponse[CollectionResponse]:
    collection = Collection(
        user_id=current_user.id,
        name=payload.name,
        description=payload.description,
        is_public=payload.is_public,
    )
    db.add(collection)
    db.commit()
    db.refresh(collection)
    return ApiResponse(data=_to_response(db, collection), message="Collection created")


@router.get("/{collection_id}", response_model=ApiResponse[CollectionDetail])
async def get_collection(
    collection_id: int, current_user: OptionalUserDep, db: SessionDep
) -> ApiResponse[CollectionDetail]:
    collection = get_live_or_404(db, Collection, collection_id, detail="Collection not found")
    is_owner = current_user is not None and current_user.id == collection.user_id
    if not collection.is_public and not is_owner:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Collection not found")

    rows = (
        db.query(CollectionItem, Adage)
        .join(Adage, Adage.id == CollectionItem.adage_id)
        .filter(
            CollectionItem.collection_id == collection.id,
            CollectionItem.deleted_at.is_(None),
            Adage.deleted_at.is_(None),
        )
        .order_by(CollectionItem.created_at.asc())
        .all()
    )
    detail = CollectionDetail.model_validate(collection)
    detail.items = []
    for item, adage in rows:
        response = CollectionItemResponse.model_validate(item)
        response.adage = AdageResponse.model_validate(adage)
        detail.items.append(response)
    detail.adage_count = len(detail.items)
    return ApiResponse(data=detail)


@router.put("/{collection_id}", response_model=ApiResponse[CollectionResponse])
async def update_collection(
    collection_id: int, payload: CollectionUpdate, current_user: CurrentUserDep, db: SessionDep
) -> ApiResponse[CollectionResponse]:
    collection = _owned_or_404(db, collection_id, current_user)
    for key, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(collection, key, value)
    collection.updated_at = utcnow()
    db.commit()
    db.refresh(collection)
    return ApiResponse(data=_to_response(db, collection), message="Collection updated")


@router.delete("/{collection_id}", response_model=ApiResponse[None])
async def delete_collection(
    collection_id: int, current_user: CurrentUserDep, db: SessionDep
) -> ApiResponse[None]:
    collection = _owned_or_404(db, collection_id, current_user)
    collection.deleted_at = utcnow()
    db.commit()
    return ApiResponse(message="Collection deleted")


@router.post(
    "/{collection_id}/items",
    response_model=ApiResponse[CollectionItemResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_collection_item(
    collection_id: int,
    payload: CollectionItemCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ApiResponse[CollectionItemResponse]:
    """Add an adage; re-adding a removed adage revives its row."""
    collection = _owned_or_404(db, collection_id, current_user)
    get_live_or_404(db, Adage, payload.adage_id, detail="Adage not found")

    item = (
        db.query(CollectionItem)
        .filter(
            CollectionItem.collection_id == collection.id,
            CollectionItem.adage_id == payload.adage_id,
        )
        .first()
    )
    if item is None:
        item = CollectionItem(
            collection_id=collection.id, adage_id=payload.adage_id, notes=payload.notes
        )
        db.add(item)
    else:
        item.deleted_at = None
        if payload.notes is not None:
            item.notes = payload.notes
    db.commit()
    db.refresh(item)
    return ApiResponse(data=CollectionItemResponse.model_validate(item), message="Adage added")


@router.put("/{collection_id}/items/{item_id}", response_model=ApiResponse[CollectionItemResponse])
async def update_collection_item(
    collection_id: int,
    item_id: int,
    payload: CollectionItemUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ApiResponse[CollectionItemResponse]:
    collection = _owned_or_404(db, collection_id, current_user)
    item = _item_or_404(db, collection, item_id)
    item.notes = payload.notes
    db.commit()
    db.refresh(item)
    return ApiResponse(data=CollectionItemResponse.model_validate(item), message="Notes updated")


@router.delete("/{collection_id}/items/{item_id}", response_model=ApiResponse[None])
async def remove_collection_item(
    collection_id: int, item_id: int, current_user: CurrentUserDep, db: SessionDep
) -> ApiResponse[None]:
    collection = _owned_or_404(db, collection_id, current_user)
    item = _item_or_404(db, collection, item_id)
    item.deleted_at = utcnow()
    db.commit()
    return ApiResponse(message="Adage removed from collection")
