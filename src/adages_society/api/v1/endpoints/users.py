# src/adages_society/api/v1/endpoints/users.py
"""Member profile, preference and saved-adage endpoints."""

from fastapi import APIRouter, HTTPException, Query, status

from adages_society.api.v1.dependencies import (
    CurrentUserDep,
    OptionalUserDep,
    SessionDep,
    VerifiedUserDep,
)
from adages_society.db.time import utcnow
from adages_society.models import Adage, SavedAdage
from adages_society.repositories.content_repo import get_live_or_404
from adages_society.schemas.adage import AdageResponse
from adages_society.schemas.common import ApiResponse, UserSummary
from adages_society.schemas.social import SavedAdageCreate, SavedAdageResponse
from adages_society.schemas.user import (
    EmailPreferences,
    EmailPreferencesUpdate,
    ProfileUpdate,
    UserProfile,
    UserProfileWithStats,
    UserPublic,
)
from adages_society.services import user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=ApiResponse[UserProfileWithStats])
async def read_current_user(
    current_user: CurrentUserDep, db: SessionDep
) -> ApiResponse[UserProfileWithStats]:
    """Return the authenticated member's profile with activity counts."""
    return ApiResponse(data=user_service.profile_with_stats(db, current_user))


@router.patch("/me", response_model=ApiResponse[UserProfile])
async def update_current_user(
    payload: ProfileUpdate, current_user: CurrentUserDep, db: SessionDep
) -> ApiResponse[UserProfile]:
    user = user_service.update_profile(db, current_user, payload)
    return ApiResponse(data=UserProfile.model_validate(user), message="Profile updated")


@router.delete("/me", response_model=ApiResponse[None])
async def delete_current_user(current_user: CurrentUserDep, db: SessionDep) -> ApiResponse[None]:
    """Delete and anonymize the account; it can be restored by an admin."""
    user_service.delete_account(db, current_user)
    return ApiResponse(message="Account deleted")


@router.get("/me/email-preferences", response_model=ApiResponse[EmailPreferences])
async def get_email_preferences(current_user: CurrentUserDep) -> ApiResponse[EmailPreferences]:
    return ApiResponse(data=EmailPreferences.model_validate(current_user))


@router.patch("/me/email-preferences", response_model=ApiResponse[EmailPreferences])
async def update_email_preferences(
    payload: EmailPreferencesUpdate, current_user: CurrentUserDep, db: SessionDep
) -> ApiResponse[EmailPreferences]:
    changes = payload.model_dump(exclude_none=True)
    if not changes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Provide at least one preference to update",
        )
    for key, value in changes.items():
        setattr(current_user, key, value)
    db.commit()
    db.refresh(current_user)
    return ApiResponse(
        data=EmailPreferences.model_validate(current_user), message="Preferences updated"
    )


@router.get("/me/saved-adages", response_model=ApiResponse[list[SavedAdageResponse]])
async def list_saved_adages(
    current_user: CurrentUserDep, db: SessionDep
) -> ApiResponse[list[SavedAdageResponse]]:
    rows = (
        db.query(SavedAdage, Adage)
        .join(Adage, Adage.id == SavedAdage.adage_id)
        .filter(
            SavedAdage.user_id == current_user.id,
            SavedAdage.deleted_at.is_(None),
            Adage.deleted_at.is_(None),
        )
        .order_by(SavedAdage.created_at.desc())
        .all()
    )
    results = []
    for saved, adage in rows:
        item = SavedAdageResponse.model_validate(saved)
        item.adage = AdageResponse.model_validate(adage)
        results.append(item)
    return ApiResponse(data=results)


@router.post(
    "/me/saved-adages",
    response_model=ApiResponse[SavedAdageResponse],
    status_code=status.HTTP_201_CREATED,
)
async def save_adage(
    payload: SavedAdageCreate, current_user: VerifiedUserDep, db: SessionDep
) -> ApiResponse[SavedAdageResponse]:
    """Save an adage; saving a previously removed adage revives the row."""
    get_live_or_404(db, Adage, payload.adage_id, detail="Adage not found")
    saved = (
        db.query(SavedAdage)
        .filter(SavedAdage.user_id == current_user.id, SavedAdage.adage_id == payload.adage_id)
        .first()
    )
    if saved is None:
        saved = SavedAdage(user_id=current_user.id, adage_id=payload.adage_id)
        db.add(saved)
    else:
        saved.deleted_at = None
    db.commit()
    db.refresh(saved)
    return ApiResponse(data=SavedAdageResponse.model_validate(saved), message="Adage saved")


@router.delete("/me/saved-adages/{adage_id}", response_model=ApiResponse[None])
async def unsave_adage(adage_id: int, current_user: CurrentUserDep, db: SessionDep) -> ApiResponse[None]:
    saved = (
        db.query(SavedAdage)
        .filter(
            SavedAdage.user_id == current_user.id,
            SavedAdage.adage_id == adage_id,
            SavedAdage.deleted_at.is_(None),
        )
        .first()
    )
    if saved is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Saved adage not found")
    saved.deleted_at = utcnow()
    db.commit()
    return ApiResponse(message="Adage removed from saved")


@router.get("/search", response_model=ApiResponse[list[UserSummary]])
async def search_users(
    db: SessionDep, q: str = Query(..., min_length=1)
) -> ApiResponse[list[UserSummary]]:
    users = user_service.search_users(db, q)
    return ApiResponse(data=[UserSummary.model_validate(user) for user in users])


@router.get("/{user_id}", response_model=ApiResponse[UserPublic])
async def read_user(
    user_id: int, current_user: OptionalUserDep, db: SessionDep
) -> ApiResponse[UserPublic]:
    """Public profile; private profiles show only basics to strangers."""
    user = user_service.get_active_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return ApiResponse(data=user_service.public_profile(db, user, current_user))
