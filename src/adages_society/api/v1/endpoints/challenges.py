# src/adages_society/api/v1/endpoints/challenges.py
"""Reader challenge and appeal endpoints."""

from fastapi import APIRouter, Query, status

from adages_society.api.v1.dependencies import AdminUserDep, SessionDep, VerifiedUserDep
from adages_society.models import ReaderChallenge
from adages_society.repositories.content_repo import get_live_or_404
from adages_society.schemas.common import ApiResponse
from adages_society.schemas.moderation import (
    AppealCreate,
    AppealResponse,
    ChallengeCreate,
    ChallengeResponse,
    ChallengeStatus,
    ChallengeTarget,
    ChallengeUpdate,
)
from adages_society.services.moderation import ModerationService

router = APIRouter(prefix="/challenges", tags=["moderation"])
appeals_router = APIRouter(prefix="/appeals", tags=["moderation"])


@router.get("", response_model=ApiResponse[list[ChallengeResponse]])
async def list_challenges(
    db: SessionDep,
    _admin: AdminUserDep,
    status_filter: ChallengeStatus | None = Query(None, alias="status"),
    target_type: ChallengeTarget | None = Query(None),
) -> ApiResponse[list[ChallengeResponse]]:
    """List open challenges for admin review."""
    query = db.query(ReaderChallenge).filter(ReaderChallenge.deleted_at.is_(None))
    if status_filter:
        query = query.filter(ReaderChallenge.status == status_filter)
    if target_type:
        query = query.filter(ReaderChallenge.target_type == target_type)
    challenges = query.order_by(ReaderChallenge.created_at.desc()).all()
    return ApiResponse(data=[ModerationService.to_response(db, c) for c in challenges])


@router.post(
    "", response_model=ApiResponse[ChallengeResponse], status_code=status.HTTP_201_CREATED
)
async def create_challenge(
    payload: ChallengeCreate,
    current_user: VerifiedUserDep,
    db: SessionDep,
) -> ApiResponse[ChallengeResponse]:
    challenge = ModerationService.create_challenge(db, current_user, payload)
    return ApiResponse(
        data=ModerationService.to_response(db, challenge),
        message="Challenge submitted",
    )


@router.patch("/{challenge_id}", response_model=ApiResponse[ChallengeResponse])
async def update_challenge(
    challenge_id: int,
    payload: ChallengeUpdate,
    admin: AdminUserDep,
    db: SessionDep,
) -> ApiResponse[ChallengeResponse]:
    """Review a challenge; accepting or rejecting it closes the case."""
    challenge = get_live_or_404(db, ReaderChallenge, challenge_id, detail="Challenge not found")
    challenge = ModerationService.decide_challenge(db, challenge, payload, admin)
    return ApiResponse(
        data=ModerationService.to_response(db, challenge),
        message=f"Challenge {challenge.status}",
    )


@router.delete("/{challenge_id}", response_model=ApiResponse[None])
async def delete_challenge(
    challenge_id: int,
    admin: AdminUserDep,
    db: SessionDep,
) -> ApiResponse[None]:
    challenge = get_live_or_404(db, ReaderChallenge, challenge_id, detail="Challenge not found")
    ModerationService.delete_challenge(db, challenge, admin)
    return ApiResponse(message="Challenge deleted")


@appeals_router.post(
    "", response_model=ApiResponse[AppealResponse], status_code=status.HTTP_201_CREATED
)
async def submit_appeal(
    payload: AppealCreate,
    current_user: VerifiedUserDep,
    db: SessionDep,
) -> ApiResponse[AppealResponse]:
    """Appeal the removal of your comment; each decision can be appealed once."""
    result = ModerationService.submit_appeal(db, current_user, payload)
    return ApiResponse(data=result, message="Appeal submitted")
