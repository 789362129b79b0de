# src/adages_society/api/v1/endpoints/votes.py
"""Vote endpoints for adages, blog posts, comments and forum content."""

from fastapi import APIRouter, Query

from adages_society.api.v1.dependencies import (
    OptionalUserDep,
    ParticipantUserDep,
    SessionDep,
    enforce_rate_limit,
)
from adages_society.core.settings import settings
from adages_society.schemas.common import ApiResponse
from adages_society.schemas.vote import VoteCreate, VoteSummary, VoteTarget
from adages_society.services.votes import VoteService

router = APIRouter(prefix="/votes", tags=["votes"])


@router.post("", response_model=ApiResponse[VoteSummary])
async def cast_vote(
    vote_data: VoteCreate,
    current_user: ParticipantUserDep,
    db: SessionDep,
) -> ApiResponse[VoteSummary]:
    """Cast, flip or clear a vote.

    Sending the same value twice removes the vote; `value=0` always clears it.
    """
    enforce_rate_limit(f"vote:{current_user.id}", settings.vote_rate_limit)
    summary = VoteService.cast_vote(
        db,
        user_id=current_user.id,
        target_type=vote_data.target_type,
        target_id=vote_data.target_id,
        value=vote_data.value,
    )
    return ApiResponse(data=summary)


@router.get("", response_model=ApiResponse[VoteSummary])
async def get_votes(
    db: SessionDep,
    current_user: OptionalUserDep,
    target_type: VoteTarget = Query(...),
    target_id: int = Query(...),
) -> ApiResponse[VoteSummary]:
    """Return the score for a target and the caller's vote, if signed in."""
    summary = VoteService.summary(
        db,
        target_type,
        target_id,
        user_id=current_user.id if current_user else None,
    )
    return ApiResponse(data=summary)
