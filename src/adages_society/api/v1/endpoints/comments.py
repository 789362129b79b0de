# src/adages_society/api/v1/endpoints/comments.py
"""Comment and commendation endpoints."""

from fastapi import APIRouter, Query, status

from adages_society.api.v1.dependencies import (
    CurrentUserDep,
    OptionalUserDep,
    ParticipantUserDep,
    SessionDep,
    VerifiedUserDep,
    enforce_rate_limit,
)
from adages_society.core.settings import settings
from adages_society.models import Comment
from adages_society.repositories.content_repo import get_live_or_404
from adages_society.schemas.comment import (
    CommentCreate,
    CommentReport,
    CommentResponse,
    CommentTarget,
    CommentUpdate,
)
from adages_society.schemas.common import ApiResponse
from adages_society.schemas.moderation import ChallengeResponse
from adages_society.services.comments import CommentService
from adages_society.services.moderation import ModerationService

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("", response_model=ApiResponse[list[CommentResponse]])
async def list_comments(
    db: SessionDep,
    current_user: OptionalUserDep,
    target_type: CommentTarget = Query(...),
    target_id: int = Query(...),
) -> ApiResponse[list[CommentResponse]]:
    """List visible comments on a target; signed-in callers also see their deleted ones."""
    comments = CommentService.list_for_target(
        db, target_type, target_id, current_user.id if current_user else None
    )
    return ApiResponse(data=comments)


@router.post("", response_model=ApiResponse[CommentResponse], status_code=status.HTTP_201_CREATED)
async def create_comment(
    payload: CommentCreate,
    current_user: ParticipantUserDep,
    db: SessionDep,
) -> ApiResponse[CommentResponse]:
    enforce_rate_limit(f"comment:{current_user.id}", settings.comment_rate_limit)
    comment = CommentService.create(db, current_user, payload)
    return ApiResponse(data=CommentResponse.model_validate(comment), message="Comment posted")


@router.post(
    "/report",
    response_model=ApiResponse[ChallengeResponse],
    status_code=status.HTTP_201_CREATED,
)
async def report_comment(
    payload: CommentReport,
    current_user: VerifiedUserDep,
    db: SessionDep,
) -> ApiResponse[ChallengeResponse]:
    """Report a comment for moderator review."""
    challenge = ModerationService.report_comment(db, current_user, payload)
    return ApiResponse(
        data=ModerationService.to_response(db, challenge),
        message="Report submitted",
    )


@router.put("/{comment_id}", response_model=ApiResponse[CommentResponse])
async def update_comment(
    comment_id: int,
    payload: CommentUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ApiResponse[CommentResponse]:
    comment = get_live_or_404(db, Comment, comment_id, detail="Comment not found")
    comment = CommentService.update(db, current_user, comment, payload.content)
    return ApiResponse(data=CommentResponse.model_validate(comment), message="Comment updated")


@router.delete("/{comment_id}", response_model=ApiResponse[None])
async def delete_comment(
    comment_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ApiResponse[None]:
    comment = get_live_or_404(db, Comment, comment_id, detail="Comment not found")
    CommentService.delete(db, current_user, comment)
    return ApiResponse(message="Comment deleted")
