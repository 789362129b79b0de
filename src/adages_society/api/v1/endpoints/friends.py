# src/adages_society/api/v1/endpoints/friends.py
"""Friend requests, blocks and friendship status."""

from typing import Literal

from fastapi import APIRouter, Query, status

from adages_society.api.v1.dependencies import CurrentUserDep, SessionDep
from adages_society.schemas.common import ApiResponse
from adages_society.schemas.social import (
    FriendAction,
    FriendList,
    FriendRequest,
    FriendshipResponse,
    FriendshipStatus,
)
from adages_society.services.friends import FriendService

router = APIRouter(prefix="/friends", tags=["friends"])


@router.get("", response_model=ApiResponse[FriendList])
async def list_friends(
    current_user: CurrentUserDep,
    db: SessionDep,
    status_filter: Literal["pending", "accepted", "blocked"] | None = Query(None, alias="status"),
) -> ApiResponse[FriendList]:
    return ApiResponse(data=FriendService.list_for(db, current_user.id, status_filter))


@router.post(
    "", response_model=ApiResponse[FriendshipResponse], status_code=status.HTTP_201_CREATED
)
async def send_friend_request(
    payload: FriendRequest, current_user: CurrentUserDep, db: SessionDep
) -> ApiResponse[FriendshipResponse]:
    edge = FriendService.request(db, current_user, payload.friend_id)
    return ApiResponse(data=FriendshipResponse.model_validate(edge), message="Friend request sent")


@router.get("/status/{other_user_id}", response_model=ApiResponse[FriendshipStatus])
async def friendship_status(
    other_user_id: int, current_user: CurrentUserDep, db: SessionDep
) -> ApiResponse[FriendshipStatus]:
    return ApiResponse(data=FriendService.status_between(db, current_user.id, other_user_id))


@router.patch("/{other_user_id}", response_model=ApiResponse[FriendshipResponse | None])
async def respond_to_friend(
    other_user_id: int, payload: FriendAction, current_user: CurrentUserDep, db: SessionDep
) -> ApiResponse[FriendshipResponse | None]:
    """Accept, reject, block or unblock another member."""
    edge = FriendService.act(db, current_user, other_user_id, payload.action)
    data = FriendshipResponse.model_validate(edge) if edge is not None else None
    return ApiResponse(data=data, message=f"Friend {payload.action} applied")


@router.delete("/{other_user_id}", response_model=ApiResponse[None])
async def remove_friend(
    other_user_id: int, current_user: CurrentUserDep, db: SessionDep
) -> ApiResponse[None]:
    FriendService.remove(db, current_user.id, other_user_id)
    return ApiResponse(message="Friendship removed")
