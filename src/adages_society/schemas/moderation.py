"""Challenge, appeal and deleted-item Pydantic schemas."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ChallengeTarget = Literal["adage", "blog", "comment", "forum_thread", "forum_reply"]
ChallengeStatus = Literal["pending", "reviewed", "accepted", "rejected"]
DeletedItemType = Literal["comment", "adage", "blog", "forum_thread", "forum_reply", "challenge"]


class ChallengeCreate(BaseModel):
    target_type: ChallengeTarget
    target_id: int
    challenge_reason: str = Field(..., min_length=3, max_length=5000)


class ChallengeUpdate(BaseModel):
    status: ChallengeStatus
    admin_notes: str | None = None


class ChallengeResponse(BaseModel):
    id: int
    target_type: str
    target_id: int
    challenger_id: int
    challenge_reason: str
    status: str
    reviewed_by: int | None = None
    reviewed_at: datetime | None = None
    admin_notes: str | None = None
    reporter_role: str | None = None
    reported_user_id: int | None = None
    reported_user_role: str | None = None
    appeal_count: int
    appeal_allowed: bool
    appeal_decision: str | None = None
    created_at: datetime | None = None
    deleted_at: datetime | None = None
    target_title: str | None = None

    model_config = ConfigDict(from_attributes=True)


class AppealCreate(BaseModel):
    notification_id: int
    message: str = Field(..., min_length=10, max_length=5000)


class AppealDecision(BaseModel):
    decision: Literal["accepted", "rejected"]
    response_message: str | None = Field(None, max_length=5000)


class AppealResponse(BaseModel):
    contact_message_id: int
    challenge_id: int
    appeal_decision: str | None = None


class DeletedItem(BaseModel):
    """Row in the admin review queue of soft-deleted content."""

    type: DeletedItemType
    id: int
    title: str
    deleted_at: datetime
    status: str | None = None
    appeal_decision: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
