"""Comment Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .common import UserSummary

CommentTarget = Literal["adage", "blog", "user"]


class CommentCreate(BaseModel):
    """Schema for posting a comment; content is trimmed before length checks."""

    target_type: CommentTarget
    target_id: int
    content: str
    parent_id: int | None = None
    is_commendation: bool = False


class CommentUpdate(BaseModel):
    content: str


class CommentResponse(BaseModel):
    id: int
    user_id: int
    target_type: str
    target_id: int
    parent_id: int | None = None
    content: str
    is_commendation: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None
    author: UserSummary | None = None
    score: int = 0
    user_vote: int = 0

    model_config = ConfigDict(from_attributes=True)


class CommentReport(BaseModel):
    comment_id: int
    reason: str = Field(..., min_length=3, max_length=2000)
