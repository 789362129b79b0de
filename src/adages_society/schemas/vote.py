"""Vote-related Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, Field

VoteTarget = Literal["adage", "blog", "comment", "forum_thread", "forum_reply"]


class VoteCreate(BaseModel):
    """Schema for casting, flipping or clearing a vote."""

    target_type: VoteTarget
    target_id: int
    value: Literal[-1, 0, 1] = Field(
        ..., description="1 for upvote, -1 for downvote, 0 to clear"
    )


class VoteSummary(BaseModel):
    """Tally for a single target as seen by the caller."""

    score: int
    vote_count: int
    user_vote: int = 0
