"""Forum Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .common import UserSummary


class SectionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    slug: str | None = None
    description: str | None = None
    order_index: int = 0
    locked: bool = False


class SectionResponse(BaseModel):
    id: int
    title: str
    slug: str
    description: str | None = None
    order_index: int
    locked: bool
    thread_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class ThreadCreate(BaseModel):
    section_id: int
    title: str = Field(..., min_length=3, max_length=200)
    content: str = Field(..., min_length=1, max_length=20000)


class ThreadModeration(BaseModel):
    """Moderator toggles; omitted flags keep their current value."""

    pinned: bool | None = None
    locked: bool | None = None
    frozen: bool | None = None
    hidden: bool | None = None


class ThreadResponse(BaseModel):
    id: int
    section_id: int
    author_id: int
    title: str
    slug: str
    content: str
    pinned: bool
    locked: bool
    frozen: bool
    views_count: int
    replies_count: int
    last_reply_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    author: UserSummary | None = None
    score: int = 0

    model_config = ConfigDict(from_attributes=True)


class ReplyCreate(BaseModel):
    thread_id: int
    content: str = Field(..., min_length=1, max_length=10000)


class ReplyUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=10000)


class ReplyResponse(BaseModel):
    id: int
    thread_id: int
    author_id: int
    content: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    author: UserSummary | None = None
    score: int = 0

    model_config = ConfigDict(from_attributes=True)


class SectionDetail(SectionResponse):
    threads: list[ThreadResponse] = Field(default_factory=list)


class ThreadDetail(ThreadResponse):
    section: SectionResponse | None = None
    replies: list[ReplyResponse] = Field(default_factory=list)


class ForumReplyReport(BaseModel):
    reply_id: int
    reason: str = Field(..., min_length=3, max_length=2000)
