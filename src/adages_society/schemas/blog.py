"""Blog post Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BlogPostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    content: str = Field(..., min_length=1)
    excerpt: str | None = Field(None, max_length=1000)
    slug: str | None = Field(None, description="Derived from the title when omitted")
    published: bool = False
    tags: list[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title is required")
        return value


class BlogPostUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=300)
    content: str | None = Field(None, min_length=1)
    excerpt: str | None = None
    published: bool | None = None
    tags: list[str] | None = None
    hidden: bool | None = None


class BlogPostResponse(BaseModel):
    id: int
    title: str
    slug: str
    content: str
    excerpt: str | None = None
    author_id: int | None = None
    published: bool
    published_at: datetime | None = None
    tags: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    hidden_at: datetime | None = None
    score: int = 0
    comment_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class BlogPostVersionResponse(BaseModel):
    id: int
    post_id: int
    version_number: int
    title: str
    content: str
    excerpt: str | None = None
    tags: list[str] = Field(default_factory=list)
    changed_by: int | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
