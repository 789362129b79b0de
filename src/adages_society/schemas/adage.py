"""Adage-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _clean_tags(value: list[str] | None) -> list[str] | None:
    if value is None:
        return None
    seen: list[str] = []
    for tag in value:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class AdageBase(BaseModel):
    origin: str | None = None
    etymology: str | None = None
    historical_context: str | None = None
    interpretation: str | None = None
    modern_practicality: str | None = None
    first_known_usage: str | None = None
    geographic_spread: str | None = None


class AdageCreate(AdageBase):
    """Schema for adding an adage to the archive."""

    adage: str = Field(..., min_length=1, max_length=1000)
    definition: str = Field(..., min_length=1)
    tags: list[str] = Field(default_factory=list)
    published_at: datetime | None = None

    @field_validator("adage", "definition")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: list[str]) -> list[str]:
        return _clean_tags(value) or []


class AdageUpdate(AdageBase):
    """Partial update; only provided fields change."""

    adage: str | None = Field(None, min_length=1, max_length=1000)
    definition: str | None = Field(None, min_length=1)
    tags: list[str] | None = None
    published_at: datetime | None = None
    hidden: bool | None = Field(None, description="Hide or unhide the adage")

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: list[str] | None) -> list[str] | None:
        return _clean_tags(value)


class AdageResponse(AdageBase):
    """Schema for adage information returned by the API."""

    id: int
    adage: str
    definition: str
    tags: list[str] = Field(default_factory=list)
    featured: bool
    featured_until: datetime | None = None
    published_at: datetime | None = None
    views_count: int
    created_by: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    hidden_at: datetime | None = None
    score: int = 0

    model_config = ConfigDict(from_attributes=True)


class CitationSummary(BaseModel):
    id: int
    source_text: str
    source_url: str | None = None
    source_type: str

    model_config = ConfigDict(from_attributes=True)


class AdageDetail(AdageResponse):
    """Adage with per-viewer and related data."""

    user_vote: int = 0
    save_count: int = 0
    comment_count: int = 0
    saved: bool = False
    citations: list[CitationSummary] = Field(default_factory=list)


class AdageVersionResponse(BaseModel):
    id: int
    adage_id: int
    version_number: int
    adage: str
    definition: str
    origin: str | None = None
    etymology: str | None = None
    historical_context: str | None = None
    interpretation: str | None = None
    modern_practicality: str | None = None
    tags: list[str] = Field(default_factory=list)
    changed_by: int | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class SetFeaturedRequest(BaseModel):
    """Admin request to feature an adage manually."""

    featured_until: datetime | None = Field(
        None, description="End of the feature window; defaults to one week from now"
    )
    reason: str | None = Field(None, max_length=500)


class FeaturedWindow(BaseModel):
    featured_from: datetime
    featured_until: datetime
    reason: str | None = None

    model_config = ConfigDict(from_attributes=True)


class FeaturedAdageResponse(AdageResponse):
    featured_reason: str | None = None
    featured_dates: list[FeaturedWindow] = Field(default_factory=list)
    save_count: int = 0


class FeaturedHistoryEntry(BaseModel):
    id: int
    adage_id: int
    adage: str
    featured_from: datetime
    featured_until: datetime
    reason: str | None = None


class RotationResult(BaseModel):
    """Outcome of one run of the weekly rotation job."""

    adage_id: int
    adage: str
    featured_until: datetime
    cycle_restarted: bool
    unfeatured_count: int
