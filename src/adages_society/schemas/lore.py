"""Schemas for adage variants, translations, usage examples, timeline and relations."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

PopularityLevel = Literal["rare", "uncommon", "common", "very_common", "ubiquitous"]
RelationshipType = Literal["similar", "opposing", "commonly_paired", "variant", "derived_from"]
UsageSource = Literal["official", "community"]


class VariantCreate(BaseModel):
    variant_text: str = Field(..., min_length=1)
    notes: str | None = None


class VariantUpdate(BaseModel):
    variant_text: str | None = Field(None, min_length=1)
    notes: str | None = None


class VariantResponse(BaseModel):
    id: int
    adage_id: int
    variant_text: str
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class TranslationCreate(BaseModel):
    language_code: str = Field(..., min_length=2, max_length=16)
    translated_text: str = Field(..., min_length=1)
    translator_notes: str | None = None


class TranslationUpdate(BaseModel):
    language_code: str | None = Field(None, min_length=2, max_length=16)
    translated_text: str | None = Field(None, min_length=1)
    translator_notes: str | None = None


class TranslationResponse(BaseModel):
    id: int
    adage_id: int
    language_code: str
    translated_text: str
    translator_notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class UsageExampleCreate(BaseModel):
    example_text: str = Field(..., min_length=1)
    context: str | None = None
    source_type: UsageSource = "official"


class UsageExampleUpdate(BaseModel):
    example_text: str | None = Field(None, min_length=1)
    context: str | None = None
    source_type: UsageSource | None = None
    hidden: bool | None = None


class UsageExampleResponse(BaseModel):
    id: int
    adage_id: int
    example_text: str
    context: str | None = None
    source_type: str
    created_by: int | None = None
    created_at: datetime | None = None
    hidden_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class TimelineCreate(BaseModel):
    time_period_start: date
    time_period_end: date | None = None
    popularity_level: PopularityLevel
    primary_location: str | None = None
    geographic_changes: str | None = None
    notes: str | None = None
    sources: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_period(self) -> "TimelineCreate":
        if self.time_period_end is not None and self.time_period_end < self.time_period_start:
            raise ValueError("time_period_end cannot be before time_period_start")
        return self


class TimelineUpdate(BaseModel):
    time_period_start: date | None = None
    time_period_end: date | None = None
    popularity_level: PopularityLevel | None = None
    primary_location: str | None = None
    geographic_changes: str | None = None
    notes: str | None = None
    sources: list[str] | None = None


class TimelineResponse(BaseModel):
    id: int
    adage_id: int
    time_period_start: date
    time_period_end: date | None = None
    popularity_level: str
    primary_location: str | None = None
    geographic_changes: str | None = None
    notes: str | None = None
    sources: list[str] = []
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class RelatedCreate(BaseModel):
    related_adage_id: int
    relationship_type: RelationshipType
    notes: str | None = None


class RelatedUpdate(BaseModel):
    relationship_type: RelationshipType
    notes: str | None = None


class RelatedAdageSummary(BaseModel):
    id: int
    adage: str
    definition: str

    model_config = ConfigDict(from_attributes=True)


class RelatedResponse(BaseModel):
    id: int
    adage_id: int
    related_adage_id: int
    relationship_type: str
    notes: str | None = None
    created_at: datetime | None = None
    related_adage: RelatedAdageSummary | None = None

    model_config = ConfigDict(from_attributes=True)
