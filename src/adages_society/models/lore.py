"""Scholarly detail attached to an adage: variants, translations, usage and history."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import JSON, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from adages_society.db.session import Base
from adages_society.db.time import utcnow

RELATIONSHIP_TYPES = ("similar", "opposing", "commonly_paired", "variant", "derived_from")
POPULARITY_LEVELS = ("ubiquitous", "very_common", "common", "uncommon", "rare")
USAGE_SOURCE_TYPES = ("official", "community")


class AdageVariant(Base):
    """Alternate wording of an adage."""

    __tablename__ = "adage_variants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    adage_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("adages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    variant_text: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class AdageTranslation(Base):
    """The adage rendered in another language."""

    __tablename__ = "adage_translations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    adage_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("adages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    language_code: Mapped[str] = mapped_column(String(16), nullable=False)
    translated_text: Mapped[str] = mapped_column(Text, nullable=False)
    translator_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class AdageUsageExample(Base):
    """A sentence showing the adage in use."""

    __tablename__ = "adage_usage_examples"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    adage_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("adages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    example_text: Mapped[str] = mapped_column(Text, nullable=False)
    context: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_type: Mapped[str] = mapped_column(String(16), nullable=False, default="official")
    created_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    hidden_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class AdageTimelineEntry(Base):
    """How widespread the adage was over one period and where."""

    __tablename__ = "adage_timeline"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    adage_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("adages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    time_period_start: Mapped[date] = mapped_column(Date, nullable=False)
    time_period_end: Mapped[date | None] = mapped_column(Date, nullable=True)
    popularity_level: Mapped[str] = mapped_column(String(16), nullable=False)
    primary_location: Mapped[str | None] = mapped_column(Text, nullable=True)
    geographic_changes: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    sources: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class RelatedAdage(Base):
    """Directed link between two adages; removed outright when unlinked."""

    __tablename__ = "related_adages"
    __table_args__ = (
        UniqueConstraint(
            "adage_id", "related_adage_id", "relationship_type", name="uq_related_adages_link"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    adage_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("adages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    related_adage_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("adages.id", ondelete="CASCADE"), nullable=False
    )
    relationship_type: Mapped[str] = mapped_column(String(32), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
