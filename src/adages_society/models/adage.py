"""Archive entries, their edit history and feature windows."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from adages_society.db.session import Base
from adages_society.db.time import utcnow


class Adage(Base):
    """An adage in the archive together with its scholarly commentary."""

    __tablename__ = "adages"
    __table_args__ = (Index("ix_adages_featured", "featured", "featured_until"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    adage: Mapped[str] = mapped_column(Text, nullable=False)
    definition: Mapped[str] = mapped_column(Text, nullable=False)
    origin: Mapped[str | None] = mapped_column(Text, nullable=True)
    etymology: Mapped[str | None] = mapped_column(Text, nullable=True)
    historical_context: Mapped[str | None] = mapped_column(Text, nullable=True)
    interpretation: Mapped[str | None] = mapped_column(Text, nullable=True)
    modern_practicality: Mapped[str | None] = mapped_column(Text, nullable=True)
    first_known_usage: Mapped[str | None] = mapped_column(Text, nullable=True)
    geographic_spread: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # At most one adage is featured with a live window; enforced by the services.
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    featured_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    views_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    updated_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    hidden_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class AdageVersion(Base):
    """Snapshot of an adage taken just before it was edited."""

    __tablename__ = "adage_versions"
    __table_args__ = (
        UniqueConstraint("adage_id", "version_number", name="uq_adage_versions_number"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    adage_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("adages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    version_number: Mapped[int] = mapped_column(Integer, nullable=False)
    adage: Mapped[str] = mapped_column(Text, nullable=False)
    definition: Mapped[str] = mapped_column(Text, nullable=False)
    origin: Mapped[str | None] = mapped_column(Text, nullable=True)
    etymology: Mapped[str | None] = mapped_column(Text, nullable=True)
    historical_context: Mapped[str | None] = mapped_column(Text, nullable=True)
    interpretation: Mapped[str | None] = mapped_column(Text, nullable=True)
    modern_practicality: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    changed_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class FeaturedAdageHistory(Base):
    """Append-only log of feature windows; soft-deleted when the cycle restarts."""

    __tablename__ = "featured_adages_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    adage_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("adages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    featured_from: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    featured_until: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
