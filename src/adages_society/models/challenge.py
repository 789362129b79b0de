"""Reader challenges (reports) and their review state."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from adages_society.db.session import Base
from adages_society.db.time import utcnow

CHALLENGE_STATUS_PENDING = "pending"
CHALLENGE_STATUS_REVIEWED = "reviewed"
CHALLENGE_STATUS_ACCEPTED = "accepted"
CHALLENGE_STATUS_REJECTED = "rejected"
CHALLENGE_STATUSES = (
    CHALLENGE_STATUS_PENDING,
    CHALLENGE_STATUS_REVIEWED,
    CHALLENGE_STATUS_ACCEPTED,
    CHALLENGE_STATUS_REJECTED,
)
# Reaching one of these closes the challenge and moves it to the deleted-items queue.
CHALLENGE_DECIDED_STATUSES = (CHALLENGE_STATUS_ACCEPTED, CHALLENGE_STATUS_REJECTED)

CHALLENGE_TARGET_TYPES = ("adage", "blog", "comment", "forum_thread", "forum_reply")

APPEAL_ACCEPTED = "accepted"
APPEAL_REJECTED = "rejected"


class ReaderChallenge(Base):
    """A reader's report disputing or flagging a piece of content."""

    __tablename__ = "reader_challenges"
    __table_args__ = (Index("ix_reader_challenges_target", "target_type", "target_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    target_type: Mapped[str] = mapped_column(String(32), nullable=False)
    target_id: Mapped[int] = mapped_column(Integer, nullable=False)
    challenger_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    challenge_reason: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=CHALLENGE_STATUS_PENDING
    )
    reviewed_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Role snapshots taken when a comment is reported.
    reporter_role: Mapped[str | None] = mapped_column(String(16), nullable=True)
    reported_user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    reported_user_role: Mapped[str | None] = mapped_column(String(16), nullable=True)

    appeal_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    appeal_allowed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    appeal_decision: Mapped[str | None] = mapped_column(String(16), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
