"""Vote tallying with toggle semantics.

Scores are never cached: they are summed from the vote rows on every read.
"""
from __future__ import annotations

from collections.abc import Iterable

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from adages_society.models import Vote
from adages_society.repositories.content_repo import get_target
from adages_society.schemas.vote import VoteSummary

__all__ = ["VoteService"]


class VoteService:
    """Service handling vote creation, flipping, removal and scoring."""

    @staticmethod
    def cast_vote(
        db: Session,
        *,
        user_id: int,
        target_type: str,
        target_id: int,
        value: int,
    ) -> VoteSummary:
        """Apply a vote and return the refreshed tally.

        An identical existing vote is removed (toggle-off), an opposite one is
        overwritten, and `value == 0` clears whatever vote exists.

        Raises:
            HTTPException: If the target does not exist
        """
        if get_target(db, target_type, target_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Target not found")

        existing = VoteService.get_user_vote(db, user_id, target_type, target_id)
        if existing is not None:
            if value == 0 or existing.value == value:
                db.delete(existing)
            else:
                existing.value = value
        elif value != 0:
            db.add(
                Vote(
                    user_id=user_id,
                    target_type=target_type,
                    target_id=target_id,
                    value=value,
                )
            )

        db.commit()
        return VoteService.summary(db, target_type, target_id, user_id=user_id)

    @staticmethod
    def get_user_vote(db: Session, user_id: int, target_type: str, target_id: int) -> Vote | None:
        return (
            db.query(Vote)
            .filter(
                Vote.user_id == user_id,
                Vote.target_type == target_type,
                Vote.target_id == target_id,
            )
            .first()
        )

    @staticmethod
    def summary(
        db: Session,
        target_type: str,
        target_id: int,
        *,
        user_id: int | None = None,
    ) -> VoteSummary:
        """Return `{score, vote_count, user_vote}` for one target."""
        score, count = (
            db.query(func.coalesce(func.sum(Vote.value), 0), func.count(Vote.id))
            .filter(Vote.target_type == target_type, Vote.target_id == target_id)
            .one()
        )
        user_vote = 0
        if user_id is not None:
            vote = VoteService.get_user_vote(db, user_id, target_type, target_id)
            user_vote = vote.value if vote else 0
        return VoteSummary(score=int(score), vote_count=int(count), user_vote=user_vote)

    @staticmethod
    def scores(db: Session, target_type: str, target_ids: Iterable[int]) -> dict[int, int]:
        """Return the score of each id; ids without votes score 0."""
        ids = list(target_ids)
        if not ids:
            return {}
        rows = (
            db.query(Vote.target_id, func.sum(Vote.value))
            .filter(Vote.target_type == target_type, Vote.target_id.in_(ids))
            .group_by(Vote.target_id)
            .all()
        )
        totals = {target_id: int(total or 0) for target_id, total in rows}
        return {target_id: totals.get(target_id, 0) for target_id in ids}

    @staticmethod
    def user_votes(
        db: Session,
        user_id: int | None,
        target_type: str,
        target_ids: Iterable[int],
    ) -> dict[int, int]:
        """Return the caller's vote value per target id (only ids they voted on)."""
        ids = list(target_ids)
        if user_id is None or not ids:
            return {}
        rows = (
            db.query(Vote.target_id, Vote.value)
            .filter(
                Vote.user_id == user_id,
                Vote.target_type == target_type,
                Vote.target_id.in_(ids),
            )
            .all()
        )
        return {target_id: value for target_id, value in rows}
