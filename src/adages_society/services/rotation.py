"""Featured adage selection and the weekly rotation job.

The rotation runs as a single transaction: unfeaturing expired adages,
restarting the cycle, featuring the next adage and writing its history row
either all commit together or all roll back. Admin notifications are sent
only after the commit, and their failures never affect the rotation result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from fastapi import HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from adages_society.core.settings import settings
from adages_society.db.time import as_utc, utcnow
from adages_society.models import Adage, FeaturedAdageHistory
from adages_society.schemas.adage import (
    FeaturedAdageResponse,
    FeaturedHistoryEntry,
    FeaturedWindow,
)
from adages_society.services.adages import save_counts_for
from adages_society.services.notifications import email_admins, notify_admins
from adages_society.services.votes import VoteService

logger = logging.getLogger(__name__)

ROTATION_REASON = "Automatic weekly rotation"
ROTATION_RESTART_REASON = "Automatic weekly rotation (cycle restarted)"


@dataclass
class RotationOutcome:
    """Result of one rotation run."""

    adage: Adage
    featured_until: datetime
    cycle_restarted: bool
    unfeatured_count: int


def _feature_window(now: datetime) -> datetime:
    return now + timedelta(days=settings.featured_duration_days)


def _unfeature_expired(db: Session, now: datetime) -> int:
    return (
        db.query(Adage)
        .filter(
            Adage.featured.is_(True),
            Adage.featured_until.is_not(None),
            Adage.featured_until <= now,
        )
        .update({Adage.featured: False}, synchronize_session="fetch")
    )


def _eligible_query(db: Session, exclude_history: bool):
    query = db.query(Adage).filter(
        Adage.deleted_at.is_(None),
        Adage.hidden_at.is_(None),
        Adage.featured.is_(False),
    )
    if exclude_history:
        featured_ids = select(FeaturedAdageHistory.adage_id).where(
            FeaturedAdageHistory.deleted_at.is_(None)
        )
        query = query.filter(Adage.id.not_in(featured_ids))
    return query.order_by(Adage.created_at.asc(), Adage.id.asc())


def _restart_cycle(db: Session, now: datetime) -> int:
    return (
        db.query(FeaturedAdageHistory)
        .filter(FeaturedAdageHistory.deleted_at.is_(None))
        .update({FeaturedAdageHistory.deleted_at: now}, synchronize_session="fetch")
    )


def rotate_featured(db: Session, now: datetime | None = None) -> RotationOutcome:
    """Feature the next never-featured adage for one week.

    Raises:
        HTTPException: 404 when no adage can be featured at all
        SQLAlchemyError: On database failure, after rolling back every step
    """
    now = now or utcnow()
    try:
        unfeatured = _unfeature_expired(db, now)
        cycle_restarted = False

        candidate = _eligible_query(db, exclude_history=True).first()
        if candidate is None:
            restarted = _restart_cycle(db, now)
            cycle_restarted = True
            logger.info("Featured rotation cycle restarted (%d history rows retired)", restarted)
            candidate = _eligible_query(db, exclude_history=False).first()

        if candidate is None:
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No adages available to feature",
            )

        # Keep a single live feature even if the job runs before the window ends.
        unfeatured += (
            db.query(Adage)
            .filter(Adage.featured.is_(True), Adage.id != candidate.id)
            .update({Adage.featured: False}, synchronize_session="fetch")
        )
        featured_until = _feature_window(now)
        candidate.featured = True
        candidate.featured_until = featured_until
        db.add(
            FeaturedAdageHistory(
                adage_id=candidate.id,
                featured_from=now,
                featured_until=featured_until,
                reason=ROTATION_RESTART_REASON if cycle_restarted else ROTATION_REASON,
            )
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Featured rotation failed; all changes rolled back")
        raise

    db.refresh(candidate)
    logger.info(
        "Featured adage %s until %s (unfeatured=%d, restarted=%s)",
        candidate.id,
        featured_until.isoformat(),
        unfeatured,
        cycle_restarted,
    )
    return RotationOutcome(
        adage=candidate,
        featured_until=featured_until,
        cycle_restarted=cycle_restarted,
        unfeatured_count=unfeatured,
    )


def announce_rotation(db: Session, outcome: RotationOutcome) -> None:
    """Tell admins about the new featured adage; failures are only logged."""
    title = "Weekly Featured Adage Ready"
    message = (
        f'"{outcome.adage.adage}" is now the featured adage until '
        f"{outcome.featured_until:%Y-%m-%d}."
    )
    if outcome.cycle_restarted:
        message += "\nEvery adage has been featured once, so the rotation cycle restarted."
    try:
        notify_admins(
            db,
            title,
            message,
            related_id=outcome.adage.id,
            related_type="adage",
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to store rotation notifications for admins")
    email_admins(db, title, message)


def set_featured(
    db: Session,
    adage: Adage,
    *,
    user_id: int | None,
    featured_until: datetime | None = None,
    reason: str | None = None,
    now: datetime | None = None,
) -> Adage:
    """Feature `adage` immediately, unfeaturing every other adage."""
    now = now or utcnow()
    until = as_utc(featured_until) or _feature_window(now)
    if until <= now:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="featured_until must be in the future",
        )

    db.query(Adage).filter(Adage.id != adage.id, Adage.featured.is_(True)).update(
        {Adage.featured: False}, synchronize_session="fetch"
    )
    adage.featured = True
    adage.featured_until = until
    db.add(
        FeaturedAdageHistory(
            adage_id=adage.id,
            featured_from=now,
            featured_until=until,
            reason=reason or "Manually featured",
            created_by=user_id,
        )
    )
    db.commit()
    db.refresh(adage)
    return adage


def featured_adages(db: Session, now: datetime | None = None) -> list[FeaturedAdageResponse]:
    """Return the currently featured adages with their feature history."""
    now = now or utcnow()
    adages = (
        db.query(Adage)
        .filter(
            Adage.featured.is_(True),
            Adage.deleted_at.is_(None),
            Adage.hidden_at.is_(None),
            or_(Adage.featured_until.is_(None), Adage.featured_until > now),
        )
        .order_by(Adage.featured_until.desc(), Adage.id.desc())
        .limit(settings.featured_display_limit)
        .all()
    )
    ids = [adage.id for adage in adages]
    scores = VoteService.scores(db, "adage", ids)
    save_counts = save_counts_for(db, ids)

    results: list[FeaturedAdageResponse] = []
    for adage in adages:
        windows = (
            db.query(FeaturedAdageHistory)
            .filter(FeaturedAdageHistory.adage_id == adage.id)
            .order_by(FeaturedAdageHistory.featured_from.desc())
            .all()
        )
        item = FeaturedAdageResponse.model_validate(adage)
        item.score = scores.get(adage.id, 0)
        item.save_count = int(save_counts.get(adage.id, 0))
        item.featured_dates = [FeaturedWindow.model_validate(window) for window in windows]
        item.featured_reason = windows[0].reason if windows else None
        results.append(item)
    return results


def featured_history(db: Session, limit: int = 52) -> list[FeaturedHistoryEntry]:
    """Return the calendar of feature windows in the current cycle, newest first."""
    rows = (
        db.query(FeaturedAdageHistory, Adage.adage)
        .join(Adage, Adage.id == FeaturedAdageHistory.adage_id)
        .filter(FeaturedAdageHistory.deleted_at.is_(None), Adage.deleted_at.is_(None))
        .order_by(FeaturedAdageHistory.featured_from.desc(), FeaturedAdageHistory.id.desc())
        .limit(limit)
        .all()
    )
    return [
        FeaturedHistoryEntry(
            id=history.id,
            adage_id=history.adage_id,
            adage=text,
            featured_from=history.featured_from,
            featured_until=history.featured_until,
            reason=history.reason,
        )
        for history, text in rows
    ]


__all__ = [
    "ROTATION_REASON",
    "ROTATION_RESTART_REASON",
    "RotationOutcome",
    "announce_rotation",
    "featured_adages",
    "featured_history",
    "rotate_featured",
    "set_featured",
]
