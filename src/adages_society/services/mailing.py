"""Mailing list subscriptions and the weekly featured-adage digest."""
from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from adages_society.core.settings import settings
from adages_society.db.time import utcnow
from adages_society.models import Adage, MailingListEntry, User
from adages_society.schemas.content import WeeklySendResult
from adages_society.services.email import EmailError, get_email_service, render_weekly_adage
from adages_society.services.rotation import featured_adages

logger = logging.getLogger(__name__)

__all__ = [
    "is_subscribed",
    "send_weekly_digest",
    "subscribe",
    "unsubscribe",
    "weekly_recipients",
]


def subscribe(
    db: Session,
    email: str,
    *,
    first_name: str | None = None,
    last_name: str | None = None,
    source: str = "website",
) -> tuple[MailingListEntry, bool]:
    """Add or re-activate an address.

    Returns:
        The entry and whether anything changed (False if already subscribed)
    """
    entry = db.query(MailingListEntry).filter(MailingListEntry.email == email).first()
    if entry is not None:
        if entry.unsubscribed_at is None:
            return entry, False
        entry.unsubscribed_at = None
        entry.subscribed_at = utcnow()
        if first_name:
            entry.first_name = first_name
        if last_name:
            entry.last_name = last_name
    else:
        entry = MailingListEntry(
            email=email,
            first_name=first_name,
            last_name=last_name,
            source=source,
            confirmed=False,
        )
        db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry, True


def unsubscribe(db: Session, email: str) -> bool:
    entry = db.query(MailingListEntry).filter(MailingListEntry.email == email).first()
    if entry is None or entry.unsubscribed_at is not None:
        return False
    entry.unsubscribed_at = utcnow()
    db.commit()
    return True


def is_subscribed(db: Session, email: str) -> bool:
    return (
        db.query(MailingListEntry.id)
        .filter(MailingListEntry.email == email, MailingListEntry.unsubscribed_at.is_(None))
        .first()
        is not None
    )


def weekly_recipients(db: Session) -> list[str]:
    """Opted-in verified members plus confirmed subscribers, de-duplicated by email."""
    members = (
        db.query(User.email)
        .filter(
            User.deleted_at.is_(None),
            User.email_verified.is_(True),
            User.email_weekly_adage.is_(True),
        )
        .all()
    )
    subscribers = (
        db.query(MailingListEntry.email)
        .filter(
            MailingListEntry.confirmed.is_(True),
            MailingListEntry.unsubscribed_at.is_(None),
        )
        .all()
    )
    seen: dict[str, str] = {}
    for (email,) in [*members, *subscribers]:
        seen.setdefault(email.strip().lower(), email)
    return list(seen.values())


def send_weekly_digest(db: Session, adage: Adage | None = None) -> WeeklySendResult:
    """Email the current featured adage to every weekly recipient.

    Individual delivery failures are counted and logged; they do not stop the run.
    """
    if adage is None:
        featured = featured_adages(db)
        if not featured:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="No featured adage to send"
            )
        adage = db.get(Adage, featured[0].id)

    recipients = weekly_recipients(db)
    service = get_email_service()
    html = render_weekly_adage(
        adage.adage, adage.definition, f"{settings.site_url}/adages/{adage.id}"
    )
    subject = f"This Week's Adage: {adage.adage}"

    sent = errors = 0
    for email in recipients:
        try:
            if service.send(email, subject, html):
                sent += 1
        except EmailError:
            errors += 1
            logger.warning("Weekly digest failed for %s", email, exc_info=True)

    logger.info("Weekly digest for adage %s: sent=%d errors=%d", adage.id, sent, errors)
    return WeeklySendResult(sent=sent, errors=errors, recipients=len(recipients))
