"""Reader challenges, appeals and the deleted-items review queue."""
from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from adages_society.db.time import utcnow
from adages_society.models import (
    Adage,
    BlogPost,
    Comment,
    ContactMessage,
    ForumReply,
    ForumThread,
    Notification,
    ReaderChallenge,
    User,
)
from adages_society.models.challenge import (
    APPEAL_ACCEPTED,
    CHALLENGE_DECIDED_STATUSES,
    CHALLENGE_STATUS_ACCEPTED,
    CHALLENGE_STATUS_PENDING,
)
from adages_society.repositories.content_repo import get_target, target_owner_id, target_title
from adages_society.schemas.comment import CommentReport
from adages_society.schemas.forum import ForumReplyReport
from adages_society.schemas.moderation import (
    AppealCreate,
    AppealDecision,
    AppealResponse,
    ChallengeCreate,
    ChallengeResponse,
    ChallengeUpdate,
    DeletedItem,
)
from adages_society.services.activity import log_moderation
from adages_society.services.notifications import email_admins, notify, notify_admins
from adages_society.utils.text import truncate

logger = logging.getLogger(__name__)

__all__ = ["DELETED_ITEMS_PER_TYPE", "DELETED_ITEM_MODELS", "ModerationService"]

DELETED_ITEMS_PER_TYPE = 50

DELETED_ITEM_MODELS: dict[str, Any] = {
    "comment": Comment,
    "adage": Adage,
    "blog": BlogPost,
    "forum_thread": ForumThread,
    "forum_reply": ForumReply,
    "challenge": ReaderChallenge,
}


# Reported content that accepting a report removes, with its display label.
REMOVABLE_REPORT_TARGETS = {"comment": "comment", "forum_reply": "forum reply"}


def _adjust_reply_count(db: Session, item_type: str, row: Any, delta: int) -> None:
    if item_type != "forum_reply":
        return
    thread = db.get(ForumThread, row.thread_id)
    if thread is not None:
        thread.replies_count = max(thread.replies_count + delta, 0)


def _deleted_details(item_type: str, row: Any) -> dict[str, Any]:
    if item_type == "comment":
        return {"target_type": row.target_type, "target_id": row.target_id, "user_id": row.user_id}
    if item_type == "adage":
        return {"definition": truncate(row.definition, 120)}
    if item_type == "blog":
        return {"slug": row.slug, "published": row.published}
    if item_type == "forum_thread":
        return {"section_id": row.section_id, "author_id": row.author_id}
    if item_type == "forum_reply":
        return {"thread_id": row.thread_id, "author_id": row.author_id}
    return {
        "target_type": row.target_type,
        "target_id": row.target_id,
        "challenger_id": row.challenger_id,
    }


class ModerationService:
    """Service handling the challenge state machine and appeals."""

    @staticmethod
    def to_response(db: Session, challenge: ReaderChallenge) -> ChallengeResponse:
        item = ChallengeResponse.model_validate(challenge)
        target = get_target(db, challenge.target_type, challenge.target_id)
        item.target_title = target_title(target) if target is not None else None
        return item

    @staticmethod
    def create_challenge(db: Session, user: User, payload: ChallengeCreate) -> ReaderChallenge:
        """Open a challenge against an existing piece of content."""
        target = get_target(db, payload.target_type, payload.target_id)
        if target is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Target not found")

        challenge = ReaderChallenge(
            target_type=payload.target_type,
            target_id=payload.target_id,
            challenger_id=user.id,
            challenge_reason=payload.challenge_reason.strip(),
            reporter_role=user.role,
        )
        db.add(challenge)
        db.flush()
        notify_admins(
            db,
            "New Reader Challenge",
            f"{user.public_name} challenged {payload.target_type} #{payload.target_id}.",
            related_id=challenge.id,
            related_type="challenge",
        )
        db.commit()
        db.refresh(challenge)
        return challenge

    @staticmethod
    def report_comment(db: Session, user: User, payload: CommentReport) -> ReaderChallenge:
        """Report a comment, snapshotting the roles of both members involved."""
        comment = (
            db.query(Comment)
            .filter(Comment.id == payload.comment_id, Comment.deleted_at.is_(None))
            .first()
        )
        if comment is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
        if comment.user_id == user.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You cannot report your own comment",
            )

        author = db.get(User, comment.user_id)
        challenge = ReaderChallenge(
            target_type="comment",
            target_id=comment.id,
            challenger_id=user.id,
            challenge_reason=f"Comment Report: {payload.reason.strip()}",
            reporter_role=user.role,
            reported_user_id=comment.user_id,
            reported_user_role=author.role if author else None,
        )
        db.add(challenge)
        db.commit()
        db.refresh(challenge)
        return challenge

    @staticmethod
    def report_forum_reply(db: Session, user: User, payload: ForumReplyReport) -> ReaderChallenge:
        """Report a forum reply; each member may report a given reply once."""
        reply = (
            db.query(ForumReply)
            .filter(
                ForumReply.id == payload.reply_id,
                ForumReply.deleted_at.is_(None),
                ForumReply.hidden_at.is_(None),
            )
            .first()
        )
        if reply is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reply not found")
        if reply.author_id == user.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You cannot report your own reply",
            )
        duplicate = (
            db.query(ReaderChallenge.id)
            .filter(
                ReaderChallenge.target_type == "forum_reply",
                ReaderChallenge.target_id == reply.id,
                ReaderChallenge.challenger_id == user.id,
            )
            .first()
        )
        if duplicate is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You have already reported this reply",
            )

        author = db.get(User, reply.author_id)
        challenge = ReaderChallenge(
            target_type="forum_reply",
            target_id=reply.id,
            challenger_id=user.id,
            challenge_reason=f"Forum Reply Report: {payload.reason.strip()}",
            reporter_role=user.role,
            reported_user_id=reply.author_id,
            reported_user_role=author.role if author else None,
        )
        db.add(challenge)
        db.flush()
        notify_admins(
            db,
            "New Forum Reply Report",
            f"{user.public_name} reported forum reply #{reply.id}.",
            related_id=challenge.id,
            related_type="challenge",
        )
        db.commit()
        db.refresh(challenge)
        logger.info("Forum reply %s reported by user %s", reply.id, user.id)
        return challenge

    @staticmethod
    def decide_challenge(
        db: Session, challenge: ReaderChallenge, payload: ChallengeUpdate, admin: User
    ) -> ReaderChallenge:
        """Move a challenge through its review states.

        Reaching accepted or rejected from an open status closes the challenge by
        soft-deleting it. Accepting a comment report also removes the comment
        and warns its author, who may appeal once.
        """
        previous = challenge.status
        now = utcnow()
        challenge.status = payload.status
        if payload.admin_notes is not None:
            challenge.admin_notes = payload.admin_notes
        challenge.reviewed_by = admin.id
        challenge.reviewed_at = now

        if (
            previous not in CHALLENGE_DECIDED_STATUSES
            and payload.status in CHALLENGE_DECIDED_STATUSES
        ):
            challenge.deleted_at = now
            if payload.status == CHALLENGE_STATUS_ACCEPTED:
                ModerationService._apply_acceptance(db, challenge, now)
            else:
                notify(
                    db,
                    challenge.challenger_id,
                    "report_rejected",
                    "Report Reviewed",
                    "Thank you for your report. After review, no action was taken.",
                    related_id=challenge.id,
                    related_type="challenge",
                )

        log_moderation(
            db,
            admin.id,
            f"challenge_{payload.status}",
            "challenge",
            challenge.id,
            reason=payload.admin_notes,
            details={"previous_status": previous},
        )
        db.commit()
        db.refresh(challenge)
        return challenge

    @staticmethod
    def _apply_acceptance(db: Session, challenge: ReaderChallenge, now) -> None:
        notify(
            db,
            challenge.challenger_id,
            "report_accepted",
            "Thank You - Report Accepted",
            "Your report was reviewed and accepted. Thank you for helping keep the "
            "society's content accurate and respectful.",
            related_id=challenge.id,
            related_type="challenge",
        )
        if challenge.target_type not in REMOVABLE_REPORT_TARGETS:
            return

        label = REMOVABLE_REPORT_TARGETS[challenge.target_type]
        row = db.get(DELETED_ITEM_MODELS[challenge.target_type], challenge.target_id)
        if row is None:
            return
        if row.deleted_at is None:
            row.deleted_at = now
            _adjust_reply_count(db, challenge.target_type, row, -1)
        author_id = target_owner_id(row)
        challenge.reported_user_id = challenge.reported_user_id or author_id
        if author_id is None:
            return
        notify(
            db,
            author_id,
            "report_warning",
            f"Your {label.title()} Was Removed",
            f"A {label} you posted was removed after a community report. You may "
            "appeal this decision once from your notifications.",
            related_id=challenge.id,
            related_type="challenge",
        )

    @staticmethod
    def delete_challenge(db: Session, challenge: ReaderChallenge, admin: User) -> None:
        challenge.deleted_at = utcnow()
        log_moderation(db, admin.id, "delete_challenge", "challenge", challenge.id)
        db.commit()

    @staticmethod
    def submit_appeal(db: Session, user: User, payload: AppealCreate) -> AppealResponse:
        """File the single appeal allowed against an accepted comment report.

        Raises:
            HTTPException: 404 if the warning or challenge is missing, 400 if the
                challenge is not accepted or its appeal was already used
        """
        notification = (
            db.query(Notification)
            .filter(
                Notification.id == payload.notification_id,
                Notification.user_id == user.id,
                Notification.type == "report_warning",
                Notification.deleted_at.is_(None),
            )
            .first()
        )
        if notification is None or notification.related_id is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found"
            )

        challenge = db.get(ReaderChallenge, notification.related_id)
        if challenge is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Challenge not found")
        if challenge.status != CHALLENGE_STATUS_ACCEPTED:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only accepted reports can be appealed",
            )
        if not challenge.appeal_allowed or challenge.appeal_count > 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You have already used your appeal for this decision",
            )

        message = ContactMessage(
            name=user.public_name,
            email=user.email,
            subject=f"Appeal for report #{challenge.id}",
            message=payload.message.strip(),
            category="correction",
            user_id=user.id,
            challenge_id=challenge.id,
        )
        db.add(message)
        challenge.appeal_count += 1
        db.flush()

        notify(
            db,
            user.id,
            "appeal_response",
            "Appeal Received",
            "We received your appeal and will review it shortly.",
            related_id=challenge.id,
            related_type="challenge",
        )
        alert = f"{user.public_name} appealed the decision on report #{challenge.id}."
        notify_admins(
            db,
            "New Appeal Submitted",
            alert,
            related_id=message.id,
            related_type="contact_message",
        )
        db.commit()
        email_admins(db, "New Appeal Submitted", alert)
        return AppealResponse(
            contact_message_id=message.id,
            challenge_id=challenge.id,
            appeal_decision=challenge.appeal_decision,
        )

    @staticmethod
    def decide_appeal(
        db: Session, contact_message_id: int, payload: AppealDecision, admin: User
    ) -> AppealResponse:
        """Record the admin's verdict on an appeal and notify the members involved."""
        message = (
            db.query(ContactMessage)
            .filter(
                ContactMessage.id == contact_message_id,
                ContactMessage.challenge_id.is_not(None),
                ContactMessage.deleted_at.is_(None),
            )
            .first()
        )
        if message is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Appeal not found")
        challenge = db.get(ReaderChallenge, message.challenge_id)
        if challenge is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Challenge not found")
        if challenge.appeal_decision is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="This appeal has already been decided",
            )

        challenge.appeal_decision = payload.decision
        challenge.appeal_allowed = False
        message.read = True
        message.replied = True
        appellant_id = message.user_id or challenge.reported_user_id

        if payload.decision == APPEAL_ACCEPTED:
            challenge.deleted_at = None
            challenge.status = CHALLENGE_STATUS_PENDING
            if challenge.target_type in REMOVABLE_REPORT_TARGETS:
                model = DELETED_ITEM_MODELS[challenge.target_type]
                row = db.get(model, challenge.target_id)
                if row is not None and row.deleted_at is not None:
                    row.deleted_at = None
                    _adjust_reply_count(db, challenge.target_type, row, 1)
            if appellant_id is not None:
                notify(
                    db,
                    appellant_id,
                    "appeal_response",
                    "Appeal Accepted",
                    payload.response_message
                    or "Your appeal was accepted and your content has been restored.",
                    related_id=challenge.id,
                    related_type="challenge",
                )
        else:
            if appellant_id is not None:
                notify(
                    db,
                    appellant_id,
                    "appeal_response",
                    "Appeal Rejected",
                    payload.response_message
                    or "After review, the original decision stands.",
                    related_id=challenge.id,
                    related_type="challenge",
                )
            notify(
                db,
                challenge.challenger_id,
                "report_rejected",
                "Appeal Decided",
                "The appeal against your report was rejected; the original decision stands.",
                related_id=challenge.id,
                related_type="challenge",
            )

        log_moderation(
            db,
            admin.id,
            f"appeal_{payload.decision}",
            "challenge",
            challenge.id,
            reason=payload.response_message,
            details={"contact_message_id": message.id},
        )
        db.commit()
        return AppealResponse(
            contact_message_id=message.id,
            challenge_id=challenge.id,
            appeal_decision=challenge.appeal_decision,
        )

    @staticmethod
    def list_deleted_items(db: Session) -> list[DeletedItem]:
        """Soft-deleted rows of every moderated type, newest deletion first."""
        items: list[DeletedItem] = []
        for item_type, model in DELETED_ITEM_MODELS.items():
            query = db.query(model).filter(model.deleted_at.is_not(None))
            if item_type == "challenge":
                query = query.filter(model.status.in_(CHALLENGE_DECIDED_STATUSES))
            rows = query.order_by(model.deleted_at.desc()).limit(DELETED_ITEMS_PER_TYPE).all()
            for row in rows:
                item = DeletedItem(
                    type=item_type,
                    id=row.id,
                    title=target_title(row),
                    deleted_at=row.deleted_at,
                    details=_deleted_details(item_type, row),
                )
                if item_type == "challenge":
                    item.status = row.status
                    item.appeal_decision = row.appeal_decision
                items.append(item)
        items.sort(key=lambda item: item.deleted_at, reverse=True)
        return items

    @staticmethod
    def restore_item(db: Session, item_type: str, item_id: int, admin: User) -> Any:
        """Clear `deleted_at` on a soft-deleted row.

        Raises:
            HTTPException: 400 for an unknown type, 404 if no deleted row matches
        """
        model = DELETED_ITEM_MODELS.get(item_type)
        if model is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid item type")
        row = (
            db.query(model)
            .filter(model.id == item_id, model.deleted_at.is_not(None))
            .first()
        )
        if row is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")

        row.deleted_at = None
        if item_type == "challenge":
            row.status = CHALLENGE_STATUS_PENDING
        if item_type == "forum_reply":
            thread = db.get(ForumThread, row.thread_id)
            if thread is not None:
                thread.replies_count += 1
        log_moderation(
            db,
            admin.id,
            "restore",
            item_type,
            item_id,
            details={"owner_id": target_owner_id(row)},
        )
        db.commit()
        db.refresh(row)
        logger.info("Admin %s restored %s #%s", admin.id, item_type, item_id)
        return row
