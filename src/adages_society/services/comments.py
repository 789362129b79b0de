"""Comment posting and the ownership/role rules around editing."""
from __future__ import annotations

from fastapi import HTTPException, status
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from adages_society.core.roles import is_admin, is_moderator
from adages_society.db.time import utcnow
from adages_society.models import Comment, User
from adages_society.repositories.content_repo import get_target
from adages_society.schemas.comment import CommentCreate, CommentResponse
from adages_society.schemas.common import UserSummary
from adages_society.services.activity import log_activity
from adages_society.services.friends import FriendService
from adages_society.services.votes import VoteService

__all__ = ["CommentService", "MIN_COMMENT_LENGTH", "MAX_COMMENT_LENGTH"]

MIN_COMMENT_LENGTH = 3
MAX_COMMENT_LENGTH = 5000


def _clean_content(content: str) -> str:
    content = content.strip()
    if len(content) < MIN_COMMENT_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Comment must be at least {MIN_COMMENT_LENGTH} characters",
        )
    if len(content) > MAX_COMMENT_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Comment must be at most {MAX_COMMENT_LENGTH} characters",
        )
    return content


class CommentService:
    """Service handling comment visibility, creation and edits."""

    @staticmethod
    def list_for_target(
        db: Session, target_type: str, target_id: int, viewer_id: int | None
    ) -> list[CommentResponse]:
        """Visible comments plus the viewer's own deleted ones, oldest first."""
        visible = and_(Comment.deleted_at.is_(None), Comment.hidden_at.is_(None))
        condition = visible
        if viewer_id is not None:
            condition = or_(
                visible,
                and_(Comment.deleted_at.is_not(None), Comment.user_id == viewer_id),
            )
        comments = (
            db.query(Comment)
            .filter(Comment.target_type == target_type, Comment.target_id == target_id)
            .filter(condition)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
            .all()
        )
        ids = [comment.id for comment in comments]
        scores = VoteService.scores(db, "comment", ids)
        user_votes = VoteService.user_votes(db, viewer_id, "comment", ids)
        author_ids = {comment.user_id for comment in comments}
        authors: dict[int, User] = {}
        if author_ids:
            authors = {user.id: user for user in db.query(User).filter(User.id.in_(author_ids))}

        results = []
        for comment in comments:
            item = CommentResponse.model_validate(comment)
            author = authors.get(comment.user_id)
            item.author = UserSummary.model_validate(author) if author else None
            item.score = scores.get(comment.id, 0)
            item.user_vote = user_votes.get(comment.id, 0)
            results.append(item)
        return results

    @staticmethod
    def create(db: Session, user: User, payload: CommentCreate) -> Comment:
        """Post a comment on an adage, blog post or member profile.

        Raises:
            HTTPException: 400 for bad content, 404 for a missing target or
                parent, 403 for a private profile the caller cannot see
        """
        content = _clean_content(payload.content)

        target = get_target(db, payload.target_type, payload.target_id)
        if target is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Target not found")
        if payload.target_type == "user" and target.profile_private:
            if not FriendService.are_friends(db, user.id, target.id):
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="This profile is private",
                )

        if payload.parent_id is not None:
            parent = (
                db.query(Comment)
                .filter(
                    Comment.id == payload.parent_id,
                    Comment.target_type == payload.target_type,
                    Comment.target_id == payload.target_id,
                    Comment.deleted_at.is_(None),
                )
                .first()
            )
            if parent is None:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND, detail="Parent comment not found"
                )

        comment = Comment(
            user_id=user.id,
            target_type=payload.target_type,
            target_id=payload.target_id,
            parent_id=payload.parent_id,
            content=content,
            # Commendations are reserved for staff; the flag is ignored otherwise.
            is_commendation=payload.is_commendation and is_moderator(user.role),
        )
        db.add(comment)
        db.commit()
        db.refresh(comment)
        return comment

    @staticmethod
    def ensure_can_modify(user: User, comment: Comment) -> None:
        """Owners may change their own plain comments; staff may change any."""
        if is_moderator(user.role):
            return
        if comment.is_commendation:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only moderators can modify commendations",
            )
        if comment.user_id != user.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )

    @staticmethod
    def update(db: Session, user: User, comment: Comment, content: str) -> Comment:
        CommentService.ensure_can_modify(user, comment)
        comment.content = _clean_content(content)
        comment.updated_at = utcnow()
        db.commit()
        db.refresh(comment)
        return comment

    @staticmethod
    def delete(db: Session, user: User, comment: Comment) -> None:
        CommentService.ensure_can_modify(user, comment)
        comment.deleted_at = utcnow()
        log_activity(
            db,
            user.id,
            "delete_comment",
            "comment",
            comment.id,
            {"by_owner": comment.user_id == user.id, "by_admin": is_admin(user.role)},
        )
        db.commit()
