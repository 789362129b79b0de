"""Friendship lookups and state changes between members."""
from __future__ import annotations

from fastapi import HTTPException, status
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from adages_society.models import Friendship, User
from adages_society.models.friendship import (
    FRIENDSHIP_ACCEPTED,
    FRIENDSHIP_BLOCKED,
    FRIENDSHIP_PENDING,
)
from adages_society.schemas.common import UserSummary
from adages_society.schemas.social import FriendList, FriendshipResponse, FriendshipStatus
from adages_society.services.notifications import notify

__all__ = ["FriendService"]


class FriendService:
    """Service for the symmetric friendship graph."""

    @staticmethod
    def between(db: Session, user_id: int, other_id: int) -> Friendship | None:
        """Return the edge joining two members in either direction."""
        return (
            db.query(Friendship)
            .filter(
                or_(
                    and_(Friendship.user_id == user_id, Friendship.friend_id == other_id),
                    and_(Friendship.user_id == other_id, Friendship.friend_id == user_id),
                )
            )
            .first()
        )

    @staticmethod
    def are_friends(db: Session, user_id: int, other_id: int) -> bool:
        if user_id == other_id:
            return True
        edge = FriendService.between(db, user_id, other_id)
        return edge is not None and edge.status == FRIENDSHIP_ACCEPTED

    @staticmethod
    def list_for(db: Session, user_id: int, status_filter: str | None = None) -> FriendList:
        """Return outgoing and incoming edges with the other member attached."""
        query = db.query(Friendship).filter(
            or_(Friendship.user_id == user_id, Friendship.friend_id == user_id)
        )
        if status_filter:
            query = query.filter(Friendship.status == status_filter)
        edges = query.order_by(Friendship.created_at.desc()).all()

        other_ids = {
            edge.friend_id if edge.user_id == user_id else edge.user_id for edge in edges
        }
        others: dict[int, User] = {}
        if other_ids:
            others = {
                user.id: user
                for user in db.query(User).filter(
                    User.id.in_(other_ids), User.deleted_at.is_(None)
                )
            }

        result = FriendList()
        for edge in edges:
            outgoing = edge.user_id == user_id
            other = others.get(edge.friend_id if outgoing else edge.user_id)
            if other is None:
                continue
            item = FriendshipResponse.model_validate(edge)
            item.other_user = UserSummary.model_validate(other)
            (result.outgoing if outgoing else result.incoming).append(item)
        return result

    @staticmethod
    def request(db: Session, requester: User, friend_id: int) -> Friendship:
        """Send a friend request and notify the recipient.

        Raises:
            HTTPException: 400 for self or existing relations, 404 for unknown
                members, 403 when the target's private profile hides friends
        """
        if friend_id == requester.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You cannot send a friend request to yourself",
            )
        target = (
            db.query(User).filter(User.id == friend_id, User.deleted_at.is_(None)).first()
        )
        if target is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        if target.profile_private and not target.show_friends:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="This user is not accepting friend requests",
            )

        existing = FriendService.between(db, requester.id, friend_id)
        if existing is not None:
            messages = {
                FRIENDSHIP_PENDING: "A friend request is already pending",
                FRIENDSHIP_ACCEPTED: "You are already friends",
                FRIENDSHIP_BLOCKED: "Unable to send friend request",
            }
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=messages.get(existing.status, "Friendship already exists"),
            )

        edge = Friendship(user_id=requester.id, friend_id=friend_id, status=FRIENDSHIP_PENDING)
        db.add(edge)
        db.flush()
        notify(
            db,
            friend_id,
            "friend_request",
            "New Friend Request",
            f"{requester.public_name} sent you a friend request.",
            related_id=requester.id,
            related_type="user",
        )
        db.commit()
        db.refresh(edge)
        return edge

    @staticmethod
    def act(db: Session, user: User, other_id: int, action: str) -> Friendship | None:
        """Accept, reject, block or unblock; returns the surviving edge, if any."""
        edge = FriendService.between(db, user.id, other_id)

        if action == "block":
            if other_id == user.id:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot block yourself"
                )
            if db.get(User, other_id) is None:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
            if edge is not None and edge.status == FRIENDSHIP_BLOCKED and edge.user_id != user.id:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST, detail="User is already blocked"
                )
            if edge is not None and edge.user_id != user.id:
                db.delete(edge)
                db.flush()
                edge = None
            if edge is None:
                edge = Friendship(user_id=user.id, friend_id=other_id)
                db.add(edge)
            edge.status = FRIENDSHIP_BLOCKED
            db.commit()
            db.refresh(edge)
            return edge

        if edge is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Friendship not found"
            )

        if action in ("accept", "reject"):
            if edge.status != FRIENDSHIP_PENDING or edge.friend_id != user.id:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Only the recipient can respond to a pending request",
                )
            if action == "accept":
                edge.status = FRIENDSHIP_ACCEPTED
                db.commit()
                db.refresh(edge)
                return edge
            db.delete(edge)
            db.commit()
            return None

        # unblock
        if edge.status != FRIENDSHIP_BLOCKED or edge.user_id != user.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="User is not blocked"
            )
        db.delete(edge)
        db.commit()
        return None

    @staticmethod
    def remove(db: Session, user_id: int, other_id: int) -> None:
        edge = FriendService.between(db, user_id, other_id)
        if edge is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Friendship not found"
            )
        db.delete(edge)
        db.commit()

    @staticmethod
    def status_between(db: Session, user_id: int, other_id: int) -> FriendshipStatus:
        edge = FriendService.between(db, user_id, other_id)
        if edge is None:
            return FriendshipStatus(status="none", direction="none")
        direction = "outgoing" if edge.user_id == user_id else "incoming"
        return FriendshipStatus(status=edge.status, direction=direction)
