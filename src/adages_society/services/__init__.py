# src/adages_society/services/__init__.py
"""Business logic services for the American Adages Society."""

from .comments import CommentService
from .email import EmailService
from .forum import ForumService
from .friends import FriendService
from .moderation import ModerationService
from .votes import VoteService

__all__ = [
    "CommentService",
    "EmailService",
    "ForumService",
    "FriendService",
    "ModerationService",
    "VoteService",
]
