"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .adage import AdageCreate, AdageDetail, AdageResponse, AdageUpdate
from .blog import BlogPostCreate, BlogPostResponse, BlogPostUpdate
from .comment import CommentCreate, CommentResponse, CommentUpdate
from .common import ApiResponse, ErrorResponse, UserSummary
from .moderation import ChallengeCreate, ChallengeResponse, DeletedItem
from .user import UserProfile, UserPublic
from .vote import VoteCreate, VoteSummary

__all__ = [
    "AdageCreate", "AdageDetail", "AdageResponse", "AdageUpdate",
    "BlogPostCreate", "BlogPostResponse", "BlogPostUpdate",
    "CommentCreate", "CommentResponse", "CommentUpdate",
    "ApiResponse", "ErrorResponse", "UserSummary",
    "ChallengeCreate", "ChallengeResponse", "DeletedItem",
    "UserProfile", "UserPublic",
    "VoteCreate", "VoteSummary",
]
