# src/adages_society/models/__init__.py
"""SQLAlchemy models for the American Adages Society."""

from .activity import ActivityLog, ModerationLog
from .adage import Adage, AdageVersion, FeaturedAdageHistory
from .blog import BlogPost, BlogPostVersion
from .challenge import ReaderChallenge
from .citation import Citation
from .collection import Collection, CollectionItem, SavedAdage
from .comment import Comment
from .contact import ContactMessage, MessageReply
from .document import Document
from .event import Event
from .forum import ForumReply, ForumSection, ForumThread
from .friendship import Friendship
from .lore import (
    AdageTimelineEntry,
    AdageTranslation,
    AdageUsageExample,
    AdageVariant,
    RelatedAdage,
)
from .mailing_list import MailingListEntry
from .notification import Notification
from .user import PasswordResetToken, User
from .vote import Vote

__all__ = [
    "ActivityLog", "ModerationLog",
    "Adage", "AdageVersion", "FeaturedAdageHistory",
    "BlogPost", "BlogPostVersion",
    "ReaderChallenge",
    "Citation",
    "Collection", "CollectionItem", "SavedAdage",
    "Comment",
    "ContactMessage", "MessageReply",
    "Document",
    "Event",
    "ForumReply", "ForumSection", "ForumThread",
    "AdageTimelineEntry", "AdageTranslation", "AdageUsageExample", "AdageVariant",
    "RelatedAdage",
    "Friendship",
    "MailingListEntry",
    "Notification",
    "PasswordResetToken", "User",
    "Vote",
]
