# src/adages_society/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .adages import router as adages_router
from .admin import router as admin_router
from .auth import router as auth_router
from .blog import router as blog_router
from .blog import rss_router
from .challenges import appeals_router
from .challenges import router as challenges_router
from .citations import router as citations_router
from .collections import router as collections_router
from .comments import router as comments_router
from .contact import router as contact_router
from .documents import router as documents_router
from .events import router as events_router
from .forum import router as forum_router
from .lore import router as lore_router
from .friends import router as friends_router
from .mailing_list import router as mailing_list_router
from .notifications import router as notifications_router
from .users import router as users_router
from .votes import router as votes_router

__all__ = [
    "auth_router",
    "users_router",
    "adages_router",
    "lore_router",
    "votes_router",
    "comments_router",
    "challenges_router",
    "appeals_router",
    "admin_router",
    "blog_router",
    "rss_router",
    "forum_router",
    "friends_router",
    "collections_router",
    "notifications_router",
    "citations_router",
    "events_router",
    "documents_router",
    "contact_router",
    "mailing_list_router",
]
