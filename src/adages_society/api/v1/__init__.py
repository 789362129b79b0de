# src/adages_society/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    adages_router,
    admin_router,
    appeals_router,
    auth_router,
    blog_router,
    challenges_router,
    citations_router,
    collections_router,
    comments_router,
    contact_router,
    documents_router,
    events_router,
    forum_router,
    friends_router,
    lore_router,
    mailing_list_router,
    notifications_router,
    rss_router,
    users_router,
    votes_router,
)

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
