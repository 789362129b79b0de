"""Role hierarchy shared by permission checks."""

from __future__ import annotations

ROLE_BANNED = "banned"
ROLE_RESTRICTED = "restricted"
ROLE_PROBATION = "probation"
ROLE_USER = "user"
ROLE_MODERATOR = "moderator"
ROLE_ADMIN = "admin"

# Higher rank = more privileges.
ROLE_HIERARCHY: dict[str, int] = {
    ROLE_BANNED: 0,
    ROLE_RESTRICTED: 1,
    ROLE_PROBATION: 2,
    ROLE_USER: 3,
    ROLE_MODERATOR: 4,
    ROLE_ADMIN: 5,
}

ALL_ROLES = tuple(ROLE_HIERARCHY)


def role_rank(role: str | None) -> int:
    """Return the numeric rank of `role`; unknown roles rank as banned."""
    return ROLE_HIERARCHY.get(role or "", 0)


def has_role(role: str | None, required: str) -> bool:
    """Return True if `role` is at least as privileged as `required`."""
    return role_rank(role) >= ROLE_HIERARCHY[required]


def is_moderator(role: str | None) -> bool:
    return has_role(role, ROLE_MODERATOR)


def is_admin(role: str | None) -> bool:
    return role == ROLE_ADMIN


def can_participate(role: str | None) -> bool:
    """Banned and restricted accounts may read but not write community content."""
    return role_rank(role) > ROLE_HIERARCHY[ROLE_RESTRICTED]


__all__ = [
    "ALL_ROLES",
    "ROLE_ADMIN",
    "ROLE_BANNED",
    "ROLE_HIERARCHY",
    "ROLE_MODERATOR",
    "ROLE_PROBATION",
    "ROLE_RESTRICTED",
    "ROLE_USER",
    "can_participate",
    "has_role",
    "is_admin",
    "is_moderator",
    "role_rank",
]
