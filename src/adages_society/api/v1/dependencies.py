"""Shared API dependencies for authentication, roles and rate limits."""

import hmac
from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from adages_society.core.rate_limit import client_identifier, get_rate_limiter
from adages_society.core.roles import ROLE_ADMIN, ROLE_MODERATOR, can_participate, has_role
from adages_society.core.security import JWTError, decode_access_token
from adages_society.core.settings import settings
from adages_society.db.session import get_db
from adages_society.models import User

# HTTP Bearer scheme; missing credentials are reported as 401 below
bearer_scheme = HTTPBearer(auto_error=False)

BearerDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]

_CRON_HEADER_VALUES = {"1", "true"}


def _unauthorized(detail: str = "Unauthorized") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _user_from_token(token: str, db: Session) -> User:
    try:
        payload = decode_access_token(token)
    except JWTError as err:
        raise _unauthorized("Could not validate credentials") from err

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError) as err:
        raise _unauthorized("Could not validate credentials") from err

    user = db.query(User).filter(User.id == user_id, User.deleted_at.is_(None)).first()
    if user is None:
        raise _unauthorized("User not found")
    return user


def get_current_user(credentials: BearerDep, db: SessionDep) -> User:
    """Get the current authenticated user from the JWT bearer token.

    Raises:
        HTTPException: 401 if the token is missing, invalid or for a deleted user
    """
    if credentials is None:
        raise _unauthorized()
    return _user_from_token(credentials.credentials, db)


def get_optional_user(credentials: BearerDep, db: SessionDep) -> User | None:
    """Like `get_current_user`, but anonymous requests resolve to None."""
    if credentials is None:
        return None
    return _user_from_token(credentials.credentials, db)


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]


def require_role(required: str) -> Callable[[User], User]:
    """Build a dependency that admits users ranked at least `required`."""

    def dependency(current_user: CurrentUserDep) -> User:
        if not has_role(current_user.role, required):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return dependency


AdminUserDep = Annotated[User, Depends(require_role(ROLE_ADMIN))]
ModeratorUserDep = Annotated[User, Depends(require_role(ROLE_MODERATOR))]


def require_verified_user(current_user: CurrentUserDep) -> User:
    if not current_user.email_verified:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Please verify your email address before continuing",
        )
    return current_user


VerifiedUserDep = Annotated[User, Depends(require_verified_user)]


def require_participant(current_user: VerifiedUserDep) -> User:
    """Verified users whose role still allows posting and voting."""
    if not can_participate(current_user.role):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account is not allowed to perform this action",
        )
    return current_user


ParticipantUserDep = Annotated[User, Depends(require_participant)]


def enforce_rate_limit(key: str, limit: int | None = None) -> None:
    """Count one hit for `key` and raise 429 once the window is exhausted."""
    result = get_rate_limiter().hit(key, limit)
    if not result.allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests. Please try again later.",
        )


def client_key(request: Request) -> str:
    peer = request.client.host if request.client else None
    return client_identifier(request.headers, peer)


def verify_cron_request(request: Request) -> None:
    """Admit the scheduler via its trigger header or the shared cron secret.

    Raises:
        HTTPException: 401 if neither is present
    """
    trigger = request.headers.get("x-cron-trigger", "").strip().lower()
    if trigger in _CRON_HEADER_VALUES:
        return
    if settings.cron_secret:
        expected = f"Bearer {settings.cron_secret}"
        provided = request.headers.get("authorization", "")
        if hmac.compare_digest(provided.encode(), expected.encode()):
            return
    raise _unauthorized()


CronDep = Annotated[None, Depends(verify_cron_request)]
