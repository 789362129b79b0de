"""Password hashing and access token utilities."""
from __future__ import annotations

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import nacl.pwhash
from jose import JWTError, jwt
from nacl.exceptions import CryptoError

from adages_society.core.settings import settings


def hash_password(password: str) -> str:
    """Hash a password with argon2id.

    Returns:
        The encoded hash string (includes algorithm parameters and salt).
    """
    hashed = nacl.pwhash.argon2id.str(
        password.encode("utf-8"),
        opslimit=nacl.pwhash.argon2id.OPSLIMIT_INTERACTIVE,
        memlimit=nacl.pwhash.argon2id.MEMLIMIT_INTERACTIVE,
    )
    return hashed.decode("ascii")


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check `password` against a stored hash; False on mismatch or bad hash."""
    if not password_hash:
        return False
    try:
        return nacl.pwhash.verify(password_hash.encode("ascii"), password.encode("utf-8"))
    except CryptoError:
        return False


def create_access_token(subject: int | str, extra_claims: dict[str, Any] | None = None) -> str:
    """Create JWT access token for user authentication."""
    to_encode: dict[str, object] = {"sub": str(subject)}
    if extra_claims:
        to_encode.update(extra_claims)
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT; raises `jose.JWTError` when invalid."""
    payload: dict[str, Any] = jwt.decode(
        token,
        settings.secret_key,
        algorithms=[settings.jwt_algorithm],
    )
    return payload


def generate_token(nbytes: int = 32) -> str:
    """Return a URL-safe random token for reset and verification links."""
    return secrets.token_urlsafe(nbytes)


__all__ = [
    "JWTError",
    "create_access_token",
    "decode_access_token",
    "generate_token",
    "hash_password",
    "verify_password",
]
