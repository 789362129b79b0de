# tests/v1/test_auth.py
"""Tests for registration, login, verification and password recovery."""

from fastapi import status

from adages_society.core.security import decode_access_token
from adages_society.models import PasswordResetToken, User


def _register(client, email="new@example.com", password="long-enough-pw", **extra):
    return client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, **extra},
    )


def test_register_creates_unverified_user(client, db_session, outbox) -> None:
    response = _register(client, username="newbie")
    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["success"] is True
    assert body["data"]["email"] == "new@example.com"
    assert body["data"]["email_verified"] is False
    assert body["data"]["role"] == "user"

    user = db_session.query(User).filter(User.email == "new@example.com").one()
    assert user.verification_token
    assert user.password_hash != "long-enough-pw"
    assert outbox.sent[-1]["to"] == "new@example.com"
    assert user.verification_token in outbox.sent[-1]["html"]


def test_register_rejects_short_password(client) -> None:
    response = _register(client, password="short")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {
        "success": False,
        "error": "Password must be at least 8 characters",
    }


def test_register_rejects_duplicate_email(client, test_user) -> None:
    response = _register(client, email=test_user.email)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "Email already registered"


def test_register_rejects_invalid_email(client) -> None:
    response = _register(client, email="not-an-email")
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["success"] is False


def test_login_returns_token_with_role_claim(client, test_user, test_password) -> None:
    response = client.post(
        "/api/v1/auth/login", json={"email": test_user.email, "password": test_password}
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["token_type"] == "bearer"
    claims = decode_access_token(data["access_token"])
    assert claims["sub"] == str(test_user.id)
    assert claims["role"] == "user"
    assert data["user"]["id"] == test_user.id


def test_login_wrong_password(client, test_user) -> None:
    response = client.post(
        "/api/v1/auth/login", json={"email": test_user.email, "password": "wrong-password"}
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"] == "Invalid email or password"


def test_login_banned_user_gets_reason(client, make_user, test_password) -> None:
    banned = make_user("banned", ban_reason="Spam")
    response = client.post(
        "/api/v1/auth/login", json={"email": banned.email, "password": test_password}
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert "Spam" in response.json()["error"]


def test_verify_email_flow(client, db_session) -> None:
    _register(client, email="verify@example.com")
    user = db_session.query(User).filter(User.email == "verify@example.com").one()

    bad = client.post(
        "/api/v1/auth/verify-email", json={"email": user.email, "token": "nope"}
    )
    assert bad.status_code == status.HTTP_400_BAD_REQUEST

    ok = client.post(
        "/api/v1/auth/verify-email",
        json={"email": user.email, "token": user.verification_token},
    )
    assert ok.status_code == status.HTTP_200_OK
    assert ok.json()["message"] == "Email verified"

    again = client.post(
        "/api/v1/auth/verify-email", json={"email": user.email, "token": "anything"}
    )
    assert again.json()["message"] == "Email already verified"


def test_forgot_password_does_not_reveal_accounts(client, outbox) -> None:
    response = client.post(
        "/api/v1/auth/forgot-password", json={"email": "nobody@example.com"}
    )
    assert response.status_code == status.HTTP_200_OK
    assert outbox.sent == []


def test_password_reset_round_trip(client, db_session, test_user, outbox) -> None:
    client.post("/api/v1/auth/forgot-password", json={"email": test_user.email})
    token = (
        db_session.query(PasswordResetToken)
        .filter(PasswordResetToken.user_id == test_user.id, PasswordResetToken.used.is_(False))
        .one()
    )
    assert token.token in outbox.sent[-1]["html"]

    response = client.post(
        "/api/v1/auth/reset-password",
        json={"token": token.token, "password": "a-brand-new-password"},
    )
    assert response.status_code == status.HTTP_200_OK

    reused = client.post(
        "/api/v1/auth/reset-password",
        json={"token": token.token, "password": "another-new-password"},
    )
    assert reused.status_code == status.HTTP_400_BAD_REQUEST
    assert reused.json()["error"] == "Invalid or expired reset token"

    login = client.post(
        "/api/v1/auth/login",
        json={"email": test_user.email, "password": "a-brand-new-password"},
    )
    assert login.status_code == status.HTTP_200_OK


def test_second_reset_request_invalidates_first(client, db_session, test_user) -> None:
    client.post("/api/v1/auth/forgot-password", json={"email": test_user.email})
    client.post("/api/v1/auth/forgot-password", json={"email": test_user.email})
    tokens = (
        db_session.query(PasswordResetToken)
        .filter(PasswordResetToken.user_id == test_user.id)
        .order_by(PasswordResetToken.id)
        .all()
    )
    assert [t.used for t in tokens] == [True, False]


def test_login_is_rate_limited(client, test_user, test_password) -> None:
    for _ in range(10):
        client.post("/api/v1/auth/login", json={"email": test_user.email, "password": "bad"})
    response = client.post(
        "/api/v1/auth/login", json={"email": test_user.email, "password": test_password}
    )
    assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
