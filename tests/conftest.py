# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-pytest-only")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CRON_SECRET", "test-cron-secret")

from adages_society.core.rate_limit import get_rate_limiter
from adages_society.core.security import create_access_token, hash_password
from adages_society.db.session import Base
from adages_society.db.session import get_db as app_get_session
from adages_society.main import app as fastapi_app
from adages_society.models import Adage, User
from adages_society.services.email import EmailService, set_email_service

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "correct-horse-battery"

_USER_COUNTER = count(1)
_PASSWORD_HASH = hash_password(TEST_PASSWORD)


class RecordingEmailService(EmailService):
    """Captures outgoing mail instead of talking to an SMTP server."""

    def __init__(self) -> None:
        super().__init__()
        self.sent: list[dict[str, str]] = []

    @property
    def enabled(self) -> bool:
        return True

    def send(self, to: str, subject: str, html: str, text: str | None = None) -> bool:
        self.sent.append({"to": to, "subject": subject, "html": html})
        return True


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Services commit, so every test starts from empty tables.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> Iterator[None]:
    get_rate_limiter().reset()
    yield
    get_rate_limiter().reset()


@pytest.fixture(autouse=True)
def outbox() -> Iterator[RecordingEmailService]:
    """Route all mail to an in-memory outbox."""
    service = RecordingEmailService()
    set_email_service(service)
    try:
        yield service
    finally:
        set_email_service(None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Factory for persisted users; verified members by default."""

    def _make(role: str = "user", *, verified: bool = True, **fields: Any) -> User:
        n = next(_USER_COUNTER)
        user = User(
            email=fields.pop("email", f"member{n}@example.com"),
            username=fields.pop("username", f"member{n}"),
            display_name=fields.pop("display_name", f"Member {n}"),
            password_hash=_PASSWORD_HASH,
            email_verified=verified,
            role=role,
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(user.id, {"role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    return make_user()


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    return make_user()


@pytest.fixture()
def admin_user(make_user: Callable[..., User]) -> User:
    return make_user("admin")


@pytest.fixture()
def moderator_user(make_user: Callable[..., User]) -> User:
    return make_user("moderator")


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return auth_headers(test_user)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    return auth_headers(other_user)


@pytest.fixture()
def admin_token(admin_user: User) -> dict[str, str]:
    return auth_headers(admin_user)


@pytest.fixture()
def moderator_token(moderator_user: User) -> dict[str, str]:
    return auth_headers(moderator_user)


@pytest.fixture()
def make_adage(db_session: Session) -> Callable[..., Adage]:
    def _make(text: str = "A stitch in time saves nine", **fields: Any) -> Adage:
        adage = Adage(
            adage=text,
            definition=fields.pop("definition", "Acting early prevents larger problems."),
            tags=fields.pop("tags", ["time", "thrift"]),
            **fields,
        )
        db_session.add(adage)
        db_session.commit()
        db_session.refresh(adage)
        return adage

    return _make


@pytest.fixture()
def adage(make_adage: Callable[..., Adage]) -> Adage:
    return make_adage()


@pytest.fixture()
def headers_for() -> Callable[[User], dict[str, str]]:
    """Build bearer headers for any user created inside a test."""
    return auth_headers


@pytest.fixture()
def test_password() -> str:
    """Plain-text password shared by every user from `make_user`."""
    return TEST_PASSWORD
