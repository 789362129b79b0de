# tests/services/test_mailing.py
"""Tests for mailing list subscriptions and the weekly digest."""

from adages_society.services.email import EmailError, EmailService, set_email_service
from adages_society.services.mailing import (
    is_subscribed,
    send_weekly_digest,
    subscribe,
    unsubscribe,
    weekly_recipients,
)


class FlakyEmailService(EmailService):
    """Fails for one address and accepts the rest."""

    def __init__(self, failing: str) -> None:
        super().__init__()
        self.failing = failing
        self.delivered: list[str] = []

    def send(self, to, subject, html, text=None) -> bool:
        if to == self.failing:
            raise EmailError(f"rejected {to}")
        self.delivered.append(to)
        return True


def test_subscribe_and_resubscribe(db_session) -> None:
    entry, changed = subscribe(db_session, "fan@example.com", first_name="Ben", source="footer")
    assert changed is True
    assert (entry.first_name, entry.source) == ("Ben", "footer")

    again, changed = subscribe(db_session, "fan@example.com")
    assert changed is False
    assert again.id == entry.id

    assert unsubscribe(db_session, "fan@example.com") is True
    assert unsubscribe(db_session, "fan@example.com") is False
    assert not is_subscribed(db_session, "fan@example.com")

    revived, changed = subscribe(db_session, "fan@example.com", last_name="Franklin")
    assert changed is True
    assert revived.id == entry.id
    assert revived.unsubscribed_at is None
    assert (revived.first_name, revived.last_name) == ("Ben", "Franklin")


def test_unsubscribe_unknown_address(db_session) -> None:
    assert unsubscribe(db_session, "nobody@example.com") is False


def test_weekly_recipients_are_deduplicated(db_session, make_user) -> None:
    make_user(email="Member@Example.com")
    make_user(email="quiet@example.com", email_weekly_adage=False)
    make_user(email="unverified@example.com", verified=False)
    for address, confirmed in (
        ("member@example.com", True),
        ("fan@example.com", True),
        ("pending@example.com", False),
    ):
        entry, _ = subscribe(db_session, address)
        entry.confirmed = confirmed
    db_session.commit()

    assert sorted(weekly_recipients(db_session)) == ["Member@Example.com", "fan@example.com"]


def test_digest_counts_delivery_failures(db_session, make_user, adage) -> None:
    make_user(email="ok@example.com")
    make_user(email="bounce@example.com")
    service = FlakyEmailService(failing="bounce@example.com")
    set_email_service(service)

    result = send_weekly_digest(db_session, adage)

    assert (result.sent, result.errors, result.recipients) == (1, 1, 2)
    assert service.delivered == ["ok@example.com"]
