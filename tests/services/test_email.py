# tests/services/test_email.py
"""Tests for the SMTP email service and its templates."""

import smtplib

import pytest

from adages_society.core.settings import settings
from adages_society.services.email import (
    EmailError,
    EmailService,
    render_account_deleted,
    render_admin_alert,
    render_password_reset,
    render_weekly_adage,
)


class FakeSMTP:
    def __init__(self, fail_on_send: bool = False) -> None:
        self.calls: list[str] = []
        self.messages = []
        self.fail_on_send = fail_on_send

    def starttls(self) -> None:
        self.calls.append("starttls")

    def login(self, user: str, password: str) -> None:
        self.calls.append(f"login:{user}")

    def send_message(self, msg) -> None:
        if self.fail_on_send:
            raise smtplib.SMTPRecipientsRefused({msg["To"]: (550, b"no such user")})
        self.calls.append("send")
        self.messages.append(msg)

    def quit(self) -> None:
        self.calls.append("quit")


def _config(**overrides):
    values = {
        "smtp_host": "smtp.example.com",
        "smtp_user": "mailer@example.com",
        "smtp_password": "hunter2",
        "smtp_use_tls": True,
        "email_from": "hello@adages.example",
    }
    values.update(overrides)
    return settings.model_copy(update=values)


def test_send_is_skipped_without_credentials() -> None:
    connections = []
    service = EmailService(
        config=_config(smtp_host=None),
        smtp_factory=lambda *args: connections.append(args),
    )
    assert service.enabled is False
    assert service.send("a@example.com", "Hi", "<p>Hi</p>") is False
    assert connections == []


def test_send_runs_full_smtp_conversation() -> None:
    smtp = FakeSMTP()
    opened = []

    def factory(host, port, timeout):
        opened.append((host, port))
        return smtp

    service = EmailService(config=_config(), smtp_factory=factory)
    assert service.send("reader@example.com", "Welcome", "<p>Hello <b>reader</b></p>") is True

    assert opened == [("smtp.example.com", settings.smtp_port)]
    assert smtp.calls == ["starttls", "login:mailer@example.com", "send", "quit"]
    [msg] = smtp.messages
    assert msg["To"] == "reader@example.com"
    assert msg["From"] == '"American Adages Society" <hello@adages.example>'


def test_tls_can_be_disabled() -> None:
    smtp = FakeSMTP()
    service = EmailService(config=_config(smtp_use_tls=False), smtp_factory=lambda *a: smtp)
    service.send("reader@example.com", "Welcome", "<p>Hi</p>")
    assert "starttls" not in smtp.calls


def test_smtp_failure_raises_email_error_and_quits() -> None:
    smtp = FakeSMTP(fail_on_send=True)
    service = EmailService(config=_config(), smtp_factory=lambda *a: smtp)
    with pytest.raises(EmailError):
        service.send("ghost@example.com", "Hi", "<p>Hi</p>")
    assert smtp.calls[-1] == "quit"


def test_connection_error_raises_email_error() -> None:
    def refuse(*args):
        raise ConnectionRefusedError("connection refused")

    service = EmailService(config=_config(), smtp_factory=refuse)
    with pytest.raises(EmailError):
        service.send("reader@example.com", "Hi", "<p>Hi</p>")


def test_message_has_plain_text_alternative() -> None:
    service = EmailService(config=_config())
    msg = service.build_message("reader@example.com", "Subject", "<p>First</p><p>Second</p>")
    plain, html = msg.get_payload()
    assert plain.get_content_type() == "text/plain"
    assert html.get_content_type() == "text/html"
    assert "First" in plain.get_payload(decode=True).decode()
    assert "<p>" not in plain.get_payload(decode=True).decode()


def test_templates_escape_user_content() -> None:
    html = render_weekly_adage("Look <before> you leap", "Be careful.", "https://x/adages/1")
    assert "Look &lt;before&gt; you leap" in html
    assert "https://x/adages/1" in html

    assert "Reset Password" in render_password_reset("https://x/reset?token=abc")
    assert "Request Account Restoration" in render_account_deleted("https://x/restore")

    alert = render_admin_alert("New report", "Line one\nLine two")
    assert alert.count("<p style") >= 2
