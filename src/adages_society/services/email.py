"""Outbound email over SMTP plus the HTML templates the site sends.

When SMTP credentials are not configured, sending is skipped with a warning
and `EmailService.send` returns False.
"""

from __future__ import annotations

import logging
import re
import smtplib
from collections.abc import Callable
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

from adages_society.core.settings import Settings, settings

logger = logging.getLogger(__name__)

SmtpFactory = Callable[[str, int, float], smtplib.SMTP]

_BRAND = "American Adages Society"
_TAGLINE = "Big Wisdom, small sentences."


class EmailError(Exception):
    """Raised when the mail server rejects or fails to accept a message."""


class EmailService:
    """Thin wrapper around `smtplib` using the configured SMTP relay."""

    def __init__(
        self,
        config: Settings | None = None,
        smtp_factory: SmtpFactory | None = None,
    ) -> None:
        self.config = config or settings
        self._smtp_factory = smtp_factory or (
            lambda host, port, timeout: smtplib.SMTP(host, port, timeout=timeout)
        )

    @property
    def enabled(self) -> bool:
        return self.config.smtp_configured

    def build_message(
        self, to: str, subject: str, html: str, text: str | None = None
    ) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["From"] = f'"{_BRAND}" <{self.config.sender_address}>'
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(text or _strip_tags(html), "plain", "utf-8"))
        msg.attach(MIMEText(html, "html", "utf-8"))
        return msg

    def send(self, to: str, subject: str, html: str, text: str | None = None) -> bool:
        """Send one message.

        Returns:
            True if the message was handed to the server, False if SMTP is not configured

        Raises:
            EmailError: If the SMTP conversation fails
        """
        if not self.enabled:
            logger.warning("SMTP not configured; skipping email %r to %s", subject, to)
            return False

        msg = self.build_message(to, subject, html, text)
        try:
            server = self._smtp_factory(
                self.config.smtp_host or "",
                self.config.smtp_port,
                self.config.smtp_timeout_seconds,
            )
            try:
                if self.config.smtp_use_tls:
                    server.starttls()
                server.login(self.config.smtp_user or "", self.config.smtp_password or "")
                server.send_message(msg)
            finally:
                server.quit()
        except (smtplib.SMTPException, OSError) as exc:
            raise EmailError(f"Failed to send email to {to}: {exc}") from exc

        logger.info("Sent email %r to %s", subject, to)
        return True


def _strip_tags(html: str) -> str:
    text = re.sub(r"<(br|/p|/div|/h[1-6]|/li)\s*/?>", "\n", html, flags=re.IGNORECASE)
    text = re.sub(r"<[^>]+>", "", text)
    return re.sub(r"\n{3,}", "\n\n", text).strip()


def _layout(heading: str, body_html: str) -> str:
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        '<div style="background-color: #8B7355; color: #F5F1E8; padding: 30px 20px; '
        'text-align: center;">'
        f'<h1 style="margin: 0; font-size: 28px;">{_BRAND}</h1>'
        f'<p style="margin: 5px 0 0 0; font-style: italic;">{_TAGLINE}</p>'
        "</div>"
        '<div style="padding: 30px; background-color: #ffffff;">'
        f'<h2 style="color: #2C2C2C;">{escape(heading)}</h2>'
        f"{body_html}"
        "</div>"
        '<div style="background-color: #F5F1E8; padding: 20px; text-align: center; '
        'color: #666; font-size: 12px;">'
        "<p>This is an automated message. Please do not reply.</p>"
        "</div></div>"
    )


def _paragraph(text: str) -> str:
    return f'<p style="color: #666; line-height: 1.6;">{escape(text)}</p>'


def _button(url: str, label: str) -> str:
    return (
        '<div style="text-align: center; margin: 30px 0;">'
        f'<a href="{escape(url, quote=True)}" style="display: inline-block; '
        "background-color: #8B7355; color: #F5F1E8; padding: 12px 30px; "
        f'text-decoration: none; border-radius: 5px;">{escape(label)}</a></div>'
    )


def render_password_reset(reset_url: str) -> str:
    return _layout(
        "Reset your password",
        _paragraph("We received a request to reset your password. The link expires in one hour.")
        + _button(reset_url, "Reset Password")
        + _paragraph("If you did not request this, you can safely ignore this email."),
    )


def render_email_verification(verify_url: str) -> str:
    return _layout(
        "Confirm your email address",
        _paragraph("Welcome! Please confirm your email address to start contributing.")
        + _button(verify_url, "Verify Email"),
    )


def render_account_deleted(restore_url: str) -> str:
    return _layout(
        "Account Deletion Confirmation",
        _paragraph("Your account has been successfully deleted as requested.")
        + _paragraph(
            "Your account can be restored within 30 days of deletion. After this period "
            "the deletion becomes permanent."
        )
        + _button(restore_url, "Request Account Restoration"),
    )


def render_weekly_adage(adage: str, definition: str, adage_url: str) -> str:
    return _layout(
        "This Week's Featured Adage",
        f'<blockquote style="font-size: 20px; font-style: italic;">&ldquo;{escape(adage)}&rdquo;'
        "</blockquote>"
        + _paragraph(definition)
        + _button(adage_url, "Read More"),
    )


def render_admin_alert(subject: str, message: str) -> str:
    return _layout(subject, "".join(_paragraph(line) for line in message.splitlines() if line))


def render_message_reply(name: str, original_subject: str | None, reply_text: str) -> str:
    body = _paragraph(f"Hi {name},")
    if original_subject:
        body += _paragraph(f"Thank you for your message regarding \"{original_subject}\".")
    body += "".join(_paragraph(line) for line in reply_text.splitlines() if line.strip())
    return _layout("Response to Your Message", body)


_email_service: EmailService | None = None


def get_email_service() -> EmailService:
    """Return the shared email service."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service


def set_email_service(service: EmailService | None) -> None:
    """Replace the shared email service (used by tests and scripts)."""
    global _email_service
    _email_service = service


__all__ = [
    "EmailError",
    "EmailService",
    "get_email_service",
    "render_account_deleted",
    "render_admin_alert",
    "render_email_verification",
    "render_password_reset",
    "render_weekly_adage",
    "set_email_service",
]
