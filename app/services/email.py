"""Utilities for sending transactional emails."""

from __future__ import annotations

from email.message import EmailMessage
import smtplib

from app.core.config import settings


class EmailDeliveryError(Exception):
    """Raised when an email could not be delivered."""


def build_login_code_email(recipient: str, code: str) -> EmailMessage:
    """Construct the one-time password email message."""

    message = EmailMessage()
    message["Subject"] = "Your one time password"
    message["From"] = settings.email_sender
    message["To"] = recipient
    message.set_content(f"Your one time password: {code}")
    return message


def send_email(message: EmailMessage) -> None:
    """Send an email using the configured SMTP server."""

    host = settings.smtp_host
    port = settings.smtp_port
    username = settings.smtp_username or None
    password = settings.smtp_password or None
    use_tls = settings.smtp_use_tls

    try:
        with smtplib.SMTP(host=host, port=port) as smtp:
            if use_tls:
                smtp.starttls()
            if username and password:
                smtp.login(username, password)
            smtp.send_message(message)
    except (smtplib.SMTPException, OSError) as exc:
        raise EmailDeliveryError("Failed to send email") from exc


def send_login_code_email(recipient: str, code: str) -> None:
    """High-level helper for dispatching one-time login codes."""

    message = build_login_code_email(recipient, code)
    send_email(message)


__all__ = [
    "EmailDeliveryError",
    "build_login_code_email",
    "send_email",
    "send_login_code_email",
]
