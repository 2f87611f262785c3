# essence/core/email_client.py
"""
Outgoing order mail over SMTP.

Connection settings are the SMTP_* fields of core.config.Settings:
SMTP_USE_SSL opens an implicit-TLS connection (port 465), otherwise a
plain connection is upgraded with STARTTLS when SMTP_USE_TLS is set.
"""
import logging
import smtplib
from email.message import EmailMessage

from essence.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


def is_configured(settings: Settings | None = None) -> bool:
    settings = settings or get_settings()
    return bool(settings.SMTP_HOST and settings.SMTP_USERNAME and settings.SMTP_PASSWORD)


def build_message(
    settings: Settings,
    to_email: str,
    subject: str,
    text_body: str,
    html_body: str | None = None,
) -> EmailMessage:
    sender = settings.SMTP_FROM_EMAIL or settings.SMTP_USERNAME
    msg = EmailMessage()
    msg["From"] = f"{settings.SMTP_FROM_NAME} <{sender}>"
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(text_body)
    if html_body:
        msg.add_alternative(html_body, subtype="html")
    return msg


def _connect(settings: Settings) -> smtplib.SMTP:
    if settings.SMTP_USE_SSL:
        return smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30)

    server = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30)
    if settings.SMTP_USE_TLS:
        server.starttls()
    return server


def send_email(
    to_email: str,
    subject: str,
    text_body: str,
    html_body: str | None = None,
) -> None:
    """
    Send one message to a single recipient.

    Raises:
        RuntimeError: SMTP host or credentials are not configured.
        smtplib.SMTPException / OSError: connection, login or send failed.
    """
    settings = get_settings()
    if not is_configured(settings):
        raise RuntimeError("SMTP_HOST, SMTP_USERNAME and SMTP_PASSWORD must be set")

    msg = build_message(settings, to_email, subject, text_body, html_body)

    server = _connect(settings)
    try:
        server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        server.send_message(msg)
    finally:
        try:
            server.quit()
        except smtplib.SMTPException:
            logger.debug("SMTP quit failed after sending to %s", to_email, exc_info=True)
