"""
Outbound email over SMTP.
Sending is blocking; async callers run it through the threadpool.
"""

from email.message import EmailMessage
from rentals.config import Settings
import smtplib
import logging

logger = logging.getLogger(__name__)


class EmailSendError(Exception):
    """Raised when the SMTP server rejects or cannot accept a message."""


def send_email(settings: Settings, to: str, subject: str, body: str) -> None:
    """
    Send a plain text email.

    Raises:
        EmailSendError: If SMTP is not configured or delivery fails
    """
    if not settings.smtp_configured:
        raise EmailSendError("SMTP is not configured")

    message = EmailMessage()
    message["From"] = settings.mail_from
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body)

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=15) as smtp:
            if settings.smtp_use_tls:
                smtp.starttls()
            if settings.smtp_username:
                smtp.login(settings.smtp_username, settings.smtp_password or "")
            smtp.send_message(message)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send email to {to}: {e}")
        raise EmailSendError(str(e)) from e

    logger.info(f"Sent email '{subject}' to {to}")
