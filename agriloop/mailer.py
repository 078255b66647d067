import logging
import smtplib
from email.message import EmailMessage
from html import escape
from typing import Optional

from . import config
from .errors import MailDeliveryError

logger = logging.getLogger(__name__)


class SmtpMailer:
    """Sends HTML mail through an SMTP relay using STARTTLS."""

    def __init__(self, host: str, port: int, user: Optional[str], password: Optional[str], sender: Optional[str] = None):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender or user

    def send(self, to: str, subject: str, html: str) -> None:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(html, subtype="html")
        try:
            with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
                smtp.starttls()
                if self.user and self.password:
                    smtp.login(self.user, self.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.exception("Failed to send mail to %s", to)
            raise MailDeliveryError("Error during signup. Please try again.") from e
        logger.info("Sent '%s' to %s", subject, to)


class LogMailer:
    """Development mailer: writes the message to the log instead of sending it."""

    def send(self, to: str, subject: str, html: str) -> None:
        logger.warning("SMTP_HOST not configured; mail to %s not sent. Subject: %s\n%s", to, subject, html)


def mailer_from_config():
    if config.SMTP_HOST:
        return SmtpMailer(config.SMTP_HOST, config.SMTP_PORT, config.EMAIL_USER, config.EMAIL_PASS)
    return LogMailer()


def verification_link(token: str) -> str:
    return f"{config.APP_BASE_URL.rstrip('/')}/api/verify-email?token={token}"


def verification_email(full_name: str, link: str) -> str:
    name = escape(full_name)
    link = escape(link, quote=True)
    return f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2>Welcome to AgriLoop, {name}!</h2>
  <p>Thank you for signing up. Please verify your email address to complete your registration.</p>
  <p><a href="{link}" style="background-color: #4CAF50; color: white; padding: 12px 24px; text-decoration: none; border-radius: 4px; display: inline-block;">Verify Email Address</a></p>
  <p>If the button doesn't work, you can also click this link:</p>
  <p><a href="{link}">{link}</a></p>
  <p>If you didn't create this account, please ignore this email.</p>
</div>
"""
