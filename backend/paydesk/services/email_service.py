"""
Email Service — Sends receipt PDFs over SMTP to the customer and the merchant.
"""
import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Iterable

from paydesk.config import get_settings
from paydesk.utils.validators import validate_email

logger = logging.getLogger(__name__)


class EmailService:
    """SMTP delivery. One attempt per call, no retry."""

    def __init__(self, settings=None):
        self.settings = settings or get_settings()

    @property
    def configured(self) -> bool:
        return bool(self.settings.SMTP_HOST and self.settings.SMTP_USER)

    def build_message(
        self, recipients: Iterable[str], subject: str, body: str,
        attachment: bytes, filename: str,
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.settings.EMAILS_FROM_EMAIL or self.settings.SMTP_USER or self.settings.MERCHANT_EMAIL
        msg["To"] = ", ".join(recipients)
        msg.set_content(body)
        msg.add_attachment(attachment, maintype="application", subtype="pdf", filename=filename)
        return msg

    def send(
        self, recipients: list[str], subject: str, body: str,
        attachment: bytes, filename: str,
    ) -> tuple[bool, str]:
        """Send one message to all valid recipients.

        Returns:
            (delivered, message) — message is user-facing.
        """
        valid = [r for r in recipients if validate_email(r)]
        if not valid:
            logger.error("No valid recipients in %s", recipients)
            return False, "No valid email recipients"

        if not self.configured:
            logger.warning("SMTP not configured, receipt email to %s not sent", ", ".join(valid))
            return False, "Email delivery is not configured"

        msg = self.build_message(valid, subject, body, attachment, filename)
        try:
            if self.settings.SMTP_PORT == 465:
                context = ssl.create_default_context()
                with smtplib.SMTP_SSL(self.settings.SMTP_HOST, self.settings.SMTP_PORT, context=context) as server:
                    server.login(self.settings.SMTP_USER, self.settings.SMTP_PASSWORD)
                    server.send_message(msg)
            else:
                with smtplib.SMTP(self.settings.SMTP_HOST, self.settings.SMTP_PORT) as server:
                    server.starttls()
                    server.login(self.settings.SMTP_USER, self.settings.SMTP_PASSWORD)
                    server.send_message(msg)
        except smtplib.SMTPAuthenticationError as e:
            logger.error("SMTP authentication failed: %s", e)
            return False, "Email server rejected our credentials"
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP error sending to %s: %s", ", ".join(valid), e)
            return False, f"Failed to send email: {e}"

        logger.info("Receipt email sent to %s", ", ".join(valid))
        return True, f"Receipt emailed to {', '.join(valid)}"
