"""
Email Service
Sends password reset links through the configured mail account
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from auth_api.config import Settings
from auth_api.errors import MailDeliveryError

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending emails over SMTP"""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.smtp_server = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.sender_email = settings.EMAIL
        self.sender_password = settings.EMAIL_PASSWORD
        self.use_tls = settings.SMTP_USE_TLS

        logger.debug(
            f"Email service initialized: {self.smtp_server}:{self.smtp_port}, "
            f"sender={self.sender_email or 'NOT SET'}, "
            f"password={'set' if self.sender_password else 'NOT SET'}"
        )

    def build_reset_link(self, reset_token: str) -> str:
        # JWTs are base64url, safe to interpolate into a path
        return f"{self.settings.RESET_URL_BASE.rstrip('/')}/{reset_token}"

    def _send_smtp_email(self, to_email: str, subject: str, text_body: str) -> None:
        """Send email via SMTP (blocking)"""
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender_email
        msg["To"] = to_email
        msg.set_content(text_body)

        try:
            with smtplib.SMTP(self.smtp_server, self.smtp_port, timeout=30) as server:
                if self.use_tls:
                    server.starttls()
                server.login(self.sender_email, self.sender_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to_email}: {type(e).__name__}: {e}")
            raise MailDeliveryError(str(e)) from e

    async def send_password_reset_email(self, to_email: str, reset_token: str) -> None:
        """
        Send a password reset email containing the reset link

        Args:
            to_email: Recipient email address
            reset_token: Signed reset token embedded in the link

        Raises:
            MailDeliveryError: if the account is not configured or SMTP fails
        """
        if not self.settings.EMAIL_SERVICE_ENABLED:
            if self.settings.DEBUG:
                logger.warning(f"Email disabled - would send reset email to {to_email}")
                return
            raise MailDeliveryError("Email service not configured - set EMAIL and EMAIL_PASSWORD")

        reset_link = self.build_reset_link(reset_token)
        text_body = f"Click the link to reset your password: {reset_link}"

        await asyncio.to_thread(self._send_smtp_email, to_email, "Password Reset", text_body)
        logger.info(f"Password reset email sent to {to_email}")
