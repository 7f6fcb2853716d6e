"""Outgoing account email (verification and password reset) over SMTP."""
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from core.async_utils import run_blocking
from core.config import EmailSettings, settings
from core.exceptions import UpstreamError

logger = logging.getLogger(__name__)


VERIFICATION_SUBJECT = "Verify Your Email - Vegobolt"
RESET_SUBJECT = "Password Reset Request - Vegobolt"

VERIFICATION_HTML = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #2e7d32;">Welcome to Vegobolt, {name}!</h2>
  <p>Thanks for signing up. Please confirm your email address to activate your account.</p>
  <p><a href="{link}" style="background: #2e7d32; color: #fff; padding: 12px 24px;
     text-decoration: none; border-radius: 4px;">Verify Email</a></p>
  <p>Or open this link: <br><a href="{link}">{link}</a></p>
  <p>This link expires in {hours} hours.</p>
</div>
"""

VERIFICATION_TEXT = """\
Welcome to Vegobolt, {name}!

Please confirm your email address by opening the link below:
{link}

This link expires in {hours} hours.
"""

RESET_HTML = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #2e7d32;">Password Reset Request</h2>
  <p>Hi {name}, we received a request to reset your Vegobolt password.</p>
  <p><a href="{link}" style="background: #2e7d32; color: #fff; padding: 12px 24px;
     text-decoration: none; border-radius: 4px;">Reset Password</a></p>
  <p>Or open this link: <br><a href="{link}">{link}</a></p>
  <p>This link expires in {minutes} minutes. If you did not request a reset, ignore this email.</p>
</div>
"""

RESET_TEXT = """\
Hi {name},

We received a request to reset your Vegobolt password. Open the link below:
{link}

This link expires in {minutes} minutes. If you did not request a reset, ignore this email.
"""


class EmailService:
    """Sends account emails through the configured SMTP server.

    smtplib is blocking, so every send runs in the default thread executor.
    When EMAIL_ENABLED is false the message is logged instead of sent.
    """

    def __init__(self, config: Optional[EmailSettings] = None, base_url: Optional[str] = None):
        self.config = config or settings.email
        self.base_url = (base_url or settings.frontend_base_url).rstrip("/")

    def verification_link(self, token: str) -> str:
        return f"{self.base_url}{settings.api.api_prefix}/auth/verify-email/{token}"

    def reset_link(self, token: str) -> str:
        return f"{self.base_url}{settings.api.api_prefix}/auth/reset-password/{token}"

    async def send_verification_email(self, to: str, name: str, token: str) -> None:
        """
        Send the email verification link.

        Raises:
            UpstreamError: If the SMTP exchange fails
        """
        link = self.verification_link(token)
        hours = settings.security.verification_token_hours
        await self.send(
            to,
            VERIFICATION_SUBJECT,
            html=VERIFICATION_HTML.format(name=name, link=link, hours=hours),
            text=VERIFICATION_TEXT.format(name=name, link=link, hours=hours),
        )

    async def send_password_reset_email(self, to: str, name: str, token: str) -> None:
        """
        Send the password reset link.

        Raises:
            UpstreamError: If the SMTP exchange fails
        """
        link = self.reset_link(token)
        minutes = settings.security.reset_token_minutes
        await self.send(
            to,
            RESET_SUBJECT,
            html=RESET_HTML.format(name=name, link=link, minutes=minutes),
            text=RESET_TEXT.format(name=name, link=link, minutes=minutes),
        )

    async def send(self, to: str, subject: str, *, html: str, text: str) -> None:
        if not self.config.enabled:
            logger.info(f"Email disabled; not sending '{subject}' to {to}:\n{text}")
            return

        message = self._build_message(to, subject, html, text)
        try:
            await run_blocking(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send '{subject}' to {to}: {e}")
            raise UpstreamError("Failed to send email", error=str(e))

        logger.info(f"Sent '{subject}' to {to}")

    def _build_message(self, to: str, subject: str, html: str, text: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["From"] = self.config.smtp_from
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(text, "plain"))
        msg.attach(MIMEText(html, "html"))
        return msg

    def _deliver(self, message: MIMEMultipart) -> None:
        config = self.config
        if config.smtp_port == 465:
            server = smtplib.SMTP_SSL(config.smtp_host, config.smtp_port, timeout=config.timeout)
        else:
            server = smtplib.SMTP(config.smtp_host, config.smtp_port, timeout=config.timeout)
        try:
            if config.smtp_tls and config.smtp_port != 465:
                server.starttls()
            if config.smtp_user and config.smtp_password:
                server.login(config.smtp_user, config.smtp_password)
            server.send_message(message)
        finally:
            server.quit()
