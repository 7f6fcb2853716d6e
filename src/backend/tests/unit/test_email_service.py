"""
Unit tests for EmailService.

SMTP is never contacted: delivery is patched or the service runs disabled.
"""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from api.services.email_service import RESET_SUBJECT, VERIFICATION_SUBJECT, EmailService
from core.config import EmailSettings
from core.exceptions import UpstreamError

TOKEN = "a" * 64


@pytest.fixture
def enabled_service():
    config = EmailSettings(
        enabled=True,
        smtp_host="smtp.test",
        smtp_port=587,
        smtp_user="mailer",
        smtp_password="secret",
    )
    return EmailService(config, base_url="https://api.vegobolt.com/")


class TestLinks:
    def test_links_point_at_backend_pages(self, enabled_service):
        assert enabled_service.verification_link(TOKEN) == (
            f"https://api.vegobolt.com/api/auth/verify-email/{TOKEN}"
        )
        assert enabled_service.reset_link(TOKEN) == (
            f"https://api.vegobolt.com/api/auth/reset-password/{TOKEN}"
        )


class TestSend:
    """Tests for building and delivering messages."""

    @pytest.mark.asyncio
    async def test_disabled_service_logs_instead_of_sending(self):
        service = EmailService(EmailSettings(enabled=False))

        with patch.object(EmailService, "_deliver") as deliver:
            await service.send_verification_email("operator@vegobolt.com", "Maria", TOKEN)

        deliver.assert_not_called()

    @pytest.mark.asyncio
    async def test_verification_message(self, enabled_service):
        with patch.object(EmailService, "_deliver") as deliver:
            await enabled_service.send_verification_email("operator@vegobolt.com", "Maria", TOKEN)

        message = deliver.call_args.args[0]
        assert message["To"] == "operator@vegobolt.com"
        assert message["Subject"] == VERIFICATION_SUBJECT
        text_part, html_part = message.get_payload()
        assert enabled_service.verification_link(TOKEN) in text_part.get_payload()
        assert "Welcome to Vegobolt, Maria!" in html_part.get_payload()

    @pytest.mark.asyncio
    async def test_reset_message(self, enabled_service):
        with patch.object(EmailService, "_deliver") as deliver:
            await enabled_service.send_password_reset_email("operator@vegobolt.com", "Maria", TOKEN)

        message = deliver.call_args.args[0]
        assert message["Subject"] == RESET_SUBJECT
        text_part, _ = message.get_payload()
        assert "60 minutes" in text_part.get_payload()

    @pytest.mark.asyncio
    async def test_smtp_failure_raises_upstream_error(self, enabled_service):
        with patch.object(
            EmailService, "_deliver", side_effect=smtplib.SMTPAuthenticationError(535, b"bad creds")
        ):
            with pytest.raises(UpstreamError) as exc_info:
                await enabled_service.send_verification_email("operator@vegobolt.com", "Maria", TOKEN)

        assert exc_info.value.message == "Failed to send email"

    def test_deliver_uses_starttls_and_login(self, enabled_service):
        server = MagicMock()
        with patch("api.services.email_service.smtplib.SMTP", return_value=server) as smtp:
            enabled_service._deliver(MagicMock())

        smtp.assert_called_once_with("smtp.test", 587, timeout=10)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "secret")
        server.send_message.assert_called_once()
        server.quit.assert_called_once()
