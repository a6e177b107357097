# =============================================================================
# Password reset email delivery
# =============================================================================

import smtplib

import pytest

from app.config import Settings
from app.services.email_service import EmailService


@pytest.fixture
def configured():
    return Settings(smtp_username="mailer", smtp_password="secret", from_email="noreply@quizroom.test")


@pytest.fixture(autouse=True)
def no_backoff_sleep(monkeypatch):
    async def instant(_delay):
        return None

    monkeypatch.setattr("app.core.utils.asyncio.sleep", instant)


class TestPasswordResetEmail:
    @pytest.mark.asyncio
    async def test_unconfigured_smtp_reports_failure(self):
        service = EmailService(Settings(smtp_username="", smtp_password="", from_email=""))

        result = await service.send_password_reset_email("ada@example.com", "http://x/?resetToken=t")

        assert result.success is False
        assert result.message == "Email is not configured"

    @pytest.mark.asyncio
    async def test_message_contains_link(self, configured, monkeypatch):
        sent = []
        service = EmailService(configured)
        monkeypatch.setattr(service, "_send_blocking", lambda msg: sent.append(msg))

        result = await service.send_password_reset_email("ada@example.com", "http://x/?resetToken=abc")

        assert result.success is True
        message = sent[0]
        assert message["To"] == "ada@example.com"
        assert message["Message-ID"].endswith("@quizroom.test>")
        html = message.get_payload()[1].get_payload(decode=True).decode()
        assert "http://x/?resetToken=abc" in html

    @pytest.mark.asyncio
    async def test_smtp_errors_are_retried_then_reported(self, configured, monkeypatch):
        attempts = []
        service = EmailService(configured)

        def failing(msg):
            attempts.append(msg)
            raise smtplib.SMTPServerDisconnected("gone")

        monkeypatch.setattr(service, "_send_blocking", failing)

        result = await service.send_password_reset_email("ada@example.com", "http://x")

        assert result.success is False
        assert "gone" in result.error_details
        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_transient_failure_recovers(self, configured, monkeypatch):
        attempts = []
        service = EmailService(configured)

        def flaky(msg):
            attempts.append(msg)
            if len(attempts) == 1:
                raise smtplib.SMTPServerDisconnected("blip")

        monkeypatch.setattr(service, "_send_blocking", flaky)

        result = await service.send_password_reset_email("ada@example.com", "http://x")

        assert result.success is True
        assert len(attempts) == 2
