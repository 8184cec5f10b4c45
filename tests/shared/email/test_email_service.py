"""Tests for the SMTP email service and the background reset notifier."""

import logging
import smtplib
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi import BackgroundTasks

from src.features.auth.notifications import BackgroundEmailNotifier
from src.shared.email.email_service import EmailService, redact_email


class FakeSMTP:
    """Stands in for smtplib.SMTP and records what would be sent."""

    instances: list["FakeSMTP"] = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.started_tls = False
        self.logged_in = None
        self.messages = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def starttls(self, context=None):
        self.started_tls = True

    def login(self, user, password):
        self.logged_in = (user, password)

    def sendmail(self, from_addr, to_addr, message):
        self.messages.append((from_addr, to_addr, message))


class FailingSMTP(FakeSMTP):
    def sendmail(self, from_addr, to_addr, message):
        raise smtplib.SMTPRecipientsRefused({to_addr: (550, b"no such user")})


@pytest.fixture
def smtp_service() -> EmailService:
    return EmailService(
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_user="mailer",
        smtp_password="hunter2",
        from_email="noreply@example.com",
        frontend_url="https://portfolio.example.com/",
    )


@pytest.fixture(autouse=True)
def reset_fake_smtp():
    FakeSMTP.instances = []
    yield


class TestEmailService:
    def test_reset_url_carries_token(self, smtp_service):
        url = smtp_service.build_reset_url("abc123")

        parsed = urlparse(url)
        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == "https://portfolio.example.com/reset-password"
        assert parse_qs(parsed.query) == {"token": ["abc123"]}

    def test_unconfigured_service_logs_instead_of_sending(self, monkeypatch, caplog):
        monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
        service = EmailService()

        with caplog.at_level(logging.INFO, logger="src.shared.email.email_service"):
            assert service.send_password_reset_email("alice@example.com", "abc123") is True

        assert not service.is_configured
        assert FakeSMTP.instances == []
        assert "al***@example.com" in caplog.text
        assert "abc123" not in caplog.text

    def test_sends_reset_email_over_starttls(self, monkeypatch, smtp_service):
        monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)

        assert smtp_service.send_password_reset_email("alice@example.com", "abc123") is True

        (server,) = FakeSMTP.instances
        assert (server.host, server.port) == ("smtp.example.com", 587)
        assert server.started_tls
        assert server.logged_in == ("mailer", "hunter2")
        from_addr, to_addr, message = server.messages[0]
        assert from_addr == "noreply@example.com"
        assert to_addr == "alice@example.com"
        assert "Password Reset Request" in message

    def test_delivery_failure_returns_false(self, monkeypatch, smtp_service):
        monkeypatch.setattr(smtplib, "SMTP", FailingSMTP)
        assert smtp_service.send_password_reset_email("alice@example.com", "abc123") is False

    def test_connection_failure_returns_false(self, monkeypatch, smtp_service):
        def refuse(*args, **kwargs):
            raise ConnectionRefusedError("connection refused")

        monkeypatch.setattr(smtplib, "SMTP", refuse)
        assert smtp_service.send_password_reset_email("alice@example.com", "abc123") is False


class TestRedactEmail:
    @pytest.mark.parametrize(
        ("email", "expected"),
        [("alice@example.com", "al***@example.com"), ("a@x.com", "a***@x.com"), ("not-an-email", "redacted")],
    )
    def test_redact(self, email, expected):
        assert redact_email(email) == expected


class TestBackgroundEmailNotifier:
    async def test_queues_reset_email(self, email_service, make_user):
        user = await make_user(email="a@x.com")
        tasks = BackgroundTasks()

        await BackgroundEmailNotifier(email_service, tasks).send_password_reset_email(user, "abc123")

        assert email_service.sent == []
        await tasks()
        assert email_service.sent == [("a@x.com", "abc123")]
