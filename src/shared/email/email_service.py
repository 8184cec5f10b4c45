"""Transactional email over SMTP."""

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from urllib.parse import urlencode

from src.config.settings import settings

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 30


def redact_email(email: str) -> str:
    """Redact an email address for logging."""
    if "@" not in email:
        return "redacted"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


class EmailService:
    """Sends transactional emails.

    When no SMTP host or sender is configured (development), emails are
    logged instead of sent. Delivery failures are logged and reported as
    ``False``; they never propagate.
    """

    def __init__(
        self,
        *,
        smtp_host: str | None = None,
        smtp_port: int = 587,
        smtp_user: str | None = None,
        smtp_password: str | None = None,
        smtp_use_tls: bool = True,
        from_email: str | None = None,
        from_name: str = "Portfolio Website",
        frontend_url: str = "http://localhost:3030",
        reset_token_ttl_minutes: int = 60,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.smtp_use_tls = smtp_use_tls
        self.from_email = from_email or smtp_user
        self.from_name = from_name
        self.frontend_url = frontend_url.rstrip("/")
        self.reset_token_ttl_minutes = reset_token_ttl_minutes

    @classmethod
    def from_settings(cls) -> "EmailService":
        return cls(
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            smtp_user=settings.smtp_user,
            smtp_password=settings.smtp_password,
            smtp_use_tls=settings.smtp_use_tls,
            from_email=settings.email_from,
            from_name=settings.email_from_name,
            frontend_url=settings.frontend_url,
            reset_token_ttl_minutes=settings.password_reset_expire_minutes,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.smtp_host and self.from_email)

    def build_reset_url(self, token: str) -> str:
        return f"{self.frontend_url}/reset-password?{urlencode({'token': token})}"

    def send_email(self, to_email: str, subject: str, html_body: str, text_body: str | None = None) -> bool:
        """Send an email via SMTP.

        Returns:
            True if sent (or logged in development mode), False otherwise

        """
        if not self.is_configured:
            logger.info(f"Email not sent (SMTP not configured): to={redact_email(to_email)} subject={subject!r}")
            return True

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_email
        if text_body:
            msg.attach(MIMEText(text_body, "plain"))
        msg.attach(MIMEText(html_body, "html"))

        context = ssl.create_default_context()
        try:
            if self.smtp_use_tls:
                with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=SMTP_TIMEOUT_SECONDS) as server:
                    server.starttls(context=context)
                    if self.smtp_user and self.smtp_password:
                        server.login(self.smtp_user, self.smtp_password)
                    server.sendmail(self.from_email, to_email, msg.as_string())
            else:
                with smtplib.SMTP_SSL(
                    self.smtp_host, self.smtp_port, context=context, timeout=SMTP_TIMEOUT_SECONDS
                ) as server:
                    if self.smtp_user and self.smtp_password:
                        server.login(self.smtp_user, self.smtp_password)
                    server.sendmail(self.from_email, to_email, msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {redact_email(to_email)}: {e}")
            return False

        logger.info(f"Email sent to {redact_email(to_email)}: {subject!r}")
        return True

    def send_password_reset_email(self, to_email: str, token: str) -> bool:
        """Send the password reset link carrying the plaintext token."""
        reset_url = self.build_reset_url(token)
        ttl = self.reset_token_ttl_minutes
        html_body = f"""
            <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
              <h2>Password Reset Request</h2>
              <p>You requested to reset your password. Use the link below to choose a new one:</p>
              <p><a href="{reset_url}">Reset Password</a></p>
              <p>This link will expire in {ttl} minutes. If you didn't request a password reset,
              please ignore this email.</p>
            </div>
        """
        text_body = (
            "Password Reset Request\n\n"
            f"Reset your password here: {reset_url}\n\n"
            f"This link will expire in {ttl} minutes. "
            "If you didn't request a password reset, please ignore this email."
        )
        return self.send_email(to_email, "Password Reset Request", html_body, text_body)
