"""Password reset delivery for the HTTP layer."""

from functools import lru_cache

from fastapi import BackgroundTasks

from src.features.user.models import User
from src.shared.email.email_service import EmailService


@lru_cache
def get_email_service() -> EmailService:
    """Application-wide email service built from settings (FastAPI dependency)."""
    return EmailService.from_settings()


class BackgroundEmailNotifier:
    """Queues reset emails to run after the response has been sent.

    The request never waits on SMTP, so the forgot-password response looks
    the same whether or not an email goes out.
    """

    def __init__(self, email_service: EmailService, background_tasks: BackgroundTasks):
        self.email_service = email_service
        self.background_tasks = background_tasks

    async def send_password_reset_email(self, user: User, token: str) -> None:
        self.background_tasks.add_task(self.email_service.send_password_reset_email, user.email, token)
