"""Contracts of the collaborators used by the session service."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from src.features.user.models import User

from .models import RefreshToken


class CredentialStore(Protocol):
    """User records. Password checks go through ``User.verify_password``."""

    async def find_by_email(self, email: str) -> User | None: ...

    async def find_by_id(self, user_id: UUID) -> User | None: ...

    async def find_by_reset_token_hash(self, token_hash: str, now: datetime) -> User | None: ...

    async def save(self, user: User) -> User: ...

    async def set_reset_token(self, user: User, token_hash: str, expires_at: datetime) -> User: ...

    async def consume_reset_token(self, token_hash: str, now: datetime) -> User | None:
        """Clear a live reset digest; the owner if this call consumed it, else None."""
        ...

    async def update_password(self, user: User, new_password: str) -> User: ...


class RefreshTokenStore(Protocol):
    """Refresh token records."""

    async def create(
        self,
        user_id: UUID,
        token: str,
        expires_at: datetime,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> RefreshToken: ...

    async def find_by_token(self, token: str) -> RefreshToken | None: ...

    async def compare_and_revoke(self, token: str, now: datetime) -> bool:
        """Revoke ``token`` only if it is live; True when this call revoked it."""
        ...

    async def revoke(self, token: str) -> bool:
        """Revoke regardless of expiry; False if unknown or already revoked."""
        ...

    async def revoke_all_by_user(self, user_id: UUID) -> int: ...


class PasswordResetNotifier(Protocol):
    """Delivers the plaintext reset token to the account owner."""

    async def send_password_reset_email(self, user: User, token: str) -> None: ...
