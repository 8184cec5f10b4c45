"""Session lifecycle service: login, refresh rotation, revocation and password reset."""

import hashlib
import logging
import secrets
from datetime import timedelta
from uuid import UUID

from src.database.base import utcnow
from src.features.user.models import User
from src.features.user.schemas import UserResponse

from .exceptions import AuthFailedException, InvalidOrExpiredResetTokenException, RefreshRejectedException
from .interfaces import CredentialStore, PasswordResetNotifier, RefreshTokenStore
from .jwt_utils import TokenCodec
from .schemas import LoginResponse, TokenPayload, TokenResponse

logger = logging.getLogger(__name__)

REFRESH_TOKEN_BYTES = 40
RESET_TOKEN_BYTES = 32
DEFAULT_REFRESH_TTL = timedelta(days=7)
DEFAULT_RESET_TTL = timedelta(hours=1)


def generate_refresh_token() -> str:
    return secrets.token_hex(REFRESH_TOKEN_BYTES)


def generate_reset_token() -> str:
    return secrets.token_hex(RESET_TOKEN_BYTES)


def hash_reset_token(token: str) -> str:
    """One-way digest stored in place of the plaintext reset token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class SessionService:
    """The only component that creates, rotates or revokes refresh tokens
    and issues password-reset tokens.

    The service flushes through its stores but never commits; the caller
    owns the transaction so a rotation either fully happens or not at all.
    """

    def __init__(
        self,
        users: CredentialStore,
        refresh_tokens: RefreshTokenStore,
        codec: TokenCodec,
        notifier: PasswordResetNotifier | None = None,
        *,
        refresh_ttl: timedelta = DEFAULT_REFRESH_TTL,
        reset_ttl: timedelta = DEFAULT_RESET_TTL,
    ):
        self.users = users
        self.refresh_tokens = refresh_tokens
        self.codec = codec
        self.notifier = notifier
        self.refresh_ttl = refresh_ttl
        self.reset_ttl = reset_ttl

    async def login(
        self, email: str, password: str, ip_address: str | None = None, user_agent: str | None = None
    ) -> LoginResponse:
        """Authenticate with email and password and open a new session.

        Args:
            email: Email address (case-insensitive)
            password: Plain text password
            ip_address: Requester's IP address (optional)
            user_agent: Requester's User-Agent header (optional)

        Returns:
            LoginResponse with a fresh access/refresh pair and the user's public fields

        Raises:
            AuthFailedException: For an unknown email or a wrong password alike

        """
        user = await self.users.find_by_email(email)

        if user is None or not user.verify_password(password):
            logger.warning(f"Failed login attempt for {User.normalize_email(email)}")
            raise AuthFailedException()

        tokens = await self._issue_tokens(user, ip_address, user_agent)
        logger.info(f"User logged in: {user.id}")

        return LoginResponse(**tokens.model_dump(), user=UserResponse.model_validate(user))

    async def refresh(
        self, presented_token: str, ip_address: str | None = None, user_agent: str | None = None
    ) -> TokenResponse:
        """Rotate a refresh token into a new access/refresh pair.

        The presented token is revoked by a single conditional update before
        anything else happens, so of two concurrent calls with the same token
        at most one gets past this point.

        Raises:
            RefreshRejectedException: If the token is unknown, revoked, expired,
                or its owner no longer exists

        """
        if not await self.refresh_tokens.compare_and_revoke(presented_token, utcnow()):
            stored = await self.refresh_tokens.find_by_token(presented_token)
            if stored is not None and stored.revoked:
                logger.warning(f"Revoked refresh token presented for user {stored.user_id}")
            else:
                logger.info("Refresh rejected: unknown or expired token")
            raise RefreshRejectedException()

        stored = await self.refresh_tokens.find_by_token(presented_token)
        user = await self.users.find_by_id(stored.user_id) if stored is not None else None
        if user is None:
            logger.warning("Refresh rejected: token owner no longer exists")
            raise RefreshRejectedException()

        tokens = await self._issue_tokens(user, ip_address, user_agent)
        logger.info(f"Refresh token rotated for user {user.id}")
        return tokens

    async def logout(self, refresh_token: str) -> bool:
        """Revoke a refresh token.

        Idempotent: an unknown or already revoked token is not an error.

        Returns:
            True if this call revoked the token

        """
        revoked = await self.refresh_tokens.revoke(refresh_token)
        if revoked:
            logger.info("Refresh token revoked on logout")
        return revoked

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        """Revoke every live refresh token of a user. Idempotent."""
        count = await self.refresh_tokens.revoke_all_by_user(user_id)
        logger.info(f"Revoked {count} refresh token(s) for user {user_id}")
        return count

    def verify_access_token(self, token: str) -> TokenPayload:
        """Verify an access token.

        Access tokens are not checked against any stored state; a token stays
        valid until its embedded expiry even after logout.
        """
        return self.codec.verify(token)

    async def request_password_reset(self, email: str) -> None:
        """Issue a password-reset token and hand it to the notifier.

        Returns normally whether or not the email belongs to an account.
        """
        user = await self.users.find_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return

        token = generate_reset_token()
        await self.users.set_reset_token(user, hash_reset_token(token), utcnow() + self.reset_ttl)
        logger.info(f"Password reset token issued for user {user.id}")

        if self.notifier is None:
            logger.warning("No password reset notifier configured; reset token not delivered")
            return

        try:
            await self.notifier.send_password_reset_email(user, token)
        except Exception:
            logger.exception(f"Failed to dispatch password reset email for user {user.id}")

    async def verify_reset_token(self, token: str) -> bool:
        """Check a reset token without consuming it."""
        user = await self.users.find_by_reset_token_hash(hash_reset_token(token), utcnow())
        return user is not None

    async def reset_password(self, token: str, new_password: str) -> None:
        """Consume a reset token and set a new password.

        The digest is cleared by one conditional update before the password
        changes, so a token is consumed at most once even under concurrent
        calls. Every refresh token of the user is then revoked.

        Raises:
            InvalidOrExpiredResetTokenException: If no live reset token matches

        """
        user = await self.users.consume_reset_token(hash_reset_token(token), utcnow())
        if user is None:
            logger.info("Password reset rejected: unknown, used or expired token")
            raise InvalidOrExpiredResetTokenException()

        await self.users.update_password(user, new_password)
        await self.revoke_all_for_user(user.id)
        logger.info(f"Password reset completed for user {user.id}")

    async def _issue_tokens(self, user: User, ip_address: str | None, user_agent: str | None) -> TokenResponse:
        access_token = self.codec.mint({"sub": str(user.id), "email": user.email, "role": str(user.role)})

        refresh_token = generate_refresh_token()
        await self.refresh_tokens.create(
            user_id=user.id,
            token=refresh_token,
            expires_at=utcnow() + self.refresh_ttl,
            ip_address=ip_address,
            user_agent=user_agent,
        )

        return TokenResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=int(self.codec.access_ttl.total_seconds()),
        )
