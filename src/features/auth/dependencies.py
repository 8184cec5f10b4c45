"""Authentication dependencies for FastAPI."""

from datetime import timedelta

from fastapi import BackgroundTasks, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import settings
from src.database.dependencies import get_db_session
from src.features.user.models import UserRole
from src.features.user.repository import UserRepository
from src.shared.email.email_service import EmailService

from .exceptions import AuthRequiredException, ForbiddenException, TokenInvalidException
from .jwt_utils import TokenCodec, get_token_codec
from .notifications import BackgroundEmailNotifier, get_email_service
from .repository import RefreshTokenRepository
from .schemas import TokenPayload
from .service import SessionService

# Missing or non-Bearer Authorization headers resolve to None
security = HTTPBearer(auto_error=False)


def get_session_service(
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
    codec: TokenCodec = Depends(get_token_codec),
    email_service: EmailService = Depends(get_email_service),
) -> SessionService:
    """Build the session service for the current request."""
    return SessionService(
        users=UserRepository(session),
        refresh_tokens=RefreshTokenRepository(session),
        codec=codec,
        notifier=BackgroundEmailNotifier(email_service, background_tasks),
        refresh_ttl=timedelta(days=settings.refresh_token_expire_days),
        reset_ttl=timedelta(minutes=settings.password_reset_expire_minutes),
    )


async def get_current_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    codec: TokenCodec = Depends(get_token_codec),
) -> TokenPayload:
    """Get the identity of the caller from the bearer access token.

    Args:
        request: Incoming request; the identity is stored on ``request.state.user``
        credentials: HTTP authorization credentials with bearer token
        codec: Access token codec; verification needs no database access

    Returns:
        The verified token payload

    Raises:
        AuthRequiredException: If no bearer token is presented
        TokenInvalidException: If the token fails verification

    """
    if credentials is None or not credentials.credentials:
        raise AuthRequiredException()

    identity = codec.verify(credentials.credentials)
    request.state.user = identity
    return identity


async def get_optional_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    codec: TokenCodec = Depends(get_token_codec),
) -> TokenPayload | None:
    """Get the caller's identity if a valid token is provided, otherwise None.
    Useful for endpoints that work with or without authentication.
    """
    if credentials is None:
        return None

    try:
        return await get_current_identity(request, credentials, codec)
    except (AuthRequiredException, TokenInvalidException):
        return None


def require_role(*allowed_roles: UserRole):
    """Dependency factory to require one of the given roles.

    A missing token fails with AuthRequired (401) before the role is looked
    at; a valid identity with another role fails with Forbidden (403).

    Usage:
        Depends(require_role(UserRole.ADMIN))
    """

    async def role_checker(identity: TokenPayload = Depends(get_current_identity)) -> TokenPayload:
        if identity.role not in allowed_roles:
            raise ForbiddenException([r.value for r in allowed_roles])
        return identity

    return role_checker
