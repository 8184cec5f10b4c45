"""Authentication router (session lifecycle endpoints)."""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import settings
from src.database.dependencies import get_db_session
from src.shared.middlewares.rate_limit import limiter

from .dependencies import get_optional_identity, get_session_service
from .schemas import (
    ForgotPasswordRequest,
    LoginResponse,
    MessageResponse,
    RefreshTokenRequest,
    ResetPasswordRequest,
    ResetTokenStatusResponse,
    SessionStatusResponse,
    TokenPayload,
    TokenResponse,
    UserLoginRequest,
)
from .service import SessionService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["Authentication"])


def _client_info(request: Request) -> tuple[str | None, str | None]:
    ip_address = request.client.host if request.client else None
    return ip_address, request.headers.get("user-agent")


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.auth_rate_limit)
async def login(
    request: Request,
    data: UserLoginRequest,
    service: SessionService = Depends(get_session_service),
    session: AsyncSession = Depends(get_db_session),
):
    """Login and get tokens.

    - **email**: Email address
    - **password**: Password

    Returns accessToken, refreshToken and the user's public fields.
    """
    ip_address, user_agent = _client_info(request)
    result = await service.login(data.email, data.password, ip_address, user_agent)
    await session.commit()
    return result


@router.post("/refresh", response_model=TokenResponse)
@limiter.limit(settings.auth_rate_limit)
async def refresh_token(
    request: Request,
    data: RefreshTokenRequest,
    service: SessionService = Depends(get_session_service),
    session: AsyncSession = Depends(get_db_session),
):
    """Exchange a refresh token for a new access/refresh pair.

    - **refreshToken**: Valid refresh token; it cannot be used again afterwards
    """
    ip_address, user_agent = _client_info(request)
    tokens = await service.refresh(data.refresh_token, ip_address, user_agent)
    await session.commit()
    return tokens


@router.post("/logout", response_model=MessageResponse)
async def logout(
    data: RefreshTokenRequest,
    service: SessionService = Depends(get_session_service),
    session: AsyncSession = Depends(get_db_session),
):
    """Logout and revoke refresh token.

    - **refreshToken**: Refresh token to revoke
    """
    revoked = await service.logout(data.refresh_token)
    await session.commit()

    if revoked:
        return MessageResponse(message="Successfully logged out")
    return MessageResponse(message="Token already revoked or not found")


@router.post("/forgot-password", response_model=MessageResponse)
@limiter.limit(settings.auth_rate_limit)
async def forgot_password(
    request: Request,
    data: ForgotPasswordRequest,
    service: SessionService = Depends(get_session_service),
    session: AsyncSession = Depends(get_db_session),
):
    """Request a password reset email.

    The response is the same whether or not the email belongs to an account.
    """
    await service.request_password_reset(data.email)
    await session.commit()
    return MessageResponse(message="If the email exists, a password reset link has been sent")


@router.post("/reset-password", response_model=MessageResponse)
@limiter.limit(settings.auth_rate_limit)
async def reset_password(
    request: Request,
    data: ResetPasswordRequest,
    service: SessionService = Depends(get_session_service),
    session: AsyncSession = Depends(get_db_session),
):
    """Set a new password with a reset token. Every existing session is revoked."""
    await service.reset_password(data.token, data.password)
    await session.commit()
    return MessageResponse(message="Password reset successfully")


@router.get("/verify-reset-token/{token}", response_model=ResetTokenStatusResponse)
async def verify_reset_token(token: str, service: SessionService = Depends(get_session_service)):
    """Check whether a reset link is still usable, without consuming it."""
    return ResetTokenStatusResponse(valid=await service.verify_reset_token(token))


@router.get("/session", response_model=SessionStatusResponse)
async def session_status(identity: TokenPayload | None = Depends(get_optional_identity)):
    """Report whether the caller presented a valid access token."""
    return SessionStatusResponse(authenticated=identity is not None, user=identity)
