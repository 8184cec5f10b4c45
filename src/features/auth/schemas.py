"""Authentication schemas (DTOs)."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from src.features.user.models import UserRole
from src.features.user.schemas import CamelModel, UserResponse
from src.shared.validators.password import validate_password_strength


# Token payload
class TokenPayload(CamelModel):
    """Identity carried by a verified access token."""

    id: UUID
    email: str
    role: UserRole
    issued_at: datetime
    expires_at: datetime

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "TokenPayload":
        return cls(
            id=claims["sub"],
            email=claims["email"],
            role=claims["role"],
            issued_at=datetime.fromtimestamp(claims["iat"], UTC),
            expires_at=datetime.fromtimestamp(claims["exp"], UTC),
        )


# Request schemas
class UserLoginRequest(CamelModel):
    """Login request.

    Note: Uses email-validator library via Pydantic's EmailStr for RFC 5322 compliant email validation.
    """

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class RefreshTokenRequest(CamelModel):
    """Refresh or logout request."""

    refresh_token: str = Field(..., min_length=1, max_length=255)


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    """Password reset with the plaintext token from the reset email."""

    token: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, value: str) -> str:
        """Validate password strength using shared validator."""
        return validate_password_strength(value)


# Response schemas
class TokenResponse(CamelModel):
    """Access/refresh token pair."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


class LoginResponse(TokenResponse):
    user: UserResponse


class MessageResponse(CamelModel):
    message: str


class ResetTokenStatusResponse(CamelModel):
    valid: bool


class SessionStatusResponse(CamelModel):
    """Result of optional authentication."""

    authenticated: bool
    user: TokenPayload | None = None
