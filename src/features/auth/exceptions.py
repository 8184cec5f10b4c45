"""Authentication exceptions.

Every failure kind of the session lifecycle has its own class and a stable
``code`` so callers can tell "log in" (401) apart from "not permitted" (403).
"""

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse


class AuthenticationException(HTTPException):
    """Base authentication exception (401 with a Bearer challenge)."""

    code = "AUTHENTICATION_FAILED"

    def __init__(self, detail: str = "Authentication failed"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthFailedException(AuthenticationException):
    """Raised when email or password is incorrect.

    The message is identical for unknown accounts and wrong passwords.
    """

    code = "AUTH_FAILED"

    def __init__(self):
        super().__init__(detail="Invalid email or password")


class AuthRequiredException(AuthenticationException):
    """Raised when no bearer token, or a non-Bearer scheme, is presented."""

    code = "AUTH_REQUIRED"

    def __init__(self):
        super().__init__(detail="Authentication required")


class TokenInvalidException(AuthenticationException):
    """Raised when an access token fails signature, structure or expiry checks."""

    code = "TOKEN_INVALID"

    def __init__(self, detail: str = "Invalid or expired authentication token"):
        super().__init__(detail=detail)


class RefreshRejectedException(AuthenticationException):
    """Raised when a refresh token is unknown, revoked or expired."""

    code = "REFRESH_REJECTED"

    def __init__(self):
        super().__init__(detail="Invalid or expired refresh token")


class ForbiddenException(HTTPException):
    """Raised when an authenticated identity lacks the required role."""

    code = "FORBIDDEN"

    def __init__(self, required_roles: list[str] | None = None):
        detail = "You do not have permission to access this resource"
        if required_roles:
            detail = f"{detail} (requires: {', '.join(required_roles)})"
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class InvalidOrExpiredResetTokenException(HTTPException):
    """Raised when a password-reset token does not match or has expired."""

    code = "INVALID_OR_EXPIRED"

    def __init__(self):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired reset token")


AUTH_EXCEPTIONS = (AuthenticationException, ForbiddenException, InvalidOrExpiredResetTokenException)


async def auth_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render auth errors as ``{"detail": ..., "code": ...}``, keeping any Bearer challenge."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
        headers=exc.headers,
    )
