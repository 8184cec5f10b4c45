"""Middleware for protecting API documentation routes to admin users only."""

from fastapi import Request
from fastapi.security import HTTPBearer

from src.features.auth.exceptions import (
    AuthRequiredException,
    ForbiddenException,
    TokenInvalidException,
    auth_exception_handler,
)
from src.features.auth.jwt_utils import get_token_codec
from src.features.user.models import UserRole

PROTECTED_PATHS = {"/docs", "/redoc", "/openapi.json"}

_security = HTTPBearer(auto_error=False)


async def admin_docs_middleware(request: Request, call_next):
    """Middleware to protect API documentation routes to admin users only.

    Protects:
    - /docs (Swagger UI)
    - /redoc (ReDoc)
    - /openapi.json (OpenAPI schema)

    Anonymous callers get 401, non-admin callers get 403. Only the access
    token is checked; no database lookup happens here.

    Args:
        request: FastAPI request object
        call_next: Next middleware/route handler

    Returns:
        Response object - either an error response, or the next handler's response

    """
    if request.url.path not in PROTECTED_PATHS:
        return await call_next(request)

    credentials = await _security(request)
    if credentials is None:
        return await auth_exception_handler(request, AuthRequiredException())

    try:
        identity = get_token_codec().verify(credentials.credentials)
    except TokenInvalidException as exc:
        return await auth_exception_handler(request, exc)

    if identity.role != UserRole.ADMIN:
        return await auth_exception_handler(request, ForbiddenException([UserRole.ADMIN.value]))

    return await call_next(request)
