"""User-related exceptions."""

from uuid import UUID

from fastapi import HTTPException, status


class UserNotFound(HTTPException):
    """Raised when an account id resolves to no user (404)."""

    def __init__(self, user_id: UUID | None = None):
        detail = "User not found" if user_id is None else f"User {user_id} not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AdminBootstrapError(ValueError):
    """Raised when the admin account cannot be created from the given credentials."""
