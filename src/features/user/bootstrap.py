"""Admin account bootstrap."""

import logging
from enum import StrEnum

from src.shared.validators.password import validate_password_strength

from .exceptions import AdminBootstrapError
from .models import User, UserRole
from .repository import UserRepository

logger = logging.getLogger(__name__)


class BootstrapStatus(StrEnum):
    CREATED = "created"
    PROMOTED = "promoted"
    ALREADY_ADMIN = "already_admin"


async def ensure_admin(users: UserRepository, email: str, password: str) -> tuple[User, BootstrapStatus]:
    """Create an admin account, or promote the existing account with that email.

    The password of an existing account is left untouched.

    Raises:
        AdminBootstrapError: If the password is too weak for a new account

    """
    existing = await users.find_by_email(email)

    if existing is not None:
        if existing.role == UserRole.ADMIN:
            return existing, BootstrapStatus.ALREADY_ADMIN
        existing.role = UserRole.ADMIN
        await users.save(existing)
        logger.info(f"Promoted user {existing.id} to admin")
        return existing, BootstrapStatus.PROMOTED

    try:
        validate_password_strength(password)
    except ValueError as exc:
        raise AdminBootstrapError(f"Admin password rejected: {exc}") from exc

    user = await users.create(email, password, role=UserRole.ADMIN)
    logger.info(f"Created admin user {user.id}")
    return user, BootstrapStatus.CREATED
