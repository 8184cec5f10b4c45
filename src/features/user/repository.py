"""User persistence (credential store)."""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.base import utcnow

from .models import User, UserRole

logger = logging.getLogger(__name__)


class UserRepository:
    """SQLAlchemy-backed credential store.

    Writes are flushed, not committed; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == User.normalize_email(email))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: UUID) -> User | None:
        return await self.session.get(User, user_id)

    async def find_by_reset_token_hash(self, token_hash: str, now: datetime) -> User | None:
        """Find the user whose live reset digest matches.

        The expiry comparison happens in SQL so an expired digest never matches.
        """
        stmt = select(User).where(
            User.reset_password_token_hash == token_hash,
            User.reset_password_expires_at > now,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, email: str, password: str, role: UserRole = UserRole.USER) -> User:
        """Create a user with a freshly hashed password."""
        user = User(
            email=User.normalize_email(email),
            hashed_password=User.hash_password(password),
            role=role,
        )
        return await self.save(user)

    async def save(self, user: User) -> User:
        self.session.add(user)
        await self.session.flush()
        return user

    async def set_reset_token(self, user: User, token_hash: str, expires_at: datetime) -> User:
        """Store a new reset digest, replacing any previous one."""
        user.reset_password_token_hash = token_hash
        user.reset_password_expires_at = expires_at
        return await self.save(user)

    async def consume_reset_token(self, token_hash: str, now: datetime) -> User | None:
        """Atomically clear a live reset digest and return its owner.

        A single conditional `UPDATE` decides the outcome, so of two concurrent
        calls with the same digest at most one gets the user back.
        """
        stmt = (
            update(User)
            .where(
                User.reset_password_token_hash == token_hash,
                User.reset_password_expires_at > now,
            )
            .values(reset_password_token_hash=None, reset_password_expires_at=None)
            .returning(User.id)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        user_id = result.scalar_one_or_none()
        if user_id is None:
            return None
        return await self.session.get(User, user_id, populate_existing=True)

    async def update_password(self, user: User, new_password: str) -> User:
        """Replace the password hash (salt handled automatically by Argon2)."""
        user.hashed_password = User.hash_password(new_password)
        user.updated_at = utcnow()
        logger.info(f"Password updated for user {user.id}")
        return await self.save(user)
