"""User domain models."""

from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4

from pwdlib import PasswordHash
from sqlalchemy import DateTime, Enum, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from src.database.base import Base, TimestampMixin


class UserRole(StrEnum):
    """User roles.

    ADMIN: Site owner. Manages profile, projects, blog and sees analytics.
    USER: Any other registered account.
    """

    USER = "user"
    ADMIN = "admin"


pwd_hasher = PasswordHash.recommended()


class User(Base, TimestampMixin):
    """User model for authentication and authorization.

    The two reset columns hold the digest and expiry of the single live
    password-reset token; both are NULL when no reset is pending.
    """

    __tablename__ = "users"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Identity (stored lower-cased)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)

    # Authentication
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    # Authorization
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.USER,
        server_default=UserRole.USER.value,
    )

    # Password reset
    reset_password_token_hash: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    reset_password_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def verify_password(self, plain_password: str) -> bool:
        """Verify a password against the hash using Argon2.

        Salt is automatically extracted from the hash by pwdlib.
        """
        return pwd_hasher.verify(plain_password, self.hashed_password)

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password using Argon2.

        Salt is automatically generated and embedded in the returned hash.
        """
        return pwd_hasher.hash(password)

    @staticmethod
    def normalize_email(email: str) -> str:
        return email.strip().lower()

    def has_role(self, role: UserRole) -> bool:
        return self.role == role
