"""JWT utilities for access tokens."""

from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

import jwt
from jwt.exceptions import InvalidTokenError
from pydantic import ValidationError

from src.config.settings import settings

from .exceptions import TokenInvalidException
from .schemas import TokenPayload

ACCESS_TOKEN_TYPE = "access"
REQUIRED_CLAIMS = ["sub", "exp", "iat"]


class TokenCodec:
    """Signs and verifies access tokens with a single symmetric key.

    Instances hold no mutable state; one codec can serve concurrent requests.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=15),
    ):
        if not secret_key:
            raise ValueError("Token signing key must not be empty")
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.access_ttl = access_ttl

    def mint(self, data: dict[str, Any], ttl: timedelta | None = None) -> str:
        """Create a signed access token.

        Args:
            data: Claims to embed (``sub``, ``email``, ``role``)
            ttl: Lifetime of the token, defaults to the codec's access TTL

        Returns:
            Encoded JWT token string

        """
        to_encode = data.copy()
        issued_at = datetime.now(UTC)
        expire = issued_at + (ttl if ttl is not None else self.access_ttl)

        to_encode.update({"exp": expire, "iat": issued_at, "type": ACCESS_TOKEN_TYPE})

        return jwt.encode(to_encode, self._secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenPayload:
        """Decode and validate an access token.

        Args:
            token: JWT token string

        Returns:
            The embedded identity

        Raises:
            TokenInvalidException: If signature, structure, type or expiry is invalid

        """
        try:
            claims = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except InvalidTokenError as err:
            raise TokenInvalidException() from err

        if claims.get("type") != ACCESS_TOKEN_TYPE:
            raise TokenInvalidException(detail="Invalid token type")

        try:
            return TokenPayload.from_claims(claims)
        except (KeyError, ValidationError) as err:
            raise TokenInvalidException(detail="Invalid token payload") from err


@lru_cache
def get_token_codec() -> TokenCodec:
    """Application-wide codec built from settings (FastAPI dependency)."""
    return TokenCodec(
        secret_key=settings.secret_key,
        algorithm=settings.jwt_algorithm,
        access_ttl=timedelta(minutes=settings.access_token_expire_minutes),
    )
