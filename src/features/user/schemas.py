"""User schemas (DTOs)."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .models import UserRole


class CamelModel(BaseModel):
    """Base schema exposing camelCase field names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Response schemas
class UserResponse(CamelModel):
    """Public user fields."""

    id: UUID
    email: str
    role: UserRole
    created_at: datetime | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class RevokeSessionsResponse(CamelModel):
    """Result of revoking every refresh token of a user."""

    user_id: UUID
    revoked: int
