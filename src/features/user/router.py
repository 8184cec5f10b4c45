"""User router (API endpoints)."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.dependencies import get_db_session
from src.features.auth.dependencies import get_current_identity, get_session_service, require_role
from src.features.auth.schemas import TokenPayload
from src.features.auth.service import SessionService

from .exceptions import UserNotFound
from .models import UserRole
from .repository import UserRepository
from .schemas import RevokeSessionsResponse, UserResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    identity: TokenPayload = Depends(get_current_identity),
    session: AsyncSession = Depends(get_db_session),
):
    """Get current user information."""
    user = await UserRepository(session).find_by_id(identity.id)

    if not user:
        raise UserNotFound()

    return UserResponse.model_validate(user)


# Admin endpoints
@router.get("/{user_id}", response_model=UserResponse, dependencies=[Depends(require_role(UserRole.ADMIN))])
async def get_user(user_id: UUID, session: AsyncSession = Depends(get_db_session)):
    """Get user by ID (admin only)."""
    user = await UserRepository(session).find_by_id(user_id)

    if not user:
        raise UserNotFound(user_id)

    return UserResponse.model_validate(user)


@router.post("/{user_id}/revoke-sessions", response_model=RevokeSessionsResponse)
async def revoke_sessions(
    user_id: UUID,
    admin: TokenPayload = Depends(require_role(UserRole.ADMIN)),
    service: SessionService = Depends(get_session_service),
    session: AsyncSession = Depends(get_db_session),
):
    """Revoke every refresh token of a user (admin only).

    Access tokens already issued stay valid until they expire.
    """
    if await UserRepository(session).find_by_id(user_id) is None:
        raise UserNotFound(user_id)

    revoked = await service.revoke_all_for_user(user_id)
    await session.commit()

    logger.info(f"Sessions of user {user_id} revoked by admin {admin.id}: {revoked}")
    return RevokeSessionsResponse(user_id=user_id, revoked=revoked)
