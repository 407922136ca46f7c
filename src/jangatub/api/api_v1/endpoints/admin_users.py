import logging
from typing import Optional

from fastapi import APIRouter, Query

from src.jangatub.core.access import AdminSession
from src.jangatub.core.errors import NotFoundError, ValidationError
from src.jangatub.crud.crud_user import user as crud_user
from src.jangatub.db.session import SessionDep
from src.jangatub.schemas import (
    MessageResponse,
    Page,
    Pagination,
    PremiumOverrideRequest,
    PremiumOverrideResponse,
    UserResponse,
)
from src.jangatub.services.subscription_service import subscription_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=Page[UserResponse])
async def list_users(
    session: AdminSession,
    db: SessionDep,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    q: Optional[str] = Query(default=None, max_length=100),
) -> Page[UserResponse]:
    users, total = await crud_user.search(db, query=q, skip=(page - 1) * limit, limit=limit)
    return Page[UserResponse](
        items=[UserResponse.model_validate(u) for u in users],
        pagination=Pagination.build(page, limit, total),
    )


@router.patch("/{user_id}/premium", response_model=PremiumOverrideResponse)
async def set_premium(
    user_id: str,
    request: PremiumOverrideRequest,
    session: AdminSession,
    db: SessionDep,
) -> PremiumOverrideResponse:
    """Grant or revoke premium by hand. Every ACTIVE subscription is cancelled first."""
    user = await subscription_service.admin_override(db, user_id=user_id, is_premium=request.is_premium)
    logger.info(f"Admin {session.user_id} set premium={request.is_premium} on user {user_id}")
    return PremiumOverrideResponse(user_id=user.id, is_premium=user.is_premium)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: str, session: AdminSession, db: SessionDep) -> MessageResponse:
    if user_id == session.user_id:
        raise ValidationError("You cannot delete your own account")
    removed = await crud_user.remove(db, id=user_id)
    if not removed:
        raise NotFoundError("User not found")
    logger.info(f"Admin {session.user_id} deleted user {user_id}")
    return MessageResponse(message="User deleted")
