from fastapi import APIRouter

from src.jangatub.api.auth_deps import CurrentUser
from src.jangatub.db.session import SessionDep
from src.jangatub.schemas import CurrentUserResponse, UserResponse
from src.jangatub.services.subscription_service import subscription_service

router = APIRouter()


@router.get("/me", response_model=CurrentUserResponse)
async def read_current_user(current_user: CurrentUser, db: SessionDep) -> CurrentUserResponse:
    """Get current user with their premium entitlement."""
    entitlement = await subscription_service.get_entitlement(db, current_user)
    return CurrentUserResponse(
        **UserResponse.model_validate(current_user).model_dump(),
        entitlement=entitlement,
    )
