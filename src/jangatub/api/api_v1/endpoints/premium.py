from fastapi import APIRouter

from src.jangatub.core.access import AuthenticatedSession
from src.jangatub.crud.crud_subscription import subscription as crud_subscription
from src.jangatub.db.session import SessionDep
from src.jangatub.schemas import ActivateRequest, ActivateResponse, SubscriptionResponse
from src.jangatub.services.subscription_service import subscription_service

router = APIRouter()


@router.post("/activate", response_model=ActivateResponse)
async def activate_premium(request: ActivateRequest, session: AuthenticatedSession, db: SessionDep) -> ActivateResponse:
    """Activate a paid plan from a payment reference. A reference can be used only once."""
    return await subscription_service.activate(
        db,
        user_id=session.user_id,
        plan=request.plan,
        provider=request.provider,
        payment_ref=request.payment_ref,
    )


@router.get("/subscriptions", response_model=list[SubscriptionResponse])
async def list_subscriptions(session: AuthenticatedSession, db: SessionDep) -> list[SubscriptionResponse]:
    """Subscription history of the current user, newest first."""
    subscriptions = await crud_subscription.list_for_user(db, user_id=session.user_id)
    return [SubscriptionResponse.model_validate(s) for s in subscriptions]
