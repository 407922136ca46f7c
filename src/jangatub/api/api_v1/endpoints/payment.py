import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError as PydanticValidationError

from src.jangatub.api.auth_deps import CurrentUser
from src.jangatub.core.config import settings
from src.jangatub.core.errors import AuthenticationError, ValidationError
from src.jangatub.db.session import SessionDep
from src.jangatub.schemas import CheckoutRequest, CheckoutResponse, WebhookAck
from src.jangatub.services.payment_service import WaveClient, WaveWebhookEvent, get_wave_client, verify_signature
from src.jangatub.services.subscription_service import subscription_service

router = APIRouter()
logger = logging.getLogger(__name__)

WaveDep = Annotated[WaveClient, Depends(get_wave_client)]


@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout(
    request: CheckoutRequest,
    current_user: CurrentUser,
    db: SessionDep,
    wave: WaveDep,
) -> CheckoutResponse:
    """Open a Wave checkout session for a paid plan."""
    return await subscription_service.initiate_checkout(db, user=current_user, plan=request.plan, wave=wave)


@router.post("/webhook", response_model=WebhookAck, response_model_exclude_none=True)
async def wave_webhook(request: Request, db: SessionDep, wave: WaveDep) -> WebhookAck:
    """Wave payment callback."""
    payload = await request.body()
    if not verify_signature(payload, request.headers.get("Wave-Signature"), settings.WAVE_WEBHOOK_SECRET):
        logger.warning("Rejected Wave webhook with an invalid signature")
        raise AuthenticationError("Invalid signature")

    try:
        event = WaveWebhookEvent.model_validate_json(payload)
    except PydanticValidationError:
        raise ValidationError("Invalid webhook payload")

    return await subscription_service.confirm_payment(db, event, wave)
