from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from .base import BaseSchema, ResponseBase
from .enums import PaymentProvider, SubscriptionPlan, SubscriptionStatus

PAID_PLANS = (SubscriptionPlan.MONTHLY, SubscriptionPlan.ANNUAL)


class PaidPlanRequest(BaseSchema):
    plan: SubscriptionPlan

    @field_validator("plan")
    @classmethod
    def plan_must_be_paid(cls, v: SubscriptionPlan) -> SubscriptionPlan:
        if v not in PAID_PLANS:
            raise ValueError("plan must be PREMIUM_MONTHLY or PREMIUM_ANNUAL")
        return v


class SubscriptionResponse(ResponseBase):
    user_id: str
    plan: SubscriptionPlan
    provider: Optional[PaymentProvider] = None
    tx_ref: Optional[str] = None
    status: SubscriptionStatus
    start_at: datetime
    end_at: Optional[datetime] = None


class ActivateRequest(PaidPlanRequest):
    provider: PaymentProvider
    payment_ref: str = Field(min_length=1)


class ActivateResponse(BaseSchema):
    success: bool = True
    message: str
    plan: SubscriptionPlan
    end_at: Optional[datetime] = None


class CheckoutRequest(PaidPlanRequest):
    pass


class CheckoutResponse(BaseSchema):
    checkout_url: str
    session_id: str
    plan: SubscriptionPlan
    amount: int


class WebhookAck(BaseSchema):
    """Acknowledgement returned to the payment provider."""
    received: bool = True
    ignored: Optional[bool] = None
    activated: Optional[bool] = None
    idempotent: Optional[bool] = None
    user_id: Optional[str] = None
    plan: Optional[SubscriptionPlan] = None
    end_at: Optional[datetime] = None
