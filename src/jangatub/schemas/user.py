from datetime import datetime
from typing import Optional

from .base import BaseSchema, ResponseBase
from .enums import Role, SubscriptionPlan


class UserSummary(BaseSchema):
    id: str
    name: str
    email: str


class UserResponse(ResponseBase):
    name: str
    email: str
    role: Role
    is_premium: bool


class Entitlement(BaseSchema):
    """Premium right derived from the user's subscriptions."""
    is_premium: bool
    plan: Optional[SubscriptionPlan] = None
    end_at: Optional[datetime] = None


class CurrentUserResponse(UserResponse):
    entitlement: Entitlement


class PremiumOverrideRequest(BaseSchema):
    is_premium: bool


class PremiumOverrideResponse(BaseSchema):
    success: bool = True
    user_id: str
    is_premium: bool
