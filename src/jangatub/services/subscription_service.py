"""Subscription lifecycle: checkout, activation, webhook confirmation, admin override.

Every path that makes a subscription ACTIVE runs in one transaction that
locks the user row, cancels the user's other ACTIVE rows, activates the new
one and updates ``User.is_premium``. The partial unique index on ACTIVE rows
rejects whatever a concurrent transaction slips past the lock.
"""
import logging
import time
from datetime import datetime, timedelta
from typing import Optional

import httpx
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.jangatub.core.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionError,
    ServiceUnavailableError,
    ValidationError,
)
from src.jangatub.core.security import SessionToken
from src.jangatub.crud.crud_subscription import subscription as crud_subscription
from src.jangatub.crud.crud_user import user as crud_user
from src.jangatub.models.base import utcnow
from src.jangatub.models.core import User
from src.jangatub.models.subscription import Subscription
from src.jangatub.schemas import ActivateResponse, CheckoutResponse, Entitlement, WebhookAck
from src.jangatub.schemas.enums import PaymentProvider, SubscriptionPlan, SubscriptionStatus
from src.jangatub.services.payment_service import (
    CHECKOUT_COMPLETED,
    PAYMENT_SUCCEEDED,
    WaveClient,
    WaveWebhookEvent,
)

PLAN_DURATION_DAYS = {
    SubscriptionPlan.MONTHLY: 30,
    SubscriptionPlan.ANNUAL: 365,
}

PLAN_PRICE_XOF = {
    SubscriptionPlan.MONTHLY: 2500,
    SubscriptionPlan.ANNUAL: 20000,
}


def plan_end_date(plan: SubscriptionPlan, start: datetime) -> Optional[datetime]:
    """End of a subscription started at ``start``; None for plans that never expire."""
    days = PLAN_DURATION_DAYS.get(plan)
    return start + timedelta(days=days) if days else None


class SubscriptionService:
    def __init__(self):
        self.logger = logging.getLogger(__name__)

    # Entitlement

    async def get_entitlement(self, db: AsyncSession, user: User) -> Entitlement:
        """Compute the user's premium right and reconcile ``is_premium`` when it drifted."""
        active = await crud_subscription.get_active(db, user_id=user.id)
        entitled = active is not None and active.is_entitling(utcnow())

        if user.is_premium != entitled:
            self.logger.info(f"Reconciling premium flag for user {user.id}: {user.is_premium} -> {entitled}")
            user.is_premium = entitled
            await db.commit()

        if not entitled:
            return Entitlement(is_premium=False)
        return Entitlement(is_premium=True, plan=active.plan, end_at=active.end_at)

    async def ensure_premium(self, db: AsyncSession, session: SessionToken) -> User:
        """Load the session's user and require a current entitlement. Administrators pass."""
        user = await crud_user.get(db, id=session.user_id)
        if not user:
            raise AuthenticationError("Account no longer exists")
        if session.is_admin:
            return user
        entitlement = await self.get_entitlement(db, user)
        if not entitlement.is_premium:
            raise PermissionError("This feature is reserved for Premium members", code="premium_required")
        return user

    # Checkout

    async def initiate_checkout(
        self, db: AsyncSession, *, user: User, plan: SubscriptionPlan, wave: WaveClient
    ) -> CheckoutResponse:
        """Open a Wave checkout and record it as a PENDING subscription."""
        entitlement = await self.get_entitlement(db, user)
        if entitlement.is_premium:
            raise ValidationError("You already have an active Premium subscription")
        if not wave.configured:
            raise ServiceUnavailableError("Wave payments are not configured yet")

        amount = PLAN_PRICE_XOF[plan]
        client_reference = f"{user.id}_{plan.value}_{int(time.time() * 1000)}"
        checkout = await wave.create_checkout_session(amount=amount, client_reference=client_reference)

        now = utcnow()
        db.add(Subscription(
            user_id=user.id,
            plan=plan,
            provider=PaymentProvider.WAVE,
            tx_ref=checkout.id,
            status=SubscriptionStatus.PENDING,
            start_at=now,
            end_at=plan_end_date(plan, now),
        ))
        await db.commit()
        self.logger.info(f"Checkout {checkout.id} opened for user {user.id} ({plan.value})")

        return CheckoutResponse(
            checkout_url=checkout.wave_launch_url or "",
            session_id=checkout.id,
            plan=plan,
            amount=amount,
        )

    # Activation

    async def _lock_user(self, db: AsyncSession, user_id: str) -> User:
        user = await crud_user.get_for_update(db, id=user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def _commit_activation(self, db: AsyncSession, user_id: str) -> None:
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            self.logger.warning(f"Concurrent activation rejected for user {user_id}: {e.orig}")
            raise ConflictError("A concurrent activation is already in progress for this account")

    async def activate(
        self,
        db: AsyncSession,
        *,
        user_id: str,
        plan: SubscriptionPlan,
        provider: PaymentProvider,
        payment_ref: str,
    ) -> ActivateResponse:
        """Activate a paid plan from a proof-of-payment reference."""
        if await crud_subscription.tx_ref_exists(db, tx_ref=payment_ref):
            raise ConflictError("This payment reference has already been used")

        user = await self._lock_user(db, user_id)
        now = utcnow()
        end_at = plan_end_date(plan, now)

        await crud_subscription.cancel_active(db, user_id=user.id)
        db.add(Subscription(
            user_id=user.id,
            plan=plan,
            provider=provider,
            tx_ref=payment_ref,
            status=SubscriptionStatus.ACTIVE,
            start_at=now,
            end_at=end_at,
        ))
        user.is_premium = True
        await self._commit_activation(db, user.id)

        self.logger.info(f"Premium activated for user {user.id}: {plan.value} until {end_at}")
        return ActivateResponse(
            message="Premium subscription activated",
            plan=plan,
            end_at=end_at,
        )

    async def confirm_payment(self, db: AsyncSession, event: WaveWebhookEvent, wave: WaveClient) -> WebhookAck:
        """Apply a Wave webhook event to the PENDING subscription it refers to."""
        if event.type != CHECKOUT_COMPLETED:
            return WebhookAck(ignored=True)

        checkout = event.session
        self.logger.info(f"Webhook for checkout {checkout.id}: payment {checkout.payment_status}")

        if checkout.payment_status != PAYMENT_SUCCEEDED:
            pending = await crud_subscription.get_by_tx_ref(db, tx_ref=checkout.id)
            if pending and pending.status == SubscriptionStatus.PENDING:
                pending.status = SubscriptionStatus.CANCELLED
                await db.commit()
            return WebhookAck(activated=False)

        if wave.configured:
            try:
                verified = await wave.get_checkout_session(checkout.id)
            except httpx.HTTPError as e:
                self.logger.error(f"Could not verify checkout {checkout.id} with Wave: {e}")
            else:
                if verified.payment_status != PAYMENT_SUCCEEDED:
                    raise ValidationError("Payment could not be verified")

        pending = await crud_subscription.get_by_tx_ref(db, tx_ref=checkout.id)
        if pending is None:
            raise NotFoundError("Subscription not found")
        if pending.status == SubscriptionStatus.ACTIVE:
            self.logger.info(f"Checkout {checkout.id} already activated")
            return WebhookAck(activated=True, idempotent=True)
        if pending.status != SubscriptionStatus.PENDING:
            raise NotFoundError("Subscription not found")

        user = await self._lock_user(db, pending.user_id)
        # Re-read under the lock: a concurrent delivery may have promoted it already.
        await db.refresh(pending)
        if pending.status == SubscriptionStatus.ACTIVE:
            await db.rollback()
            return WebhookAck(activated=True, idempotent=True)

        now = utcnow()
        await crud_subscription.cancel_active(db, user_id=user.id, exclude_id=pending.id)
        pending.status = SubscriptionStatus.ACTIVE
        pending.start_at = now
        pending.end_at = plan_end_date(pending.plan, now)
        user.is_premium = True
        await self._commit_activation(db, user.id)

        self.logger.info(f"Premium activated for user {user.id} from checkout {checkout.id}")
        return WebhookAck(activated=True, user_id=user.id, plan=pending.plan, end_at=pending.end_at)

    async def admin_override(self, db: AsyncSession, *, user_id: str, is_premium: bool) -> User:
        """Grant or revoke premium by hand. Grants never expire."""
        user = await self._lock_user(db, user_id)
        cancelled = await crud_subscription.cancel_active(db, user_id=user.id)

        if is_premium:
            db.add(Subscription(
                user_id=user.id,
                plan=SubscriptionPlan.ADMIN_ACTIVATE,
                provider=None,
                tx_ref=None,
                status=SubscriptionStatus.ACTIVE,
                start_at=utcnow(),
                end_at=None,
            ))
        user.is_premium = is_premium
        await self._commit_activation(db, user.id)

        self.logger.info(f"Admin set premium={is_premium} for user {user.id} ({cancelled} subscription(s) cancelled)")
        return user


subscription_service = SubscriptionService()
