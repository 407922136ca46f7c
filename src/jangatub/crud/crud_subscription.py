from typing import Optional, Sequence

from pydantic import BaseModel
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.jangatub.crud.base import CRUDBase
from src.jangatub.models.base import utcnow
from src.jangatub.models.subscription import Subscription
from src.jangatub.schemas import ActivateRequest
from src.jangatub.schemas.enums import SubscriptionStatus


class CRUDSubscription(CRUDBase[Subscription, ActivateRequest, BaseModel]):
    """Subscription queries.

    Methods here only flush; the lifecycle service owns the transaction.
    """

    async def get_by_tx_ref(self, db: AsyncSession, *, tx_ref: str, for_update: bool = False) -> Optional[Subscription]:
        stmt = select(Subscription).where(Subscription.tx_ref == tx_ref)
        if for_update:
            stmt = stmt.with_for_update()
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def tx_ref_exists(self, db: AsyncSession, *, tx_ref: str) -> bool:
        result = await db.execute(select(Subscription.id).where(Subscription.tx_ref == tx_ref))
        return result.first() is not None

    async def get_active(self, db: AsyncSession, *, user_id: str) -> Optional[Subscription]:
        stmt = select(Subscription).where(
            Subscription.user_id == user_id,
            Subscription.status == SubscriptionStatus.ACTIVE,
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_user(self, db: AsyncSession, *, user_id: str) -> Sequence[Subscription]:
        stmt = select(Subscription).where(Subscription.user_id == user_id).order_by(Subscription.created_at.desc())
        result = await db.execute(stmt)
        return result.scalars().all()

    async def cancel_active(self, db: AsyncSession, *, user_id: str, exclude_id: Optional[str] = None) -> int:
        """Cancel every ACTIVE subscription of the user. Returns the number of rows cancelled."""
        stmt = (
            update(Subscription)
            .where(Subscription.user_id == user_id, Subscription.status == SubscriptionStatus.ACTIVE)
            .values(status=SubscriptionStatus.CANCELLED, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        if exclude_id:
            stmt = stmt.where(Subscription.id != exclude_id)
        result = await db.execute(stmt)
        return result.rowcount


subscription = CRUDSubscription(Subscription)
