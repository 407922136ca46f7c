from typing import Optional, Sequence

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.jangatub.crud.base import CRUDBase
from src.jangatub.models.badge import Badge, UserBadge


class CRUDBadge(CRUDBase[Badge, BaseModel, BaseModel]):
    """Badges and the awards linking them to users."""

    async def has_badge(self, db: AsyncSession, *, user_id: str, badge_id: str) -> bool:
        stmt = select(UserBadge.id).where(UserBadge.user_id == user_id, UserBadge.badge_id == badge_id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def award(self, db: AsyncSession, *, user_id: str, badge_id: str) -> UserBadge:
        user_badge = UserBadge(user_id=user_id, badge_id=badge_id)
        db.add(user_badge)
        await db.commit()
        return user_badge

    async def awards_for_user(self, db: AsyncSession, *, user_id: str) -> Sequence[UserBadge]:
        """Badges earned by a user, most recent first."""
        stmt = (
            select(UserBadge)
            .options(selectinload(UserBadge.badge))
            .where(UserBadge.user_id == user_id)
            .order_by(UserBadge.earned_at.desc())
        )
        result = await db.execute(stmt)
        return result.scalars().all()

    async def get_by_name(self, db: AsyncSession, *, name: str) -> Optional[Badge]:
        return await self.get_by_key(db, key_field="name", key_value=name)


badge = CRUDBadge(Badge)
