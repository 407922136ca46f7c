from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.jangatub.crud.base import CRUDBase
from src.jangatub.models.core import User
from src.jangatub.schemas import RegisterRequest, PremiumOverrideRequest


class CRUDUser(CRUDBase[User, RegisterRequest, PremiumOverrideRequest]):
    """CRUD operations for user management."""

    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[User]:
        """Get a user by email."""
        stmt = select(User).where(User.email == email.lower())
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_for_update(self, db: AsyncSession, *, id: str) -> Optional[User]:
        """Load a user and lock its row until the transaction ends."""
        stmt = select(User).where(User.id == id).with_for_update()
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def search(
        self, db: AsyncSession, *, query: Optional[str] = None, skip: int = 0, limit: int = 20
    ) -> tuple[Sequence[User], int]:
        """Page of users, newest first, optionally filtered by name or email."""
        stmt = select(User)
        if query:
            pattern = f"%{query.lower()}%"
            stmt = stmt.where(User.email.ilike(pattern) | User.name.ilike(pattern))
        total = await self.count_matching(db, stmt)
        result = await db.execute(stmt.order_by(User.created_at.desc()).offset(skip).limit(limit))
        return result.scalars().all(), total


user = CRUDUser(User)
