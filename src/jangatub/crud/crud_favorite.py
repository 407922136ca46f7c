from typing import Optional, Sequence

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.jangatub.crud.base import CRUDBase
from src.jangatub.models.core import Document, Favorite
from src.jangatub.schemas import FavoriteToggleRequest


class CRUDFavorite(CRUDBase[Favorite, FavoriteToggleRequest, BaseModel]):

    async def get_link(self, db: AsyncSession, *, user_id: str, document_id: str) -> Optional[Favorite]:
        stmt = select(Favorite).where(Favorite.user_id == user_id, Favorite.document_id == document_id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def count_for_user(self, db: AsyncSession, *, user_id: str) -> int:
        return await self.count_matching(db, select(Favorite.id).where(Favorite.user_id == user_id))

    async def documents_for_user(self, db: AsyncSession, *, user_id: str) -> Sequence[Document]:
        """Favorited documents, most recently favorited first."""
        stmt = (
            select(Document)
            .join(Favorite, Favorite.document_id == Document.id)
            .options(selectinload(Document.level), selectinload(Document.subject))
            .where(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc())
        )
        result = await db.execute(stmt)
        return result.scalars().all()


favorite = CRUDFavorite(Favorite)
