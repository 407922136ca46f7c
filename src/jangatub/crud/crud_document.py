from typing import Optional, Sequence

from sqlalchemy import case, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager, selectinload

from src.jangatub.crud.base import CRUDBase
from src.jangatub.models.core import Document, Level, Subject
from src.jangatub.schemas import DocumentCreate, DocumentUpdate
from src.jangatub.schemas.enums import DocumentType

# Papers sort before their corrections.
TYPE_ORDER = case((Document.type == DocumentType.SUBJECT, 0), else_=1)


class CRUDDocument(CRUDBase[Document, DocumentCreate, DocumentUpdate]):
    """CRUD operations for exam documents."""

    async def get_with_relations(self, db: AsyncSession, *, id: str) -> Optional[Document]:
        stmt = (
            select(Document)
            .options(selectinload(Document.level), selectinload(Document.subject))
            .where(Document.id == id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_page(
        self, db: AsyncSession, *, skip: int = 0, limit: int = 20
    ) -> tuple[Sequence[Document], int]:
        """Page of documents, newest first, with level and subject loaded."""
        stmt = select(Document)
        total = await self.count_matching(db, stmt)
        result = await db.execute(
            stmt.options(selectinload(Document.level), selectinload(Document.subject))
            .order_by(Document.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return result.scalars().all(), total

    async def get_pack(
        self,
        db: AsyncSession,
        *,
        level_slug: str,
        subject_slug: Optional[str] = None,
        year: Optional[int] = None,
    ) -> Sequence[Document]:
        """Documents of a level, ordered by subject name, newest year first, paper before correction."""
        stmt = (
            select(Document)
            .join(Document.level)
            .join(Document.subject)
            .options(contains_eager(Document.level), contains_eager(Document.subject))
            .where(Level.slug == level_slug)
        )
        if subject_slug:
            stmt = stmt.where(Subject.slug == subject_slug)
        if year:
            stmt = stmt.where(Document.year == year)
        stmt = stmt.order_by(Subject.name.asc(), Document.year.desc(), TYPE_ORDER.asc())
        result = await db.execute(stmt)
        return result.scalars().all()


document = CRUDDocument(Document)
