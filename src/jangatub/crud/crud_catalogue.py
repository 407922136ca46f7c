from typing import Optional, Type, Union

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.jangatub.crud.base import CRUDBase
from src.jangatub.models.core import Document, Level, Subject
from src.jangatub.models.quiz import Quiz
from src.jangatub.schemas import CatalogueEntryCreate, CatalogueEntryUpdate

CatalogueModel = Union[Level, Subject]


class CRUDCatalogue(CRUDBase[CatalogueModel, CatalogueEntryCreate, CatalogueEntryUpdate]):
    """Levels and subjects share the same shape: a unique slug and a name."""

    def __init__(self, sql_model: Type[CatalogueModel], foreign_key: str):
        super().__init__(sql_model)
        self.foreign_key = foreign_key

    async def get_by_slug(self, db: AsyncSession, *, slug: str) -> Optional[CatalogueModel]:
        return await self.get_by_key(db, key_field="slug", key_value=slug)

    def _usage_columns(self):
        document_count = (
            select(func.count(Document.id))
            .where(getattr(Document, self.foreign_key) == self.sql_model.id)
            .correlate(self.sql_model)
            .scalar_subquery()
        )
        quiz_count = (
            select(func.count(Quiz.id))
            .where(getattr(Quiz, self.foreign_key) == self.sql_model.id)
            .correlate(self.sql_model)
            .scalar_subquery()
        )
        return document_count, quiz_count

    async def list_with_usage(self, db: AsyncSession) -> list[tuple[CatalogueModel, int, int]]:
        """All entries by name with their document and quiz counts."""
        document_count, quiz_count = self._usage_columns()
        stmt = select(self.sql_model, document_count, quiz_count).order_by(self.sql_model.name.asc())
        result = await db.execute(stmt)
        return [(row[0], row[1], row[2]) for row in result.all()]

    async def usage(self, db: AsyncSession, *, id: str) -> tuple[int, int]:
        """Number of documents and quizzes referencing the entry."""
        documents = await db.execute(
            select(func.count(Document.id)).where(getattr(Document, self.foreign_key) == id)
        )
        quizzes = await db.execute(
            select(func.count(Quiz.id)).where(getattr(Quiz, self.foreign_key) == id)
        )
        return documents.scalar_one(), quizzes.scalar_one()


level = CRUDCatalogue(Level, "level_id")
subject = CRUDCatalogue(Subject, "subject_id")
