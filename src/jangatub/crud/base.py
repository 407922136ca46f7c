from typing import Any, Generic, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.jangatub.models.base import Base

SQLModelType = TypeVar("SQLModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[SQLModelType, CreateSchemaType, UpdateSchemaType]):
    def __init__(self, sql_model: Type[SQLModelType]):
        """
        CRUD object with default methods to Create, Read, Update, Delete (CRUD).
        **Parameters**
        * `sql_model`: A SQLAlchemy model class
        """
        self.sql_model = sql_model

    async def exists(self, db: AsyncSession, *, id: str) -> bool:
        """Check if an object exists."""
        stmt = select(self.sql_model.id).where(self.sql_model.id == id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def count_matching(self, db: AsyncSession, stmt) -> int:
        """Count the rows a select statement would return."""
        result = await db.execute(select(func.count()).select_from(stmt.subquery()))
        return result.scalar_one()

    async def get(self, db: AsyncSession, *, id: str) -> Optional[SQLModelType]:
        """Get a single object by ID."""
        stmt = select(self.sql_model).where(self.sql_model.id == id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_key(self, db: AsyncSession, *, key_field: str, key_value: Any) -> Optional[SQLModelType]:
        """Get by key field and value"""
        stmt = select(self.sql_model).where(getattr(self.sql_model, key_field) == key_value)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, db: AsyncSession, *, obj_in: CreateSchemaType) -> SQLModelType:
        """Create a new object."""
        db_obj = self.sql_model(**obj_in.model_dump())
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self, db: AsyncSession, *, db_obj: SQLModelType, obj_in: UpdateSchemaType
    ) -> SQLModelType:
        """Update an object with the fields explicitly set on ``obj_in``."""
        update_data = obj_in.model_dump(exclude_unset=True)
        for field in update_data:
            setattr(db_obj, field, update_data[field])
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def remove(self, db: AsyncSession, *, id: str) -> Optional[SQLModelType]:
        """Remove an object."""
        obj = await self.get(db, id=id)
        if not obj:
            return None
        await db.delete(obj)
        await db.commit()
        return obj
