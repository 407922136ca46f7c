from datetime import datetime
from math import ceil
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class BaseSchema(BaseModel):
    """Base schema with common fields.

    Attributes are snake_case in Python and camelCase on the wire.
    """
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class ResponseBase(BaseSchema):
    """Base class for response schemas."""
    id: str
    created_at: datetime
    updated_at: datetime


class CatalogueRef(BaseSchema):
    """Slug/name pair embedded in documents and quizzes."""
    id: str
    slug: str
    name: str


class Pagination(BaseSchema):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, total_pages=ceil(total / limit) if limit else 0)


class Page(BaseSchema, Generic[T]):
    """Paginated list response."""
    items: list[T]
    pagination: Pagination


class MessageResponse(BaseSchema):
    success: bool = True
    message: str
