from typing import Optional

from pydantic import Field

from .base import BaseSchema, CatalogueRef, ResponseBase
from .enums import DocumentType

SLUG_PATTERN = r"^[a-z0-9-]+$"


# Levels and subjects

class CatalogueEntryCreate(BaseSchema):
    name: str = Field(min_length=2, max_length=100)
    slug: str = Field(min_length=2, max_length=100, pattern=SLUG_PATTERN)


class CatalogueEntryUpdate(BaseSchema):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    slug: Optional[str] = Field(default=None, min_length=2, max_length=100, pattern=SLUG_PATTERN)


class CatalogueEntryResponse(ResponseBase):
    slug: str
    name: str
    document_count: int = 0
    quiz_count: int = 0


# Documents

class DocumentCreate(BaseSchema):
    title: str = Field(min_length=3, max_length=300)
    year: int = Field(ge=1990, le=2030)
    level_id: str = Field(min_length=1)
    subject_id: str = Field(min_length=1)
    type: DocumentType
    pdf_url: str = Field(min_length=1, pattern=r"^https?://")
    image_url: Optional[str] = Field(default=None, pattern=r"^https?://")
    is_premium: bool = False


class DocumentUpdate(BaseSchema):
    title: Optional[str] = Field(default=None, min_length=3, max_length=300)
    year: Optional[int] = Field(default=None, ge=1990, le=2030)
    level_id: Optional[str] = None
    subject_id: Optional[str] = None
    type: Optional[DocumentType] = None
    pdf_url: Optional[str] = Field(default=None, pattern=r"^https?://")
    image_url: Optional[str] = Field(default=None, pattern=r"^https?://")
    is_premium: Optional[bool] = None


class DocumentResponse(ResponseBase):
    title: str
    type: DocumentType
    year: int
    is_premium: bool
    pdf_url: str
    image_url: Optional[str] = None
    level: CatalogueRef
    subject: CatalogueRef


# Favorites

class FavoriteToggleRequest(BaseSchema):
    document_id: str = Field(min_length=1)


class FavoriteToggleResponse(BaseSchema):
    favorited: bool


# Pack download

class PackRequest(BaseSchema):
    level_slug: str = Field(min_length=1)
    subject_slug: Optional[str] = None
    year: Optional[int] = None


class PackDocument(BaseSchema):
    id: str
    title: str
    type: DocumentType
    year: int
    subject: str
    pdf_url: str


class PackManifest(BaseSchema):
    pack_name: str
    total_documents: int
    documents: list[PackDocument]
