from datetime import datetime, timezone
from enum import Enum
from typing import Type
from uuid import uuid4

from sqlalchemy import Column, DateTime, Enum as SQLEnum, String
from sqlalchemy.ext.declarative import declared_attr
from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    """Naive UTC timestamp, the representation stored in every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def generate_id() -> str:
    return str(uuid4())


def enum_type(enum_cls: Type[Enum]) -> SQLEnum:
    """Store enum values (not member names) as plain strings."""
    return SQLEnum(
        enum_cls,
        native_enum=False,
        values_callable=lambda members: [member.value for member in members],
        length=32,
    )


class Base(DeclarativeBase):
    """Base class for all models."""

    @declared_attr
    def __tablename__(cls) -> str:
        """Generate table name from class name."""
        return cls.__name__.lower() + "s"

    id = Column(String(36), primary_key=True, default=generate_id)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
