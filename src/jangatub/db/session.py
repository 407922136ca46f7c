"""Database session management."""
from typing import AsyncGenerator, Annotated
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool
from sqlalchemy import create_engine, event
from fastapi import Depends

from src.jangatub.core.config import settings


def sync_database_url(url: str) -> str:
    """Map an async driver URL to its synchronous counterpart."""
    return url.replace("+asyncpg", "+psycopg2").replace("+aiosqlite", "")


# SQLite connections are opened per session so tests never share a
# connection across event loops.
_engine_options = {"poolclass": NullPool} if settings.DATABASE_URL.startswith("sqlite") else {"pool_pre_ping": True}

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    future=True,
    **_engine_options
)

if settings.DATABASE_URL.startswith("sqlite"):
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

# Create sync engine for Alembic migrations
sync_engine = create_engine(
    sync_database_url(settings.DATABASE_URL),
    echo=False,
    future=True,
    **_engine_options
)

# Create session factory
AsyncSessionLocal = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get async database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


SessionDep = Annotated[AsyncSession, Depends(get_db)]
