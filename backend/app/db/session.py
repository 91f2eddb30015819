"""
Database session configuration.

Async SQLAlchemy engine and session factory for the trip store. PostgreSQL
(asyncpg) in production; a ``sqlite+aiosqlite`` URL works for local runs.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from backend.app.core.config import settings


def _engine_options(database_url: str) -> dict:
    if database_url.startswith("sqlite"):
        # SQLite pools do not take size/overflow arguments
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": True,
    }


def enable_sqlite_foreign_keys(sync_engine) -> None:
    """Turn on FK enforcement so contact -> trip -> location cascades fire."""

    @event.listens_for(sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_async_engine(
    settings.database_url,
    echo=settings.db_echo,
    **_engine_options(settings.database_url),
)

if settings.database_url.startswith("sqlite"):
    enable_sqlite_foreign_keys(engine.sync_engine)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

# Declarative base for models
Base = declarative_base()


async def get_db():
    """
    FastAPI dependency for database sessions.

    Yields an async database session and ensures it's properly closed.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
