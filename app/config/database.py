"""
Database configuration.

Provides async SQLAlchemy engine and session factory.
"""

from collections.abc import AsyncGenerator
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.config.settings import settings
from app.models.base import Base


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create async engine for the given URL.

    SQLite (aiosqlite) does not accept the pool sizing arguments,
    so they are only applied to PostgreSQL.
    """
    kwargs: dict[str, Any] = {"echo": echo}
    if database_url.startswith("postgresql"):
        kwargs.update(
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
            pool_recycle=300,  # Recycle connections every 5 minutes
            pool_timeout=30,  # Wait max 30 seconds for connection
        )
    return create_async_engine(database_url, **kwargs)


def build_session_maker(
    bind: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create session factory bound to engine."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


# Create async engine
engine: AsyncEngine = build_engine(
    settings.async_database_url, echo=settings.database_echo
)

# Create async session factory
async_session_maker = build_session_maker(engine)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Get async database session.

    Yields:
        AsyncSession: Database session
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error(f"Database session error: {e}")
            raise
        finally:
            await session.close()


async def init_db(create_tables: bool = False) -> None:
    """
    Initialize database.

    Args:
        create_tables: Create tables from metadata (local dev only,
            production schema is managed by Alembic)
    """
    # Register all models on the metadata
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        if create_tables:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database initialized")


async def close_db() -> None:
    """Close database connection."""
    await engine.dispose()
    logger.info("Database connection closed")
