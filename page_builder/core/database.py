"""
Database configuration and session management.

Provides async database sessions and metadata for ORM models.

DATABASE_URL is read from page_builder.core.config (single resolution path).
"""
from typing import Any, AsyncGenerator, Dict
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
import logging

from page_builder.core.config import DATABASE_URL, DB_POOL_SIZE, DB_MAX_OVERFLOW

logger = logging.getLogger(__name__)

# Create declarative base for ORM models
Base = declarative_base()

# Convert to async URL if needed
if DATABASE_URL.startswith('postgresql://'):
    ASYNC_DATABASE_URL = DATABASE_URL.replace('postgresql://', 'postgresql+asyncpg://')
else:
    ASYNC_DATABASE_URL = DATABASE_URL

_engine_options: Dict[str, Any] = {"echo": False, "pool_pre_ping": True}

# Pool sizing and server settings only apply to the asyncpg driver
if ASYNC_DATABASE_URL.startswith('postgresql+asyncpg://'):
    _engine_options.update(
        pool_size=DB_POOL_SIZE,
        max_overflow=DB_MAX_OVERFLOW,
        connect_args={"server_settings": {"client_encoding": "utf8"}},
    )

engine = create_async_engine(ASYNC_DATABASE_URL, **_engine_options)

# Create async session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for database sessions.

    Yields:
        AsyncSession: Database session
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_database():
    """
    Initialize database - create tables if they don't exist.

    Note: In production, use Alembic migrations instead.
    This is mainly for development/testing.
    """
    # Every model that inherits from Base must be imported here,
    # otherwise Base.metadata.create_all() won't know about its table.
    from page_builder.api.models.page import Page  # noqa: F401
    from page_builder.api.models.block import Block  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database initialized")
