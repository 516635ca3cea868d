"""
Shared pytest fixtures for all tests.

Provides database isolation and common test fixtures.
"""

import os

# Config is read at import time; point it at an in-memory database first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from page_builder.domain.registry import default_registry
from page_builder.persistence import InMemoryBlockRepository


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture(scope="function")
async def db_session():
    """
    Fresh async in-memory SQLite database for each test.

    Uses StaticPool so every session shares the single in-memory connection.
    """
    from page_builder.core.database import Base
    from page_builder.api.models import Page, Block  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def page(db_session):
    """A persisted page to hang blocks off."""
    from page_builder.api.models import Page

    page = Page(title="Home")
    db_session.add(page)
    await db_session.commit()
    await db_session.refresh(page)
    return page


# =============================================================================
# DOMAIN FIXTURES
# =============================================================================

@pytest.fixture
def registry():
    """Registry with the built-in text, image and quote blocks."""
    return default_registry()


@pytest.fixture
def repository():
    """In-memory block repository."""
    return InMemoryBlockRepository()


@pytest.fixture
def translatable_repository():
    """In-memory block repository storing locale-aware records."""
    return InMemoryBlockRepository(translatable=True)


@pytest.fixture
def page_id():
    return 1
