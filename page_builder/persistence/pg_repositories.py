"""PostgreSQL repository implementation for stored blocks.

Works against any SQLAlchemy async dialect; tests run it on aiosqlite.
"""

from typing import Collection, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from page_builder.persistence.models import StoredBlock, TranslatableBlock
from page_builder.persistence.repositories import (
    BlockNotFoundError,
    InMemoryBlockRepository,
    ModifyQuery,
)
from page_builder.api.models.block import Block


def _orm_to_stored_block(orm_block: Block, translatable: bool = False) -> StoredBlock:
    """Convert ORM Block to StoredBlock domain model."""
    if translatable:
        return TranslatableBlock(
            block_id=orm_block.id,
            page_id=orm_block.page_id,
            type=orm_block.type,
            position=orm_block.position,
            content=dict(orm_block.content or {}),
            translations={
                attribute: dict(values or {})
                for attribute, values in (orm_block.translations or {}).items()
            },
        )
    return StoredBlock(
        block_id=orm_block.id,
        page_id=orm_block.page_id,
        type=orm_block.type,
        position=orm_block.position,
        content=dict(orm_block.content or {}),
    )


def _stored_to_orm_block(stored: StoredBlock, orm_block: Optional[Block] = None) -> Block:
    """Convert StoredBlock to ORM Block."""
    if orm_block is None:
        orm_block = Block()

    if stored.block_id is not None:
        orm_block.id = stored.block_id
    orm_block.page_id = stored.page_id
    orm_block.type = stored.type
    orm_block.position = stored.position
    # Fresh containers so JSON change detection sees the assignment
    orm_block.content = dict(stored.content or {})

    if isinstance(stored, TranslatableBlock):
        orm_block.translations = {
            attribute: dict(values)
            for attribute, values in stored.translations.items()
        } or None

    return orm_block


class PostgresBlockRepository:
    """PostgreSQL implementation of BlockRepository."""

    def __init__(self, session: AsyncSession, translatable: bool = False):
        """
        Initialize repository.

        Args:
            session: AsyncSession owned by the caller (repository does not commit
                unless asked to)
            translatable: Return TranslatableBlock records
        """
        self._session = session
        self._translatable = translatable

    async def fetch_ordered(
        self,
        page_id: int,
        order_column: Optional[str] = None,
        modify_query: Optional[ModifyQuery] = None,
    ) -> List[StoredBlock]:
        """All blocks of a page; modify_query receives and returns a Select."""
        query = select(Block).where(Block.page_id == page_id)

        if modify_query is not None:
            query = modify_query(query)
            if query is None:
                query = select(Block).where(Block.page_id == page_id)

        if order_column:
            query = query.order_by(getattr(Block, order_column), Block.id)

        result = await self._session.execute(query)
        return [
            _orm_to_stored_block(row, self._translatable)
            for row in result.scalars().all()
        ]

    async def delete_where_key_in(self, page_id: int, block_ids: Collection[int]) -> int:
        """Delete matched blocks one by one so ORM cascades run."""
        if not block_ids:
            return 0

        result = await self._session.execute(
            select(Block).where(
                Block.page_id == page_id,
                Block.id.in_(list(block_ids)),
            )
        )
        rows = result.scalars().all()
        for row in rows:
            await self._session.delete(row)
        await self._session.flush()
        return len(rows)

    async def insert(self, record: StoredBlock) -> StoredBlock:
        orm_block = _stored_to_orm_block(record)
        self._session.add(orm_block)
        await self._session.flush()
        record.block_id = orm_block.id
        return record

    async def update(self, record: StoredBlock) -> None:
        orm_block = await self._session.get(Block, record.block_id)
        if orm_block is None:
            raise BlockNotFoundError(f"Block not found: {record.block_id}")
        _stored_to_orm_block(record, orm_block)
        await self._session.flush()

    async def cascade_save_children(self, record: StoredBlock) -> None:
        # Relationships hanging off a block are persisted by the ORM's own cascade.
        await self._session.flush()

    def make_record(self, page_id: int) -> StoredBlock:
        if self._translatable:
            return TranslatableBlock(block_id=None, page_id=page_id, type="")
        return StoredBlock(block_id=None, page_id=page_id, type="")

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()


def create_repository(
    session: Optional[AsyncSession],
    use_postgres: bool = True,
    translatable: bool = False,
):
    """
    Factory function to create a block repository.

    Args:
        session: AsyncSession for the PostgreSQL implementation
        use_postgres: If True, use PostgreSQL. Otherwise in-memory.
        translatable: Store locale-aware records

    Returns:
        BlockRepository implementation
    """
    if use_postgres:
        return PostgresBlockRepository(session, translatable=translatable)
    return InMemoryBlockRepository(translatable=translatable)
