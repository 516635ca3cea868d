"""A page's block collection, bound to one parent page."""

from typing import Collection, List, Optional

from page_builder.persistence.models import StoredBlock
from page_builder.persistence.repositories import BlockRepository, ModifyQuery


class BlockRelationship:
    """
    Relational child collection of one page.

    Wraps a BlockRepository so callers never pass the parent key around;
    records made or saved through it always carry the page's foreign key.
    """

    def __init__(self, repository: BlockRepository, page_id: int, name: str = "blocks"):
        self.repository = repository
        self.page_id = page_id
        self.name = name

    async def fetch_ordered(
        self,
        order_column: Optional[str] = None,
        modify_query: Optional[ModifyQuery] = None,
    ) -> List[StoredBlock]:
        return await self.repository.fetch_ordered(self.page_id, order_column, modify_query)

    async def delete_where_key_in(self, block_ids: Collection[int]) -> int:
        return await self.repository.delete_where_key_in(self.page_id, block_ids)

    def make(self) -> StoredBlock:
        return self.repository.make_record(self.page_id)

    async def save(self, record: StoredBlock) -> StoredBlock:
        """Insert a new record under this page."""
        record.page_id = self.page_id
        return await self.repository.insert(record)

    async def update(self, record: StoredBlock) -> None:
        await self.repository.update(record)

    async def cascade_save_children(self, record: StoredBlock) -> None:
        await self.repository.cascade_save_children(record)

    def __repr__(self) -> str:
        return f"<BlockRelationship(name={self.name!r}, page_id={self.page_id})>"
