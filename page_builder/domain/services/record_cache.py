"""
Existing-record cache: the snapshot of a page's stored blocks.

Loaded once per reconciliation cycle and memoized until invalidated. The
snapshot drives deletion-set computation, so it must be invalidated before a
fresh load and after a save pass.
"""

from typing import Any, Callable, Dict, Optional
import logging

from page_builder.persistence.models import StoredBlock
from page_builder.persistence.relationship import BlockRelationship

logger = logging.getLogger(__name__)


class ExistingRecordCache:
    """
    Memoized, ordered mapping of "record-<id>" -> StoredBlock for one page.

    Without an order column the order is persistence-defined.
    """

    def __init__(
        self,
        relationship: BlockRelationship,
        order_column: Optional[str] = None,
        modify_query: Optional[Callable[[Any], Any]] = None,
    ):
        self._relationship = relationship
        self._order_column = order_column
        self._modify_query = modify_query
        self._records: Optional[Dict[str, StoredBlock]] = None

    @property
    def relationship(self) -> BlockRelationship:
        return self._relationship

    @property
    def is_loaded(self) -> bool:
        return self._records is not None

    async def load(self) -> Dict[str, StoredBlock]:
        """Fetch the snapshot from storage, replacing any memoized one."""
        records = await self._relationship.fetch_ordered(
            order_column=self._order_column,
            modify_query=self._modify_query,
        )
        self._records = {record.key: record for record in records}
        logger.debug(
            f"Loaded {len(self._records)} existing block(s) for {self._relationship!r}"
        )
        return self._records

    async def get(self) -> Dict[str, StoredBlock]:
        if self._records is None:
            return await self.load()
        return self._records

    def invalidate(self) -> None:
        self._records = None

    # Name used by the editor API
    clear = invalidate
