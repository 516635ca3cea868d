"""Repository protocol and in-memory implementation for stored blocks."""

import copy
from typing import Any, Callable, Collection, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from page_builder.persistence.models import StoredBlock, TranslatableBlock


class BlockNotFoundError(Exception):
    """Block not found in repository."""
    pass


ModifyQuery = Callable[[Any], Any]


@runtime_checkable
class BlockRepository(Protocol):
    """
    Protocol for block storage.

    IMPORTANT: Repository does NOT commit on its own. The caller owns the
    transaction boundary and calls commit() or rollback().
    """

    async def fetch_ordered(
        self,
        page_id: int,
        order_column: Optional[str] = None,
        modify_query: Optional[ModifyQuery] = None,
    ) -> List[StoredBlock]:
        """All blocks of a page, ordered by order_column when given."""
        ...

    async def delete_where_key_in(self, page_id: int, block_ids: Collection[int]) -> int:
        """Delete the page's blocks whose key is in block_ids. Returns count."""
        ...

    async def insert(self, record: StoredBlock) -> StoredBlock:
        """Insert a new block and assign its key."""
        ...

    async def update(self, record: StoredBlock) -> None:
        """Write an existing block back in place."""
        ...

    async def cascade_save_children(self, record: StoredBlock) -> None:
        """Persist anything nested under the block."""
        ...

    def make_record(self, page_id: int) -> StoredBlock:
        """Fresh, unsaved record of the class this repository stores."""
        ...

    async def commit(self) -> None:
        ...

    async def rollback(self) -> None:
        ...


class InMemoryBlockRepository:
    """
    In-memory repository with real storage semantics.

    For Tier-1 tests: writes go to a working copy that commit() publishes
    and rollback() discards. Every call is journaled in `calls`.
    """

    def __init__(self, translatable: bool = False):
        self._translatable = translatable
        self._committed: Dict[int, StoredBlock] = {}
        self._working: Dict[int, StoredBlock] = {}
        self._next_id = 1
        self._failures: Dict[str, int] = {}
        self._op_counts: Dict[str, int] = {}
        self.calls: List[Tuple[str, Any]] = []

    # ------------------------------------------------------------------
    # Test helpers
    # ------------------------------------------------------------------

    def add_existing(
        self,
        page_id: int,
        type: str,
        content: Optional[Dict[str, Any]] = None,
        position: Optional[int] = None,
        translations: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> StoredBlock:
        """Seed a committed block directly."""
        record = self.make_record(page_id)
        record.type = type
        record.position = position
        record.content = dict(content or {})
        if translations and isinstance(record, TranslatableBlock):
            record.translations = copy.deepcopy(translations)
        record.block_id = self._allocate_id()
        self._committed[record.block_id] = copy.deepcopy(record)
        self._working[record.block_id] = copy.deepcopy(record)
        return copy.deepcopy(record)

    def fail_on(self, operation: str, after: int = 0) -> None:
        """Raise on the (after + 1)-th call of operation."""
        self._failures[operation] = after

    def committed(self, page_id: int) -> List[StoredBlock]:
        rows = [r for r in self._committed.values() if r.page_id == page_id]
        return [copy.deepcopy(r) for r in sorted(rows, key=_position_sort_key)]

    def calls_of(self, operation: str) -> List[Any]:
        return [detail for name, detail in self.calls if name == operation]

    # ------------------------------------------------------------------
    # BlockRepository
    # ------------------------------------------------------------------

    async def fetch_ordered(
        self,
        page_id: int,
        order_column: Optional[str] = None,
        modify_query: Optional[ModifyQuery] = None,
    ) -> List[StoredBlock]:
        self._record_call("fetch", page_id)
        rows = [copy.deepcopy(r) for r in self._working.values() if r.page_id == page_id]
        if modify_query is not None:
            modified = modify_query(rows)
            if modified is not None:
                rows = list(modified)
        if order_column:
            rows.sort(key=lambda r: (getattr(r, order_column) is None, getattr(r, order_column) or 0))
        return list(rows)

    async def delete_where_key_in(self, page_id: int, block_ids: Collection[int]) -> int:
        wanted = set(block_ids)
        self._record_call("delete", sorted(wanted))
        matched = [
            block_id for block_id, row in self._working.items()
            if row.page_id == page_id and block_id in wanted
        ]
        for block_id in matched:
            del self._working[block_id]
        return len(matched)

    async def insert(self, record: StoredBlock) -> StoredBlock:
        self._record_call("insert", record.type)
        record.block_id = self._allocate_id()
        self._working[record.block_id] = copy.deepcopy(record)
        return record

    async def update(self, record: StoredBlock) -> None:
        self._record_call("update", record.block_id)
        if record.block_id not in self._working:
            raise BlockNotFoundError(f"Block not found: {record.block_id}")
        self._working[record.block_id] = copy.deepcopy(record)

    async def cascade_save_children(self, record: StoredBlock) -> None:
        self._record_call("cascade", record.block_id)

    def make_record(self, page_id: int) -> StoredBlock:
        if self._translatable:
            return TranslatableBlock(block_id=None, page_id=page_id, type="")
        return StoredBlock(block_id=None, page_id=page_id, type="")

    async def commit(self) -> None:
        self._record_call("commit", None)
        self._committed = copy.deepcopy(self._working)

    async def rollback(self) -> None:
        self._record_call("rollback", None)
        self._working = copy.deepcopy(self._committed)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _allocate_id(self) -> int:
        block_id = self._next_id
        self._next_id += 1
        return block_id

    def _record_call(self, operation: str, detail: Any) -> None:
        self.calls.append((operation, detail))
        count = self._op_counts.get(operation, 0)
        self._op_counts[operation] = count + 1
        if operation in self._failures and count >= self._failures[operation]:
            raise RuntimeError(f"simulated {operation} failure")


def _position_sort_key(record: StoredBlock):
    return (record.position is None, record.position or 0, record.block_id or 0)
