"""
BlockReconciler - one save pass of a page's block list.

Reconciles submitted editor state with the cached snapshot of stored blocks:

1. Normalize submitted state (anything malformed becomes empty)
2. Delete every cached record whose key the state no longer references
3. Bind submitted items to descriptors and backing records
4. Walk bound items in submitted order, stamping a dense 1-based position,
   and route each to update-in-place (backing record) or create

The reconciler never commits. The caller owns the transaction and decides
whether to commit or roll back the pass.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, FrozenSet, List, Optional
import logging

from page_builder.domain.registry.block_registry import BlockRegistry
from page_builder.domain.services.block_binder import (
    BoundItem,
    bind,
    normalize_state,
    unresolved_keys,
)
from page_builder.domain.services.block_hooks import BlockHooks
from page_builder.domain.services.field_classifier import CORE_FIELDS, ClassifiedFields, split
from page_builder.domain.services.record_cache import ExistingRecordCache
from page_builder.persistence.models import StoredBlock, TranslatableRecord
from page_builder.persistence.relationship import BlockRelationship

logger = logging.getLogger(__name__)


class BlockPersistError(Exception):
    """Raised when a storage call fails during a reconciliation pass."""
    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Block {operation} failed: {cause}")


@dataclass
class ReconciliationResult:
    """Keys touched by one reconciliation pass."""
    deleted: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)
    created: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        """True when the pass neither deleted nor created anything."""
        return not self.deleted and not self.created

    @property
    def summary(self) -> Dict[str, int]:
        return {
            "deleted": len(self.deleted),
            "updated": len(self.updated),
            "created": len(self.created),
            "skipped": len(self.skipped),
        }


class BlockReconciler:
    """
    Applies submitted block state to a page's stored blocks.

    Dependencies injected for testability.
    """

    def __init__(
        self,
        registry: BlockRegistry,
        hooks: Optional[BlockHooks] = None,
        order_column: Optional[str] = "position",
    ):
        self._registry = registry
        self._hooks = hooks or BlockHooks()
        self._order_column = order_column
        self._core_fields: FrozenSet[str] = CORE_FIELDS | ({order_column} if order_column else set())

    async def save(
        self,
        state: Any,
        cache: ExistingRecordCache,
        relationship: BlockRelationship,
        locale: Optional[str] = None,
    ) -> ReconciliationResult:
        """
        Run one reconciliation pass.

        Args:
            state: Submitted editor state (mapping key -> item, or a list)
            cache: Snapshot of the page's stored blocks
            relationship: The page's block collection
            locale: Active form locale, if any

        Returns:
            ReconciliationResult with the keys deleted, updated, created and skipped

        Raises:
            BlockPersistError: If any storage call fails
        """
        state = normalize_state(state)
        result = ReconciliationResult()

        existing = await self._persist("fetch", cache.get())

        # Step 1: deletions
        doomed = [record for key, record in existing.items() if key not in state]
        if doomed:
            await self._persist(
                "delete",
                relationship.delete_where_key_in([record.block_id for record in doomed]),
            )
            result.deleted = [record.key for record in doomed]

        # Step 2: bind
        result.skipped = unresolved_keys(state, self._registry)
        for key in result.skipped:
            logger.warning(f"Block {key} has unknown type {state[key].get('type')!r}; not saved")

        bound_items = bind(state, existing, self._registry)

        # Step 3: update or create, in submitted order
        position = 1
        for item in bound_items:
            data = item.get_state()

            if self._order_column:
                data[self._order_column] = position
                position += 1

            if item.record is not None:
                await self._update(item, data, relationship, locale)
                result.updated.append(item.key)
                continue

            record = await self._create(item, data, relationship, locale)
            result.created.append(record.key)

        logger.info(f"Reconciled blocks for page {relationship.page_id}: {result.summary}")
        return result

    async def _update(
        self,
        item: BoundItem,
        data: Dict[str, Any],
        relationship: BlockRelationship,
        locale: Optional[str],
    ) -> None:
        record = item.record

        if locale and isinstance(record, TranslatableRecord):
            record.set_locale(locale)

        data = self._hooks.save(data, record)
        # A block never changes type in place
        data["type"] = record.type

        record.fill(self._classify(item, data).as_columns())
        await self._persist("update", relationship.update(record))
        logger.debug(f"Updated block {item.key} at position {record.position}")

    async def _create(
        self,
        item: BoundItem,
        data: Dict[str, Any],
        relationship: BlockRelationship,
        locale: Optional[str],
    ) -> StoredBlock:
        data = self._hooks.create(data, item.descriptor)

        fields = self._classify(item, data).as_columns()
        fields["type"] = item.descriptor.system_name

        record = relationship.make()
        if locale and isinstance(record, TranslatableRecord):
            record.set_locale(locale)
        record.fill(fields)

        record = await self._persist("insert", relationship.save(record))
        await self._persist("cascade", relationship.cascade_save_children(record))

        item.record = record
        logger.debug(f"Created block {record.key} ({record.type}) for item {item.key}")
        return record

    def _classify(self, item: BoundItem, data: Dict[str, Any]) -> ClassifiedFields:
        classified = split(data, self._core_fields)
        classified.content = item.descriptor.apply_content_transform(classified.content)
        return classified

    async def _persist(self, operation: str, pending: Awaitable):
        try:
            return await pending
        except BlockPersistError:
            raise
        except Exception as e:
            logger.error(f"Block {operation} failed: {e}")
            raise BlockPersistError(operation, e) from e
