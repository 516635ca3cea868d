"""
BlockEditor - the editor-facing facade over a page's block list.

Holds configuration (block types, relationship, hooks, ordering, locale,
preview view) and the request-scoped editor state, and wires the
record cache, hydrator, binder, reconciler and preview renderer together.

Typical cycle:
    editor = BlockEditor(repository).blocks(BUILTIN_BLOCKS).model(page_id)
    await editor.load_state()
    editor.set_state(submitted)
    result = await editor.save_relationships()
"""

import copy
from typing import Any, Callable, Dict, Iterable, List, Optional
import logging

from page_builder.core.logging import LogContext
from page_builder.domain.registry.block_registry import (
    BlockDescriptor,
    BlockRegistry,
    UnsupportedConfigurationError,
)
from page_builder.domain.services.block_binder import (
    BoundItem,
    bind,
    new_item_key,
    normalize_state,
)
from page_builder.domain.services.block_hooks import BlockHooks
from page_builder.domain.services.block_reconciler import (
    BlockPersistError,
    BlockReconciler,
    ReconciliationResult,
)
from page_builder.domain.services.field_classifier import DATA_KEY
from page_builder.domain.services.preview_renderer import PreviewRenderer
from page_builder.domain.services.record_cache import ExistingRecordCache
from page_builder.domain.services.state_hydrator import hydrate
from page_builder.persistence.models import StoredBlock
from page_builder.persistence.relationship import BlockRelationship
from page_builder.persistence.repositories import BlockRepository

logger = logging.getLogger(__name__)

SUPPORTED_ORDER_COLUMNS = ("position",)


class RelationshipNotConfiguredError(Exception):
    """Raised when the editor has no relationship, repository or page to work on."""
    pass


class BlockEditor:
    """
    Block list editor bound to one page's block relationship.

    Configuration methods return self so they can be chained.
    """

    def __init__(
        self,
        repository: Optional[BlockRepository] = None,
        registry: Optional[BlockRegistry] = None,
        name: str = "blocks",
        renderer: Optional[PreviewRenderer] = None,
    ):
        self.name = name
        self._repository = repository
        self._registry = registry or BlockRegistry()
        self._renderer = renderer or PreviewRenderer()
        self._page_id: Optional[int] = None
        self._relationship_name: Optional[str] = None
        self._hooks = BlockHooks()
        self._order_column: Optional[str] = "position"
        self._render_in_view: Optional[str] = "preview"
        self._locale: Optional[str] = None
        self._state: Dict[str, Dict[str, Any]] = {}
        self._cache: Optional[ExistingRecordCache] = None

        self.relationship(name)

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def blocks(self, blocks: Iterable[BlockDescriptor]) -> "BlockEditor":
        if callable(blocks):
            raise UnsupportedConfigurationError("Not supported yet.")
        self._registry = BlockRegistry(blocks)
        return self

    def relationship(
        self,
        name: Optional[str] = None,
        modify_query: Optional[Callable[[Any], Any]] = None,
    ) -> "BlockEditor":
        self._relationship_name = name or self.name
        self._hooks = self._hooks.with_hook("modify_query", modify_query)
        self._reset_cache()
        return self

    def model(self, page_id: Optional[int]) -> "BlockEditor":
        """Bind the editor to a parent page."""
        self._page_id = page_id
        self._reset_cache()
        return self

    def order_column(self, name: Optional[str]) -> "BlockEditor":
        if name is not None and name not in SUPPORTED_ORDER_COLUMNS:
            raise UnsupportedConfigurationError(f"Unsupported order column: {name}")
        self._order_column = name
        self._reset_cache()
        return self

    def render_in_view(self, view: Optional[str]) -> "BlockEditor":
        self._render_in_view = view
        return self

    def locale(self, locale: Optional[str]) -> "BlockEditor":
        self._locale = locale
        return self

    def on_before_fill(self, hook: Optional[Callable[..., Dict[str, Any]]]) -> "BlockEditor":
        self._hooks = self._hooks.with_hook("before_fill", hook)
        return self

    def on_before_save(self, hook: Optional[Callable[..., Dict[str, Any]]]) -> "BlockEditor":
        self._hooks = self._hooks.with_hook("before_save", hook)
        return self

    def on_before_create(self, hook: Optional[Callable[..., Dict[str, Any]]]) -> "BlockEditor":
        self._hooks = self._hooks.with_hook("before_create", hook)
        return self

    def on_modify_query(self, hook: Optional[Callable[[Any], Any]]) -> "BlockEditor":
        self._hooks = self._hooks.with_hook("modify_query", hook)
        self._reset_cache()
        return self

    @property
    def registry(self) -> BlockRegistry:
        return self._registry

    def get_order_column(self) -> Optional[str]:
        return self._order_column

    def get_locale(self) -> Optional[str]:
        return self._locale

    # =========================================================================
    # RELATIONSHIP & CACHE
    # =========================================================================

    def has_relationship(self) -> bool:
        return bool(self._relationship_name) and self._repository is not None and self._page_id is not None

    def get_relationship(self) -> Optional[BlockRelationship]:
        if not self.has_relationship():
            return None
        if self._cache is not None:
            return self._cache.relationship
        return BlockRelationship(self._repository, self._page_id, self._relationship_name)

    async def get_cached_existing_records(self) -> Dict[str, StoredBlock]:
        return await self._get_cache().get()

    def clear_cached_existing_records(self) -> None:
        if self._cache is not None:
            self._cache.invalidate()

    def _get_cache(self) -> ExistingRecordCache:
        relationship = self.get_relationship()
        if relationship is None:
            raise RelationshipNotConfiguredError(
                f"Block editor '{self.name}' needs a relationship, repository and page"
            )
        if self._cache is None:
            self._cache = ExistingRecordCache(
                relationship,
                order_column=self._order_column,
                modify_query=self._hooks.query,
            )
        return self._cache

    def _reset_cache(self) -> None:
        # The relationship binding changed identity; never reuse the old snapshot
        self._cache = None

    # =========================================================================
    # STATE
    # =========================================================================

    async def load_state(self) -> Dict[str, Dict[str, Any]]:
        """Reload editor state from storage."""
        self.clear_cached_existing_records()
        await self.fill_from_relationship()
        return self._state

    async def fill_from_relationship(self) -> None:
        records = await self.get_cached_existing_records()
        self._state = hydrate(records, locale=self._locale, hooks=self._hooks)

    def get_state(self) -> Dict[str, Dict[str, Any]]:
        return self._state

    def set_state(self, state: Any) -> "BlockEditor":
        self._state = normalize_state(state)
        return self

    async def get_bound_items(self) -> List[BoundItem]:
        records = await self.get_cached_existing_records() if self.has_relationship() else {}
        return bind(self._state, records, self._registry)

    # =========================================================================
    # BUILDER ACTIONS
    # =========================================================================

    def add_block(
        self,
        type_name: str,
        data: Optional[Dict[str, Any]] = None,
        after: Optional[str] = None,
    ) -> str:
        """Append (or insert after `after`) a new block; returns its key."""
        descriptor = self._registry.get(type_name)
        key = new_item_key()
        self._insert_item(key, {"type": descriptor.system_name, DATA_KEY: dict(data or {})}, after)
        return key

    def delete_block(self, key: str) -> None:
        self._state.pop(key, None)

    def move_block(self, key: str, offset: int) -> None:
        """Move a block up (negative offset) or down, clamped to the list bounds."""
        keys = list(self._state)
        if key not in keys:
            return
        index = keys.index(key)
        keys.insert(max(0, min(len(keys) - 1, index + offset)), keys.pop(index))
        self._state = {k: self._state[k] for k in keys}

    def clone_block(self, key: str) -> str:
        source = self._state[key]
        clone_key = new_item_key()
        clone = {"type": source.get("type"), DATA_KEY: copy.deepcopy(source.get(DATA_KEY) or {})}
        self._insert_item(clone_key, clone, after=key)
        return clone_key

    def _insert_item(self, key: str, item: Dict[str, Any], after: Optional[str]) -> None:
        if after is None or after not in self._state:
            self._state[key] = item
            return
        rebuilt: Dict[str, Dict[str, Any]] = {}
        for existing_key, existing_item in self._state.items():
            rebuilt[existing_key] = existing_item
            if existing_key == after:
                rebuilt[key] = item
        self._state = rebuilt

    # =========================================================================
    # SAVE
    # =========================================================================

    async def save_relationships(self, reload: bool = True) -> ReconciliationResult:
        """
        Reconcile editor state with storage in one transaction.

        Commits once after the whole pass. Any failure rolls the pass back and
        raises BlockPersistError; errors from hooks or content transforms are
        wrapped with operation "save". The snapshot is invalidated either way.
        With reload, editor state is re-hydrated from the new snapshot so new
        blocks are addressed by their record keys.
        """
        cache = self._get_cache()
        relationship = cache.relationship
        reconciler = BlockReconciler(self._registry, self._hooks, self._order_column)

        with LogContext(page_id=relationship.page_id, relationship=relationship.name):
            try:
                result = await reconciler.save(self._state, cache, relationship, self._locale)
                await self._commit()
            except BlockPersistError:
                await self._rollback(relationship)
                raise
            except Exception as e:
                await self._rollback(relationship)
                raise BlockPersistError("save", e) from e
            finally:
                cache.invalidate()

        if reload:
            await self.fill_from_relationship()

        return result

    async def _rollback(self, relationship: BlockRelationship) -> None:
        logger.warning(f"Rolling back block save for page {relationship.page_id}")
        await self._repository.rollback()

    async def _commit(self) -> None:
        try:
            await self._repository.commit()
        except Exception as e:
            raise BlockPersistError("commit", e) from e

    # =========================================================================
    # PREVIEW
    # =========================================================================

    def preview(self, item: BoundItem) -> str:
        return self._renderer.render(item.descriptor, item.get_state(), self._render_in_view)
