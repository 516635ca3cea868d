"""
Block list services: classification, caching, hydration, binding,
reconciliation, preview and the editor facade that ties them together.
"""

from page_builder.domain.services.block_binder import BoundItem, bind, normalize_state
from page_builder.domain.services.block_editor import BlockEditor, RelationshipNotConfiguredError
from page_builder.domain.services.block_hooks import BlockHooks
from page_builder.domain.services.block_reconciler import (
    BlockPersistError,
    BlockReconciler,
    ReconciliationResult,
)
from page_builder.domain.services.field_classifier import CORE_FIELDS, split, unsplit
from page_builder.domain.services.preview_renderer import PreviewRenderer
from page_builder.domain.services.record_cache import ExistingRecordCache
from page_builder.domain.services.state_hydrator import hydrate

__all__ = [
    "BoundItem",
    "bind",
    "normalize_state",
    "BlockEditor",
    "RelationshipNotConfiguredError",
    "BlockHooks",
    "BlockPersistError",
    "BlockReconciler",
    "ReconciliationResult",
    "CORE_FIELDS",
    "split",
    "unsplit",
    "PreviewRenderer",
    "ExistingRecordCache",
    "hydrate",
]
