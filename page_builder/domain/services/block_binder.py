"""
Binding submitted editor state to block descriptors and stored records.

Submitted state is an ordered mapping of item key -> state item. Keys of
the form "record-<id>" reference an existing stored block; any other key
(a fresh uuid) marks a new block. Binding joins on that key, the same key
the deletion set is computed from, so reordering or inserting items before
a save can never pair an item with the wrong record.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional
from uuid import uuid4
import logging

from page_builder.domain.registry.block_registry import BlockDescriptor, BlockRegistry
from page_builder.domain.services.field_classifier import DATA_KEY
from page_builder.persistence.models import StoredBlock, record_key

logger = logging.getLogger(__name__)


@dataclass
class BoundItem:
    """One submitted item paired with its descriptor and backing record."""
    key: str
    index: int
    item: Dict[str, Any]
    descriptor: BlockDescriptor
    record: Optional[StoredBlock] = None

    @property
    def state_path(self) -> str:
        return f"{self.key}.{DATA_KEY}"

    @property
    def type(self) -> str:
        return self.descriptor.system_name

    @property
    def is_new(self) -> bool:
        return self.record is None

    def get_state(self) -> Dict[str, Any]:
        """Copy of this item's editable fields."""
        data = self.item.get(DATA_KEY)
        return dict(data) if isinstance(data, Mapping) else {}

    def set_state(self, data: Mapping[str, Any]) -> None:
        self.item[DATA_KEY] = dict(data)


def new_item_key() -> str:
    return str(uuid4())


def normalize_state(state: Any) -> Dict[str, Dict[str, Any]]:
    """
    Coerce submitted state into an ordered mapping key -> item.

    Anything that is not a mapping or a list becomes empty. In list form,
    an item addresses an existing record through "key" or "id"; items
    without either get a fresh key, and so does every repeat of a key
    already taken. Entries that are not mappings are dropped.
    """
    if isinstance(state, Mapping):
        return {
            str(key): dict(item)
            for key, item in state.items()
            if isinstance(item, Mapping)
        }

    if not isinstance(state, (list, tuple)):
        return {}

    normalized: Dict[str, Dict[str, Any]] = {}
    for item in state:
        if not isinstance(item, Mapping):
            continue
        item = dict(item)
        key = item.pop("key", None)
        if not key and item.get("id") is not None:
            key = record_key(item["id"])
        if key and str(key) in normalized:
            # A repeated reference is a copy of that block, saved as a new one
            logger.warning(f"Block {key} submitted more than once; saving the repeat as a new block")
            item.pop("id", None)
            key = None
        normalized[str(key or new_item_key())] = item
    return normalized


def unresolved_keys(state: Mapping[str, Mapping[str, Any]], registry: BlockRegistry) -> List[str]:
    """Keys of items whose type is not a registered block."""
    return [
        key for key, item in state.items()
        if registry.resolve(item.get("type")) is None
    ]


def bind(
    state: Mapping[str, Dict[str, Any]],
    records: Mapping[str, StoredBlock],
    registry: BlockRegistry,
) -> List[BoundItem]:
    """
    Pair each submitted item with its descriptor and backing record.

    Items whose type does not resolve are left out of the result but stay
    untouched in the submitted state.
    """
    bound: List[BoundItem] = []

    for index, (key, item) in enumerate(state.items()):
        descriptor = registry.resolve(item.get("type"))
        if descriptor is None:
            logger.debug(f"Skipping block {key}: unknown block type {item.get('type')!r}")
            continue

        bound.append(
            BoundItem(
                key=key,
                index=index,
                item=item,
                descriptor=descriptor,
                record=records.get(key),
            )
        )

    return bound
