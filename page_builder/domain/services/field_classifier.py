"""
Pure field classification between editor state and stored block columns.

These functions contain NO I/O, NO database access, NO logging.

A stored block has a fixed set of core columns (id, type, position); every
other field lives in its structured `content` payload. The editor sees the
payload flattened into a `data` map next to the core fields.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Mapping

CORE_FIELDS: FrozenSet[str] = frozenset({"id", "type", "position"})
CONTENT_KEY = "content"
DATA_KEY = "data"


@dataclass
class ClassifiedFields:
    """A flat field map split into core columns and content payload."""
    core: Dict[str, Any] = field(default_factory=dict)
    content: Dict[str, Any] = field(default_factory=dict)

    def as_columns(self) -> Dict[str, Any]:
        """Shape accepted by StoredBlock.fill()."""
        columns = dict(self.core)
        columns[CONTENT_KEY] = dict(self.content)
        return columns


def split(
    flat: Mapping[str, Any],
    core_fields: Iterable[str] = CORE_FIELDS,
) -> ClassifiedFields:
    """
    Split a flat field map into core columns and content.

    Every key in core_fields goes to core; everything else goes to content.
    """
    core_fields = frozenset(core_fields)
    classified = ClassifiedFields()
    for name, value in flat.items():
        if name in core_fields:
            classified.core[name] = value
        else:
            classified.content[name] = value
    return classified


def unsplit(
    core: Mapping[str, Any],
    content: Mapping[str, Any],
    core_fields: Iterable[str] = CORE_FIELDS,
) -> Dict[str, Any]:
    """
    Build a hydrated state item from core columns and content.

    Content fields are promoted into the flat `data` map. Content keys that
    collide with a core field name are dropped; core values win.
    """
    core_fields = frozenset(core_fields)
    item = dict(core)
    item[DATA_KEY] = {
        name: value for name, value in content.items()
        if name not in core_fields
    }
    return item


def unsplit_attributes(
    attributes: Mapping[str, Any],
    core_fields: Iterable[str] = CORE_FIELDS,
) -> Dict[str, Any]:
    """Hydrate a record's attribute map, whose payload sits under `content`."""
    remaining = dict(attributes)
    content = remaining.pop(CONTENT_KEY, None)
    if not isinstance(content, Mapping):
        content = {}
    return unsplit(remaining, content, core_fields)


def flatten(
    item: Mapping[str, Any],
    core_fields: Iterable[str] = CORE_FIELDS,
) -> Dict[str, Any]:
    """Inverse of unsplit: core fields and `data` merged back into one map."""
    core_fields = frozenset(core_fields)
    flat = {name: value for name, value in item.items() if name in core_fields}
    flat.update(item.get(DATA_KEY) or {})
    return flat
