"""
Extension hooks invoked at fixed points of loading and saving blocks.

Every hook defaults to a no-op, so callers never check for presence.

- before_fill(data) -> data                 each record's attributes on load
- before_save(data, record=...) -> data     flat fields on the update path
- before_create(data, block=...) -> data    flat fields on the create path
- modify_query(query) -> query              the repository's native query
"""

from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Optional

from page_builder.domain.registry.block_registry import BlockDescriptor
from page_builder.persistence.models import StoredBlock


def _keep_data(data: Dict[str, Any], **context: Any) -> Dict[str, Any]:
    return data


def _keep_query(query: Any) -> Any:
    return query


@dataclass(frozen=True)
class BlockHooks:
    """Hook set held by an editor's configuration."""
    before_fill: Callable[..., Dict[str, Any]] = _keep_data
    before_save: Callable[..., Dict[str, Any]] = _keep_data
    before_create: Callable[..., Dict[str, Any]] = _keep_data
    modify_query: Callable[[Any], Any] = _keep_query

    def with_hook(self, name: str, hook: Optional[Callable]) -> "BlockHooks":
        default = _keep_query if name == "modify_query" else _keep_data
        return replace(self, **{name: hook or default})

    def fill(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return _or_original(self.before_fill(data), data)

    def save(self, data: Dict[str, Any], record: StoredBlock) -> Dict[str, Any]:
        return _or_original(self.before_save(data, record=record), data)

    def create(self, data: Dict[str, Any], block: BlockDescriptor) -> Dict[str, Any]:
        return _or_original(self.before_create(data, block=block), data)

    def query(self, query: Any) -> Any:
        return _or_original(self.modify_query(query), query)


def _or_original(result: Any, original: Any) -> Any:
    return original if result is None else result
