"""Persistence domain models."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, Tuple, runtime_checkable

RECORD_KEY_PREFIX = "record-"


def record_key(block_id: Any) -> str:
    """Synthetic key used to address a stored block in editor state."""
    return f"{RECORD_KEY_PREFIX}{block_id}"


@dataclass
class StoredBlock:
    """
    Domain model for a stored block.

    This is the persistence layer's view of a block row,
    separate from the SQLAlchemy ORM model.
    """
    block_id: Optional[int]
    page_id: Optional[int]
    type: str
    position: Optional[int] = None
    content: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return record_key(self.block_id)

    def attributes(self) -> Dict[str, Any]:
        """Full attribute set as the editor sees it."""
        return {
            "id": self.block_id,
            "type": self.type,
            "position": self.position,
            "content": dict(self.content or {}),
        }

    def fill(self, fields: Dict[str, Any]) -> "StoredBlock":
        """Assign attributes from a classified field map.

        The primary key is never reassigned by a fill.
        """
        for name, value in fields.items():
            if name == "id":
                continue
            self._assign(name, value)
        return self

    def _assign(self, name: str, value: Any) -> None:
        if name == "type":
            self.type = value
        elif name == "position":
            self.position = value
        elif name == "content":
            self.content = dict(value or {})
        else:
            raise AttributeError(f"Unknown block attribute: {name}")


@runtime_checkable
class TranslatableRecord(Protocol):
    """Optional capability: locale-aware attribute access."""

    translatable_attributes: Tuple[str, ...]

    def get_translation(self, attribute: str, locale: str) -> Any:
        ...

    def set_locale(self, locale: Optional[str]) -> None:
        ...


@dataclass
class TranslatableBlock(StoredBlock):
    """
    Stored block whose translatable attributes carry per-locale values.

    translations maps attribute -> locale -> value. While a locale is set,
    filling a translatable attribute writes that locale's value and leaves
    the base value alone.
    """
    translations: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    translatable_attributes: Tuple[str, ...] = ("content",)
    locale: Optional[str] = None

    def get_translation(self, attribute: str, locale: str) -> Any:
        values = self.translations.get(attribute) or {}
        if locale in values and values[locale] is not None:
            return values[locale]
        return self.attributes().get(attribute)

    def set_locale(self, locale: Optional[str]) -> None:
        self.locale = locale

    def _assign(self, name: str, value: Any) -> None:
        if self.locale and name in self.translatable_attributes:
            if name == "content":
                value = dict(value or {})
            self.translations.setdefault(name, {})[self.locale] = value
            return
        super()._assign(name, value)
