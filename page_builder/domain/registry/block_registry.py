"""
Block Registry - the fixed set of block types an editor can render and save.

A block type is identified by its system name, which is persisted verbatim
in the `type` column of every stored block. The registry is handed in by the
surrounding application; the reconciliation core only reads from it.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Type
import logging

from jinja2 import BaseLoader, Environment
from pydantic import BaseModel

logger = logging.getLogger(__name__)

ContentTransform = Callable[[Dict[str, Any]], Dict[str, Any]]

DEFAULT_DISPLAY_TEMPLATE = (
    '<div class="block block-{{ block_type }}">'
    "{% for name, value in fields.items() %}"
    '<div class="block-field" data-field="{{ name }}">{{ value }}</div>'
    "{% endfor %}"
    "</div>"
)

_template_env = Environment(loader=BaseLoader(), autoescape=True)


class UnsupportedConfigurationError(Exception):
    """Raised for editor configuration the block editor cannot honour."""
    pass


class UnknownBlockTypeError(Exception):
    """Raised when a block type is not found in the registry."""
    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(f"Block type not found: {type_name}")


class DuplicateBlockTypeError(Exception):
    """Raised when two descriptors share a system name."""
    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(f"Block type already registered: {type_name}")


@dataclass(frozen=True)
class BlockDescriptor:
    """
    Immutable description of one block type.

    Attributes:
        system_name: Stable identifier stored in the `type` column
        label: Human-readable name
        fields: Pydantic model describing the block's editable fields
            (opaque to the reconciliation core)
        transform_content: Optional per-type transform applied to the content
            bucket right before it is written
        display_template: Optional Jinja2 source used by render_display
    """
    system_name: str
    label: str = ""
    fields: Optional[Type[BaseModel]] = None
    transform_content: Optional[ContentTransform] = None
    display_template: Optional[str] = None

    def apply_content_transform(self, content: Dict[str, Any]) -> Dict[str, Any]:
        if self.transform_content is None:
            return content
        return self.transform_content(dict(content))

    def field_schema(self) -> Dict[str, Any]:
        if self.fields is None:
            return {}
        return self.fields.model_json_schema()

    def render_display(self, state: Dict[str, Any]) -> str:
        """Render the block's preview HTML from its editable state."""
        if self.display_template is None:
            template = _template_env.from_string(DEFAULT_DISPLAY_TEMPLATE)
            return template.render(block_type=self.system_name, fields=state)
        template = _template_env.from_string(self.display_template)
        return template.render(**state)


class BlockRegistry:
    """
    Mapping from block system name to descriptor.

    Resolution is a dictionary lookup with an explicit miss (None); get()
    is the strict variant.
    """

    def __init__(self, blocks: Iterable[BlockDescriptor] = ()):
        if callable(blocks):
            raise UnsupportedConfigurationError("Not supported yet.")

        self._blocks: Dict[str, BlockDescriptor] = {}
        for descriptor in blocks:
            self.register(descriptor)

    def register(self, descriptor: BlockDescriptor) -> BlockDescriptor:
        if not isinstance(descriptor, BlockDescriptor):
            logger.debug(f"Ignoring non-descriptor block entry: {descriptor!r}")
            return descriptor
        if descriptor.system_name in self._blocks:
            raise DuplicateBlockTypeError(descriptor.system_name)
        self._blocks[descriptor.system_name] = descriptor
        return descriptor

    def resolve(self, type_name: Optional[str]) -> Optional[BlockDescriptor]:
        if type_name is None:
            return None
        return self._blocks.get(type_name)

    def get(self, type_name: str) -> BlockDescriptor:
        descriptor = self.resolve(type_name)
        if descriptor is None:
            raise UnknownBlockTypeError(type_name)
        return descriptor

    def all_types(self) -> Tuple[BlockDescriptor, ...]:
        return tuple(self._blocks.values())

    def names(self) -> List[str]:
        return list(self._blocks)

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._blocks

    def __len__(self) -> int:
        return len(self._blocks)

    def __repr__(self) -> str:
        return f"<BlockRegistry({', '.join(self._blocks)})>"
