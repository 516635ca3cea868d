"""
Block type registry.
"""

from page_builder.domain.registry.block_registry import (
    BlockDescriptor,
    BlockRegistry,
    DuplicateBlockTypeError,
    UnknownBlockTypeError,
    UnsupportedConfigurationError,
)
from page_builder.domain.registry.builtin_blocks import (
    BUILTIN_BLOCKS,
    IMAGE_BLOCK,
    QUOTE_BLOCK,
    TEXT_BLOCK,
    default_registry,
)

__all__ = [
    "BlockDescriptor",
    "BlockRegistry",
    "DuplicateBlockTypeError",
    "UnknownBlockTypeError",
    "UnsupportedConfigurationError",
    "BUILTIN_BLOCKS",
    "IMAGE_BLOCK",
    "QUOTE_BLOCK",
    "TEXT_BLOCK",
    "default_registry",
]
