"""
FastAPI dependencies for the page builder API.
"""

from page_builder.domain.registry import BlockRegistry, default_registry

_registry: BlockRegistry = default_registry()


def get_block_registry() -> BlockRegistry:
    """Block types available to every editor served by this app."""
    return _registry
