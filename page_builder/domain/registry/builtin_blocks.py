"""
Built-in block types: text, image and quote.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from page_builder.domain.registry.block_registry import BlockDescriptor, BlockRegistry


class TextBlockFields(BaseModel):
    """Editable fields of a text block."""
    body: str = Field(default="", description="Rich text body")


class ImageBlockFields(BaseModel):
    """Editable fields of an image block."""
    src: str = Field(..., description="Image URL or storage path")
    alt: Optional[str] = Field(default=None, description="Alternative text")
    caption: Optional[str] = None


class QuoteBlockFields(BaseModel):
    """Editable fields of a quote block."""
    text: str = Field(default="")
    cite: Optional[str] = Field(default=None, description="Attribution")


def _strip_image_fields(content: Dict[str, Any]) -> Dict[str, Any]:
    # Empty optional attributes are not stored
    return {
        name: value.strip() if isinstance(value, str) else value
        for name, value in content.items()
        if value not in (None, "")
    }


TEXT_BLOCK = BlockDescriptor(
    system_name="text",
    label="Text",
    fields=TextBlockFields,
    display_template='<div class="block-text">{{ body }}</div>',
)

IMAGE_BLOCK = BlockDescriptor(
    system_name="image",
    label="Image",
    fields=ImageBlockFields,
    transform_content=_strip_image_fields,
    display_template=(
        '<figure class="block-image"><img src="{{ src }}" alt="{{ alt or \'\' }}">'
        "{% if caption %}<figcaption>{{ caption }}</figcaption>{% endif %}</figure>"
    ),
)

QUOTE_BLOCK = BlockDescriptor(
    system_name="quote",
    label="Quote",
    fields=QuoteBlockFields,
    display_template=(
        '<blockquote class="block-quote">{{ text }}'
        "{% if cite %}<cite>{{ cite }}</cite>{% endif %}</blockquote>"
    ),
)

BUILTIN_BLOCKS = (TEXT_BLOCK, IMAGE_BLOCK, QUOTE_BLOCK)


def default_registry() -> BlockRegistry:
    """Registry holding the built-in block types."""
    return BlockRegistry(BUILTIN_BLOCKS)
