"""
Preview rendering for a single block.

The render boundary: a block whose display fails to render produces a
message string instead of an exception, so one broken block cannot take
the rest of the page down with it.
"""

from typing import Any, Dict, Mapping, Optional
import logging

from jinja2 import DictLoader, Environment
from markupsafe import Markup

from page_builder.domain.registry.block_registry import BlockDescriptor

logger = logging.getLogger(__name__)

DEFAULT_VIEWS: Dict[str, str] = {
    "preview": '<div class="block-preview">{{ preview }}</div>',
}

VIEW_NOT_SET_MESSAGE = "renderInView not set or null"


class PreviewRenderer:
    """Renders a block's display inside a named preview view."""

    def __init__(self, views: Optional[Mapping[str, str]] = None):
        templates = dict(DEFAULT_VIEWS)
        templates.update(views or {})
        self.jinja_env = Environment(loader=DictLoader(templates), autoescape=True)

    def render(
        self,
        descriptor: BlockDescriptor,
        state: Dict[str, Any],
        view: Optional[str],
    ) -> str:
        if not view:
            return VIEW_NOT_SET_MESSAGE

        try:
            display = descriptor.render_display(state)
            return self.jinja_env.get_template(view).render(preview=Markup(display))
        except Exception as e:
            logger.warning(f"Preview of {descriptor.system_name} block failed: {e}")
            return f"Error when rendering: {e}"
