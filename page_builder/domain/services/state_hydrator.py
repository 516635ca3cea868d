"""
State hydration: stored blocks -> editable state items.

Hydration never fails. Missing translations fall back to base values and a
failing translation lookup degrades to the base value with a warning.
"""

from typing import Any, Dict, Iterable, Mapping, Optional
import logging

from page_builder.domain.services.block_hooks import BlockHooks
from page_builder.domain.services.field_classifier import CORE_FIELDS, unsplit_attributes
from page_builder.persistence.models import StoredBlock, TranslatableRecord

logger = logging.getLogger(__name__)


def localized_attributes(record: StoredBlock, locale: Optional[str]) -> Dict[str, Any]:
    """Full attribute set, with translatable attributes projected to locale."""
    attributes = record.attributes()

    if not locale or not isinstance(record, TranslatableRecord):
        return attributes

    for attribute in record.translatable_attributes:
        try:
            attributes[attribute] = record.get_translation(attribute, locale)
        except Exception as e:
            logger.warning(
                f"Translation lookup failed for {record.key}.{attribute} ({locale}): {e}"
            )

    return attributes


def hydrate(
    records: Mapping[str, StoredBlock],
    locale: Optional[str] = None,
    hooks: Optional[BlockHooks] = None,
    core_fields: Iterable[str] = CORE_FIELDS,
) -> Dict[str, Dict[str, Any]]:
    """
    Convert a record snapshot into editor state.

    Args:
        records: Ordered snapshot keyed by "record-<id>"
        locale: Active form locale, if any
        hooks: Hook set; before_fill sees each record's attributes
        core_fields: Core column allow-list

    Returns:
        Ordered mapping key -> {"id", "type", "position", "data"}, in
        snapshot order. An empty snapshot hydrates to an empty mapping.
    """
    hooks = hooks or BlockHooks()
    state: Dict[str, Dict[str, Any]] = {}

    for key, record in records.items():
        attributes = localized_attributes(record, locale)
        attributes = hooks.fill(attributes)
        state[key] = unsplit_attributes(attributes, core_fields)

    return state
