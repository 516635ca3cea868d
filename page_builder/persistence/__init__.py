"""Persistence module for the page builder.

The PostgreSQL repository lives in page_builder.persistence.pg_repositories
and is imported explicitly (it pulls in the ORM and database config).
"""

from page_builder.persistence.models import (
    RECORD_KEY_PREFIX,
    StoredBlock,
    TranslatableBlock,
    TranslatableRecord,
    record_key,
)
from page_builder.persistence.repositories import (
    BlockRepository,
    InMemoryBlockRepository,
    BlockNotFoundError,
)
from page_builder.persistence.relationship import BlockRelationship

__all__ = [
    # Models
    "RECORD_KEY_PREFIX",
    "StoredBlock",
    "TranslatableBlock",
    "TranslatableRecord",
    "record_key",
    # Protocols
    "BlockRepository",
    # In-memory implementations
    "InMemoryBlockRepository",
    # Relationship
    "BlockRelationship",
    # Exceptions
    "BlockNotFoundError",
]
