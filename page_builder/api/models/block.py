"""
Block Model - one row per block in a page's ordered block list.

On-disk shape: three core columns (id, type, position) plus a single
structured content payload. Translations of translatable attributes live in
a separate nullable JSON column keyed attribute -> locale -> value.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import (
    Column, Integer, String, DateTime, JSON, ForeignKey, Index
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship, Mapped
from sqlalchemy.sql import func

from page_builder.core.database import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONPayload = JSON().with_variant(JSONB(), "postgresql")


class Block(Base):
    """
    Block model - a typed child row of a page.
    """

    __tablename__ = "blocks"

    # =========================================================================
    # CORE COLUMNS
    # =========================================================================

    id: Mapped[int] = Column(Integer, primary_key=True, autoincrement=True)

    page_id: Mapped[int] = Column(
        Integer,
        ForeignKey("pages.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="Owning page"
    )

    type: Mapped[str] = Column(
        String(100),
        nullable=False,
        doc="Block type system name from the registry"
    )

    position: Mapped[Optional[int]] = Column(
        Integer,
        nullable=True,
        doc="1-based render/save order within the page"
    )

    # =========================================================================
    # CONTENT
    # =========================================================================

    content: Mapped[Dict[str, Any]] = Column(
        JSONPayload,
        nullable=False,
        default=dict,
        doc="All non-core block fields"
    )

    translations: Mapped[Optional[Dict[str, Any]]] = Column(
        JSONPayload,
        nullable=True,
        doc="Per-locale values of translatable attributes"
    )

    # =========================================================================
    # AUDIT
    # =========================================================================

    created_at: Mapped[datetime] = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now()
    )

    updated_at: Mapped[Optional[datetime]] = Column(
        DateTime(timezone=True),
        nullable=True,
        onupdate=func.now()
    )

    page: Mapped["Page"] = relationship(  # noqa: F821
        "Page",
        back_populates="blocks",
    )

    __table_args__ = (
        Index("idx_blocks_page_position", "page_id", "position"),
    )

    def __repr__(self) -> str:
        return f"<Block(id={self.id}, page_id={self.page_id}, type={self.type!r}, position={self.position})>"
