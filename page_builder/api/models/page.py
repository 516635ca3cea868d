"""
Page Model - the parent record that owns an ordered list of blocks.
"""

from datetime import datetime
from typing import List

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship, Mapped
from sqlalchemy.sql import func

from page_builder.core.database import Base


class Page(Base):
    """
    Page model.

    Only the blocks relationship matters to the block editor; the page's own
    fields are handled by the surrounding application.
    """

    __tablename__ = "pages"

    id: Mapped[int] = Column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = Column(
        String(500),
        nullable=False,
        doc="Human-readable title"
    )

    created_at: Mapped[datetime] = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now()
    )

    blocks: Mapped[List["Block"]] = relationship(  # noqa: F821
        "Block",
        back_populates="page",
        cascade="all, delete-orphan",
        order_by="Block.position",
    )

    def __repr__(self) -> str:
        return f"<Page(id={self.id}, title={self.title!r})>"
