"""
ORM models for the page builder.
"""
from page_builder.api.models.page import Page
from page_builder.api.models.block import Block

__all__ = [
    'Page',
    'Block',
]
