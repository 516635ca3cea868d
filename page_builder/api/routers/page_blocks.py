"""
Page block API endpoints.

Loads a page's blocks as editor state, saves submitted state through a
reconciliation pass and renders single-block previews.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from page_builder.api.dependencies import get_block_registry
from page_builder.api.models.page import Page
from page_builder.core.config import settings
from page_builder.core.database import get_db
from page_builder.domain.registry import BlockRegistry
from page_builder.domain.services.block_binder import BoundItem
from page_builder.domain.services.block_editor import BlockEditor
from page_builder.domain.services.block_reconciler import BlockPersistError
from page_builder.persistence.pg_repositories import PostgresBlockRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["page-blocks"])


# ===========================================================================
# Request/Response Models
# ===========================================================================

class BlockStateItem(BaseModel):
    """One block as the editor sees it."""
    key: Optional[str] = None
    id: Optional[int] = None
    type: str
    position: Optional[int] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class BlockStateResponse(BaseModel):
    """Ordered editor state of a page."""
    page_id: int
    locale: Optional[str] = None
    items: List[BlockStateItem]


class SaveBlocksRequest(BaseModel):
    """Submitted editor state, in display order."""
    items: List[BlockStateItem] = Field(default_factory=list)


class SaveBlocksResponse(BlockStateResponse):
    """State after the save, plus what the pass did."""
    summary: Dict[str, int]


class BlockTypeItem(BaseModel):
    """A registered block type."""
    system_name: str
    label: str
    field_schema: Dict[str, Any]


class PreviewRequest(BaseModel):
    """A single block to preview."""
    type: str
    data: Dict[str, Any] = Field(default_factory=dict)


class PreviewResponse(BaseModel):
    html: str


# ===========================================================================
# Helpers
# ===========================================================================

async def _get_editor(
    page_id: int,
    locale: Optional[str],
    db: AsyncSession,
    registry: BlockRegistry,
) -> BlockEditor:
    page = await db.get(Page, page_id)
    if page is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Page not found: {page_id}",
        )

    repository = PostgresBlockRepository(db, translatable=True)
    return (
        BlockEditor(repository, registry)
        .model(page_id)
        .order_column(settings.BLOCK_ORDER_COLUMN)
        .render_in_view(settings.BLOCK_PREVIEW_VIEW)
        .locale(locale or settings.DEFAULT_FORM_LOCALE)
    )


def _state_items(state: Dict[str, Dict[str, Any]]) -> List[BlockStateItem]:
    return [
        BlockStateItem(
            key=key,
            id=item.get("id"),
            type=item.get("type"),
            position=item.get("position"),
            data=item.get("data") or {},
        )
        for key, item in state.items()
    ]


# ===========================================================================
# Endpoints
# ===========================================================================

@router.get("/block-types", response_model=List[BlockTypeItem])
async def list_block_types(registry: BlockRegistry = Depends(get_block_registry)):
    """List registered block types with the JSON schema of their fields."""
    return [
        BlockTypeItem(
            system_name=descriptor.system_name,
            label=descriptor.label or descriptor.system_name,
            field_schema=descriptor.field_schema(),
        )
        for descriptor in registry.all_types()
    ]


@router.get("/pages/{page_id}/blocks", response_model=BlockStateResponse)
async def get_page_blocks(
    page_id: int,
    locale: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
    registry: BlockRegistry = Depends(get_block_registry),
):
    """Load a page's blocks as ordered editor state."""
    editor = await _get_editor(page_id, locale, db, registry)
    state = await editor.load_state()
    return BlockStateResponse(page_id=page_id, locale=editor.get_locale(), items=_state_items(state))


@router.put("/pages/{page_id}/blocks", response_model=SaveBlocksResponse)
async def save_page_blocks(
    page_id: int,
    request: SaveBlocksRequest,
    locale: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
    registry: BlockRegistry = Depends(get_block_registry),
):
    """Reconcile submitted state with the page's stored blocks."""
    editor = await _get_editor(page_id, locale, db, registry)
    editor.set_state([item.model_dump(exclude_none=True) for item in request.items])

    try:
        result = await editor.save_relationships()
    except BlockPersistError as e:
        logger.error(f"Saving blocks for page {page_id} failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )

    return SaveBlocksResponse(
        page_id=page_id,
        locale=editor.get_locale(),
        items=_state_items(editor.get_state()),
        summary=result.summary,
    )


@router.post("/pages/{page_id}/blocks/preview", response_model=PreviewResponse)
async def preview_block(
    page_id: int,
    request: PreviewRequest,
    db: AsyncSession = Depends(get_db),
    registry: BlockRegistry = Depends(get_block_registry),
):
    """Render one block's preview. Render failures come back as the message."""
    editor = await _get_editor(page_id, None, db, registry)

    descriptor = registry.resolve(request.type)
    if descriptor is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Block type not found: {request.type}",
        )

    item = BoundItem(
        key="preview",
        index=0,
        item={"type": request.type, "data": dict(request.data)},
        descriptor=descriptor,
    )
    return PreviewResponse(html=editor.preview(item))
