"""
Main FastAPI application for the page builder API.
"""

from contextlib import asynccontextmanager
import logging
import os

from fastapi import FastAPI

from page_builder.core.config import settings
from page_builder.core.database import init_database
from page_builder.core.logging import configure_logging
from page_builder.api.routers.page_blocks import router as page_blocks_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the database on startup."""
    logger.info("Starting page builder API")
    try:
        await init_database()
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise
    logger.info(f"API Documentation: http://{settings.API_HOST}:{settings.API_PORT}/docs")
    yield
    logger.info("Shutting down page builder API")


def create_app() -> FastAPI:
    configure_logging(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format_type=os.getenv("LOG_FORMAT", "text"),
    )

    app = FastAPI(
        title="Page Builder",
        description="Block-list page composition",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.include_router(page_blocks_router, prefix="/api")
    return app


app = create_app()
