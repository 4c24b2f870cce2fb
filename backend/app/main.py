"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend.app.api.error_handlers import register_error_handlers
from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.posts import router as posts_router
from backend.app.core.logging import setup_logging
from backend.app.core.settings import settings
from backend.app.db.engine import init_db
from backend.app.db.migrations import run_migrations

setup_logging(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    logger.info("app_start")
    logger.info("config_loaded: %s", settings.safe_dump())
    init_db()
    run_migrations()
    logger.info("Forum write API ready")
    yield
    logger.info("Forum write API shutting down")


app = FastAPI(
    title="Forum Write API",
    version="0.1.0",
    description="Write endpoints for forum posts: edit, delete, vote, bookmark.",
    lifespan=lifespan,
)

register_error_handlers(app)

app.include_router(health_router, tags=["health"])
app.include_router(posts_router, prefix=settings.api_prefix, tags=["posts"])
