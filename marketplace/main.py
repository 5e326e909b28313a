"""Marketplace API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map MarketplaceError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager
    - The bootstrap admin (if configured) exists before the first request

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import marketplace.infrastructure.database as db_module
from marketplace.api.error_handlers import register_error_handlers
from marketplace.api.routes import health, projects, requests, submissions, tasks, users
from marketplace.config import get_settings
from marketplace.infrastructure.entity_store import SqlEntityStore
from marketplace.infrastructure.observability import setup_logging
from marketplace.services.handle_users import UserHandlers

logger = logging.getLogger(__name__)


async def bootstrap_admin(email: str, name: str) -> None:
    async with db_module.db_manager.session() as db:
        await UserHandlers(SqlEntityStore(db)).ensure_admin(email, name)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db_module.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    if settings.admin_email:
        await bootstrap_admin(settings.admin_email, settings.admin_name)
    logger.info("Marketplace API started")
    yield
    await db_module.db_manager.engine.dispose()
    logger.info("Marketplace API shutting down")


app = FastAPI(
    title="Marketplace API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(users.router)
app.include_router(projects.router)
app.include_router(requests.router)
app.include_router(tasks.router)
app.include_router(submissions.router)

register_error_handlers(app)
