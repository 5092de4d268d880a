"""Kit-Build Analytics API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map KitMapError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via the lifespan context manager
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from kitmap.api.error_handlers import register_error_handlers
from kitmap.api.routes import analytics, health, learner_maps
from kitmap.config import get_settings
from kitmap.infrastructure.database import init_db
from kitmap.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("Kit-Build analytics API started")
    yield
    logger.info("Kit-Build analytics API shutting down")


app = FastAPI(
    title="Kit-Build Analytics API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(learner_maps.router)
app.include_router(analytics.router)

register_error_handlers(app)
