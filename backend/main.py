"""
Email editor FastAPI application.

Entry point for the API server.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend.config import settings
from backend.logging_config import setup_logging
from backend.routes import documents as document_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Configures logging on startup and closes open sessions on shutdown.
    """
    setup_logging(settings.LOG_LEVEL)
    logger.info("Editor service starting (environment=%s)", settings.ENVIRONMENT)

    yield

    logger.info("Editor service stopping with %d open sessions", len(document_routes.document_repo))
    document_routes.document_repo.clear()


app = FastAPI(
    title="Email Block Editor",
    lifespan=lifespan,
)

# Register routes
app.include_router(document_routes.router)


@app.get("/health")
async def health():
    """Health check endpoint for uptime monitoring."""
    return {"status": "ok"}
