"""FastAPI application."""

from __future__ import annotations

import logging
import sqlite3

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from prism import __version__
from prism.api.routes import SessionRegistry, router
from prism.config import Settings
from prism.document.loader import DocumentLoadError, load_document
from prism.persistence.store import KeyValueStore, MemoryStore, SQLiteStore

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None, store: KeyValueStore | None = None
) -> FastAPI:
    """Build the API app for the configured document.

    A document that fails to load leaves the app up in a degraded state:
    /health reports it and document routes answer 503.
    """
    settings = settings or Settings.load()
    if store is None:
        try:
            store = SQLiteStore(settings.db_path)
        except (sqlite3.Error, OSError) as e:
            logger.warning(f"Picks database unavailable ({e}); keeping picks in memory")
            store = MemoryStore()

    try:
        document, report = load_document(settings.document, timeout=settings.fetch_timeout)
        registry = SessionRegistry(settings, store, document=document, report=report)
    except DocumentLoadError as e:
        logger.error(str(e))
        registry = SessionRegistry(settings, store, load_error=e)

    app = FastAPI(
        title="Prism Reader",
        description="Multi-translation reader with strategy ranking and ripple effects",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.registry = registry
    app.include_router(router, prefix="/api/v1")

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Prism Reader",
            "version": __version__,
            "docs": "/docs",
            "api": "/api/v1",
        }

    return app
