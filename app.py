"""
app.py — FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires the catalog repository, the allocation engine and the operator
service, registers routers, and loads the venue catalog at startup.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from backend.controllers.allocation_controller import router as allocation_router
from backend.repository.catalog_repository import CatalogLoadError, CatalogRepository
from backend.services.allocation_engine import AllocationEngine
from backend.services.allocator_service import EventAllocatorService
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    One engine instance per app, reachable only through app.state.
    """
    settings = settings or get_settings()

    # --- Repository (catalog source, read once at startup) ---
    repository = CatalogRepository(settings)

    # --- Engine + operator service ---
    engine = AllocationEngine()
    allocator_service = EventAllocatorService(
        repository=repository,
        engine=engine,
        settings=settings,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load the catalog before accepting requests."""
        load_catalog_or_exit(app)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # --- Routers ---
    app.include_router(allocation_router)

    # --- Inject services into app.state for dependency resolution ---
    app.state.repository = repository
    app.state.engine = engine
    app.state.allocator_service = allocator_service

    return app


def load_catalog_or_exit(app: FastAPI) -> None:
    """
    Populate the engine's venues; the engine cannot run without them.

    A catalog failure is logged once and ends the process with status 1.
    Safe to call more than once: later calls are no-ops.
    """
    service: EventAllocatorService = app.state.allocator_service
    try:
        venue_count = service.load_catalog()
    except CatalogLoadError as exc:
        logger.critical("Could not load venue catalog: %s", exc)
        raise SystemExit(1) from exc
    logger.info("Startup complete | venues=%s", venue_count)


# Module-level app object for uvicorn
app = create_app()
