"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from backend.services.allocator_service import EventAllocatorService


def get_allocator_service(request: Request) -> EventAllocatorService:
    service = getattr(request.app.state, "allocator_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Allocator service is not initialized",
        )
    if not service.catalog_loaded:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Venue catalog is not loaded",
        )
    return service
