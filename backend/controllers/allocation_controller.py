"""HTTP controller layer for event allocation commands and reports."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from backend.controllers.dependencies import get_allocator_service
from backend.domain.results import AllocationError, ErrorKind
from backend.services.allocator_service import EventAllocatorService
from backend.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["allocation"])

ERROR_STATUS = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CAPACITY: 422,
    ErrorKind.SAFETY: status.HTTP_409_CONFLICT,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
}


class AllocateRequest(BaseModel):
    """Raw operator input; name and capacity are validated by the engine."""

    event_name: str = ""
    event_capacity: str = ""
    venue_name: Optional[str] = None


class DeallocateRequest(BaseModel):
    event_name: Optional[str] = None
    event_capacity: Optional[int] = None


class VenueResponse(BaseModel):
    name: str = Field(min_length=1)
    capacity: int = Field(gt=0)
    allocated: bool
    corridors: list[str]


class EventResponse(BaseModel):
    name: str = Field(min_length=1)
    capacity: int = Field(gt=0)
    venue_name: str = Field(min_length=1)


class AllocationResponse(BaseModel):
    event_name: str
    event_capacity: int = Field(gt=0)
    venue_name: str
    venue_capacity: int = Field(gt=0)
    traffic: dict[str, int]


class DeallocateResponse(BaseModel):
    status: str
    event_name: str
    event_capacity: int = Field(gt=0)


class ReportResponse(BaseModel):
    lines: list[str]


class InvariantResponse(BaseModel):
    holds: bool
    violations: list[str]


class SnapshotResponse(BaseModel):
    venues: list[VenueResponse]
    events: list[EventResponse]
    corridors: list[str]
    allocations: list[str]
    invariant_holds: bool


def _raise_for_error(error: AllocationError) -> None:
    raise HTTPException(
        status_code=ERROR_STATUS[error.kind],
        detail={"kind": error.kind.value, "message": error.message},
    )


@router.get("/venues", response_model=list[VenueResponse])
async def list_venues(
    service: EventAllocatorService = Depends(get_allocator_service),
) -> list[VenueResponse]:
    return [VenueResponse(**item) for item in service.list_venues()]


@router.get("/events", response_model=list[EventResponse])
async def list_events(
    service: EventAllocatorService = Depends(get_allocator_service),
) -> list[EventResponse]:
    return [EventResponse(**item) for item in service.list_events()]


@router.get("/corridors", response_model=ReportResponse)
async def corridor_report(
    service: EventAllocatorService = Depends(get_allocator_service),
) -> ReportResponse:
    return ReportResponse(lines=service.corridor_report())


@router.get("/allocations", response_model=ReportResponse)
async def allocation_report(
    service: EventAllocatorService = Depends(get_allocator_service),
) -> ReportResponse:
    return ReportResponse(lines=service.allocation_report())


@router.get("/invariant", response_model=InvariantResponse)
async def check_invariant(
    service: EventAllocatorService = Depends(get_allocator_service),
) -> InvariantResponse:
    return InvariantResponse(**service.invariant_status())


@router.get("/snapshot", response_model=SnapshotResponse)
async def snapshot(
    service: EventAllocatorService = Depends(get_allocator_service),
) -> SnapshotResponse:
    """Everything a display needs to refresh after a command."""
    return SnapshotResponse(**service.snapshot())


@router.post(
    "/allocate",
    response_model=AllocationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def allocate(
    payload: AllocateRequest,
    service: EventAllocatorService = Depends(get_allocator_service),
) -> AllocationResponse:
    """Validate then commit one allocation; rejected requests change nothing."""
    try:
        outcome = service.allocate(
            event_name=payload.event_name,
            event_capacity=payload.event_capacity,
            venue_name=payload.venue_name,
        )
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected allocation failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to allocate event",
        ) from exc
    if outcome.error is not None:
        _raise_for_error(outcome.error)
    allocation = outcome.allocation
    return AllocationResponse(
        event_name=allocation.event.name,
        event_capacity=allocation.event.capacity,
        venue_name=allocation.venue.name,
        venue_capacity=allocation.venue.capacity,
        traffic=allocation.traffic.as_dict(),
    )


@router.post(
    "/deallocate",
    response_model=DeallocateResponse,
    status_code=status.HTTP_200_OK,
)
async def deallocate(
    payload: DeallocateRequest,
    service: EventAllocatorService = Depends(get_allocator_service),
) -> DeallocateResponse:
    try:
        outcome = service.deallocate(
            event_name=payload.event_name,
            event_capacity=payload.event_capacity,
        )
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected removal failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to remove allocation",
        ) from exc
    if outcome.error is not None:
        _raise_for_error(outcome.error)
    return DeallocateResponse(
        status="REMOVED",
        event_name=outcome.event.name,
        event_capacity=outcome.event.capacity,
    )
