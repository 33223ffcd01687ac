"""Operator workflow service wrapping the allocation engine."""

from __future__ import annotations

from threading import RLock
from typing import Any, Optional

from backend.domain.constraints import VENUE_NOT_SELECTED
from backend.domain.models import Event, Venue
from backend.domain.results import AllocationOutcome, ErrorKind, RemovalOutcome
from backend.repository.catalog_repository import CatalogRepository
from backend.services.allocation_engine import EVENT_NOT_ALLOCATED, AllocationEngine
from backend.utils.config import Settings, get_settings
from backend.utils.logger import format_fields, get_logger


logger = get_logger(__name__)


class EventAllocatorService:
    """Serializes operator commands onto a single engine instance."""

    def __init__(
        self,
        repository: Optional[CatalogRepository] = None,
        engine: Optional[AllocationEngine] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or CatalogRepository(self._settings)
        self._engine = engine or AllocationEngine()
        self._lock = RLock()
        self._catalog_loaded = False

    @property
    def engine(self) -> AllocationEngine:
        return self._engine

    @property
    def catalog_loaded(self) -> bool:
        return self._catalog_loaded

    def load_catalog(self) -> int:
        """Populate the engine's venues once; raises CatalogLoadError on failure."""
        with self._lock:
            if self._catalog_loaded:
                return len(self._engine.venues())
            self._repository.initialize_database()
            if self._settings.catalog_file is not None:
                self._repository.import_catalog_file(self._settings.catalog_file)
            elif self._settings.seed_demo_catalog:
                self._repository.seed_demo_catalog()
            venues = self._repository.load_venues()
            if not venues:
                logger.warning("Catalog is empty; no allocation can succeed")
            self._engine.add_venues(venues)
            self._catalog_loaded = True
            return len(venues)

    def _resolve_venue(self, venue_name: Optional[str]) -> tuple[Optional[Venue], Optional[str]]:
        if venue_name is None or not venue_name.strip():
            return None, VENUE_NOT_SELECTED
        venue = self._engine.find_venue(venue_name)
        if venue is None:
            return None, f"Unknown venue: {venue_name}"
        return venue, None

    def allocate(
        self,
        *,
        event_name: Optional[str],
        event_capacity: Optional[str],
        venue_name: Optional[str],
    ) -> AllocationOutcome:
        with self._lock:
            venue, venue_error = self._resolve_venue(venue_name)
            if venue_error is not None and venue_error != VENUE_NOT_SELECTED:
                outcome = AllocationOutcome.failed(ErrorKind.VALIDATION, venue_error)
            else:
                # A missing venue is reported by the engine after name/capacity checks.
                outcome = self._engine.add_allocation(event_name, event_capacity, venue)

        if outcome.ok:
            logger.info(
                "Allocation committed | %s",
                format_fields(
                    event=outcome.allocation.event,
                    capacity=outcome.allocation.event.capacity,
                    venue=outcome.allocation.venue.name,
                    traffic=outcome.allocation.traffic.as_dict(),
                ),
            )
        else:
            logger.info(
                "Allocation rejected | %s",
                format_fields(
                    event=event_name,
                    venue=venue_name,
                    kind=outcome.error.kind.value,
                    reason=outcome.error.message,
                ),
            )
        return outcome

    def find_allocated_event(self, event_name: str, event_capacity: int) -> Optional[Event]:
        with self._lock:
            for event in self._engine.allocated_events():
                if event.name == event_name and event.capacity == event_capacity:
                    return event
        return None

    def deallocate(self, *, event_name: Optional[str], event_capacity: Optional[int]) -> RemovalOutcome:
        with self._lock:
            event = None
            if event_name is not None and event_capacity is not None:
                event = self.find_allocated_event(event_name, event_capacity)
            if event is None:
                outcome = RemovalOutcome.failed(ErrorKind.NOT_FOUND, EVENT_NOT_ALLOCATED)
            else:
                outcome = self._engine.remove_allocation(event)

        if outcome.ok:
            logger.info("Allocation removed | %s", format_fields(event=outcome.event))
        else:
            logger.info(
                "Removal rejected | %s",
                format_fields(event=event_name, capacity=event_capacity, reason=outcome.error.message),
            )
        return outcome

    def list_venues(self) -> list[dict[str, Any]]:
        with self._lock:
            venues = self._engine.venues()
            return [
                {
                    "name": venue.name,
                    "capacity": venue.capacity,
                    "allocated": self._engine.event_at(venue) is not None,
                    "corridors": [corridor.name for corridor in venue.corridors],
                }
                for venue in venues
            ]

    def list_events(self) -> list[dict[str, Any]]:
        with self._lock:
            return [
                {
                    "name": event.name,
                    "capacity": event.capacity,
                    "venue_name": self._engine.venue_for(event).name,
                }
                for event in self._engine.allocated_events()
            ]

    def corridor_report(self) -> list[str]:
        with self._lock:
            return self._engine.corridor_report()

    def allocation_report(self) -> list[str]:
        with self._lock:
            return self._engine.allocation_report()

    def invariant_status(self) -> dict[str, Any]:
        with self._lock:
            violations = self._engine.invariant_violations()
        if violations:
            logger.error("Engine invariant violated | %s", "; ".join(violations))
        return {"holds": not violations, "violations": violations}

    def snapshot(self) -> dict[str, Any]:
        """Consistent read of everything the operator dashboard displays."""
        with self._lock:
            return {
                "venues": self.list_venues(),
                "events": self.list_events(),
                "corridors": self.corridor_report(),
                "allocations": self.allocation_report(),
                "invariant_holds": self._engine.check_invariant(),
            }
