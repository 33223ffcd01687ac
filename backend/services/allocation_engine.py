"""Transactional allocation of events to venues under corridor safety."""

from __future__ import annotations

from collections import Counter
from dataclasses import replace
from typing import Iterable, Optional

from backend.domain.constraints import (
    VENUE_NOT_SELECTED,
    parse_event_capacity,
    validate_event_name,
)
from backend.domain.models import Allocation, Event, Traffic, Venue
from backend.domain.results import (
    AllocationError,
    AllocationOutcome,
    ErrorKind,
    RemovalOutcome,
)
from backend.utils.logger import get_logger


logger = get_logger(__name__)

UNSAFE_TRAFFIC = "Traffic generated is not safe"
VENUE_CANNOT_HOST = "Selected venue cannot host event"
EVENT_ALREADY_ALLOCATED = "Event is already allocated"
VENUE_ALREADY_ALLOCATED = "Venue is already allocated"
EVENT_NOT_ALLOCATED = "Select an event to remove"


class AllocationEngine:
    """Owns the current allocations and the aggregate corridor traffic.

    Every transaction validates against a candidate state first and only then
    commits, so a rejected request leaves allocations and traffic untouched.
    After each completed transaction:

    - each allocated event maps to exactly one venue and vice versa;
    - the allocated-events list mirrors the allocation keys without duplicates;
    - the aggregate traffic is the sum of every allocation's contribution;
    - no corridor carries more load than its capacity.

    Not thread-safe: callers serialize mutations.
    """

    def __init__(self, venues: Optional[Iterable[Venue]] = None) -> None:
        self._venues: list[Venue] = []
        self._allocations: dict[Event, Allocation] = {}
        self._allocated_venues: dict[Venue, Event] = {}
        self._events: list[Event] = []
        self._traffic = Traffic()
        if venues is not None:
            self.add_venues(venues)

    def add_venues(self, venues: Iterable[Venue]) -> None:
        known = {venue.name for venue in self._venues}
        incoming = list(venues)
        for venue in incoming:
            if venue.name in known:
                raise ValueError(f"duplicate venue in catalog: {venue.name}")
            known.add(venue.name)
        self._venues.extend(incoming)
        logger.info("Catalog extended | added=%s | total=%s", len(incoming), len(self._venues))

    def add_allocation(
        self,
        name: Optional[str],
        capacity_text: Optional[str],
        venue: Optional[Venue],
    ) -> AllocationOutcome:
        name_error = validate_event_name(name)
        if name_error is not None:
            return AllocationOutcome(error=name_error)
        capacity = parse_event_capacity(capacity_text)
        if isinstance(capacity, AllocationError):
            return AllocationOutcome(error=capacity)
        if venue is None:
            return AllocationOutcome.failed(ErrorKind.VALIDATION, VENUE_NOT_SELECTED)

        event = Event(name=name, capacity=capacity)
        delta = venue.traffic_for(event)

        candidate = self._traffic.copy().merge(delta)
        if not candidate.is_safe():
            logger.debug(
                "Unsafe candidate traffic | event=%s | venue=%s | overloaded=%s",
                event,
                venue.name,
                ", ".join(str(c) for c in candidate.overloaded_corridors()),
            )
            return AllocationOutcome.failed(ErrorKind.SAFETY, UNSAFE_TRAFFIC)
        if not venue.can_host(event):
            return AllocationOutcome.failed(ErrorKind.CAPACITY, VENUE_CANNOT_HOST)
        if event in self._allocations:
            return AllocationOutcome.failed(ErrorKind.CONFLICT, EVENT_ALREADY_ALLOCATED)
        if venue in self._allocated_venues:
            return AllocationOutcome.failed(ErrorKind.CONFLICT, VENUE_ALREADY_ALLOCATED)

        allocation = Allocation(event=event, venue=venue, traffic=delta)
        self._allocations[event] = allocation
        self._allocated_venues[venue] = event
        self._traffic.merge(delta)
        self._events.append(event)
        return AllocationOutcome(allocation=replace(allocation, traffic=delta.copy()))

    def remove_allocation(self, event: Optional[Event]) -> RemovalOutcome:
        allocation = self._allocations.get(event) if event is not None else None
        if allocation is None:
            return RemovalOutcome.failed(ErrorKind.NOT_FOUND, EVENT_NOT_ALLOCATED)

        self._traffic.subtract(allocation.traffic)
        del self._allocations[allocation.event]
        del self._allocated_venues[allocation.venue]
        self._events.remove(allocation.event)
        return RemovalOutcome(event=allocation.event)

    def venues(self) -> tuple[Venue, ...]:
        return tuple(self._venues)

    def find_venue(self, name: str) -> Optional[Venue]:
        for venue in self._venues:
            if venue.name == name:
                return venue
        return None

    def allocated_events(self) -> tuple[Event, ...]:
        return tuple(self._events)

    def venue_for(self, event: Event) -> Optional[Venue]:
        allocation = self._allocations.get(event)
        return allocation.venue if allocation is not None else None

    def event_at(self, venue: Venue) -> Optional[Event]:
        return self._allocated_venues.get(venue)

    def traffic(self) -> Traffic:
        return self._traffic.copy()

    def allocations(self) -> tuple[Allocation, ...]:
        return tuple(
            replace(allocation, traffic=allocation.traffic.copy())
            for allocation in self._allocations.values()
        )

    def corridor_report(self) -> list[str]:
        return sorted(
            f"{corridor} : {self._traffic.load_on(corridor)}"
            for corridor in self._traffic.corridors_with_load()
        )

    def allocation_report(self) -> list[str]:
        return sorted(allocation.describe() for allocation in self._allocations.values())

    def invariant_violations(self) -> list[str]:
        """Re-derive the engine invariants from scratch; empty when consistent."""
        violations: list[str] = []

        for event, allocation in self._allocations.items():
            if event is None or allocation.venue is None:
                violations.append("allocation with a missing event or venue")
            elif allocation.event != event:
                violations.append(f"allocation keyed by {event} holds {allocation.event}")

        venue_counts = Counter(allocation.venue for allocation in self._allocations.values())
        for venue, count in venue_counts.items():
            if count > 1:
                violations.append(f"venue {venue.name} hosts {count} events")
        if dict(self._allocated_venues) != {
            allocation.venue: event for event, allocation in self._allocations.items()
        }:
            violations.append("venue index disagrees with allocations")

        if len(set(self._events)) != len(self._events):
            violations.append("allocated events list contains duplicates")
        if len(self._events) != len(self._allocations) or set(self._events) != set(
            self._allocations
        ):
            violations.append("allocated events list disagrees with allocations")

        stored_total = Traffic.total(a.traffic for a in self._allocations.values())
        if stored_total != self._traffic:
            violations.append("aggregate traffic differs from committed contributions")
        for allocation in self._allocations.values():
            if allocation.venue.traffic_for(allocation.event) != allocation.traffic:
                violations.append(
                    f"traffic recorded for {allocation.event} no longer matches its venue"
                )

        if not self._traffic.is_safe():
            overloaded = ", ".join(str(c) for c in self._traffic.overloaded_corridors())
            violations.append(f"aggregate traffic is unsafe on: {overloaded}")
        return violations

    def check_invariant(self) -> bool:
        return not self.invariant_violations()
