"""Domain models for venue allocation and corridor traffic accounting."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional


@dataclass(frozen=True, order=True)
class Corridor:
    """A shared traffic-bearing link; identity is the name alone."""

    name: str
    capacity: int = field(compare=False)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("corridor name must be non-empty")
        if self.capacity <= 0:
            raise ValueError("corridor capacity must be > 0")

    def __str__(self) -> str:
        return self.name


class Traffic:
    """Load per corridor.

    Only non-zero loads are stored, so enumeration skips idle corridors and
    two values compare equal when every corridor carries the same load.
    """

    def __init__(self, loads: Optional[Mapping[Corridor, int]] = None) -> None:
        self._loads: dict[Corridor, int] = {}
        for corridor, load in (loads or {}).items():
            self.add_load(corridor, load)

    def copy(self) -> Traffic:
        return Traffic(self._loads)

    def load_on(self, corridor: Corridor) -> int:
        return self._loads.get(corridor, 0)

    def corridors_with_load(self) -> list[Corridor]:
        return sorted(self._loads)

    def add_load(self, corridor: Corridor, load: int) -> None:
        if load < 0:
            raise ValueError(f"load on {corridor} must be >= 0")
        self.update(corridor, load)

    def update(self, corridor: Corridor, delta: int) -> None:
        """Shift the load on `corridor` by `delta` (which may be negative)."""
        new_load = self.load_on(corridor) + delta
        if new_load < 0:
            raise ValueError(
                f"load on {corridor} would become negative ({new_load})"
            )
        if new_load == 0:
            self._loads.pop(corridor, None)
        else:
            self._loads[corridor] = new_load

    def merge(self, other: Traffic) -> Traffic:
        for corridor in other.corridors_with_load():
            self.update(corridor, other.load_on(corridor))
        return self

    def subtract(self, other: Traffic) -> Traffic:
        # Validate first so a failed subtraction leaves this value untouched.
        for corridor in other.corridors_with_load():
            if other.load_on(corridor) > self.load_on(corridor):
                raise ValueError(
                    f"cannot remove {other.load_on(corridor)} from {corridor} "
                    f"carrying {self.load_on(corridor)}"
                )
        for corridor in other.corridors_with_load():
            self.update(corridor, -other.load_on(corridor))
        return self

    def is_safe(self) -> bool:
        return all(load <= corridor.capacity for corridor, load in self._loads.items())

    def overloaded_corridors(self) -> list[Corridor]:
        return [
            corridor
            for corridor in self.corridors_with_load()
            if self._loads[corridor] > corridor.capacity
        ]

    def as_dict(self) -> dict[str, int]:
        return {corridor.name: self._loads[corridor] for corridor in self.corridors_with_load()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Traffic):
            return NotImplemented
        return self._loads == other._loads

    def __bool__(self) -> bool:
        return bool(self._loads)

    def __repr__(self) -> str:
        return f"Traffic({self.as_dict()!r})"

    @classmethod
    def total(cls, values: Iterable[Traffic]) -> Traffic:
        result = cls()
        for value in values:
            result.merge(value)
        return result


@dataclass(frozen=True)
class Event:
    name: str
    capacity: int

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("event name must be non-empty")
        if self.capacity <= 0:
            raise ValueError("event capacity must be > 0")

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Venue:
    """Catalog entry able to host a single event.

    `traffic_profile` holds the load the venue puts on each corridor when it
    hosts an event at its full capacity. Smaller events scale the profile
    down proportionally, rounding each corridor's load up.
    """

    name: str
    capacity: int
    traffic_profile: tuple[tuple[Corridor, int], ...] = field(
        default=(), compare=False, hash=False
    )

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("venue name must be non-empty")
        if self.capacity <= 0:
            raise ValueError("venue capacity must be > 0")
        seen: set[Corridor] = set()
        for corridor, load in self.traffic_profile:
            if corridor in seen:
                raise ValueError(f"venue {self.name} lists corridor {corridor} twice")
            if load < 0:
                raise ValueError(f"venue {self.name} has negative load on {corridor}")
            seen.add(corridor)

    @property
    def hosting_capacity(self) -> int:
        return self.capacity

    @property
    def corridors(self) -> list[Corridor]:
        return sorted(corridor for corridor, _ in self.traffic_profile)

    def can_host(self, event: Event) -> bool:
        return event.capacity <= self.capacity

    def traffic_for(self, event: Event) -> Traffic:
        traffic = Traffic()
        for corridor, full_load in self.traffic_profile:
            # Ceiling division keeps the arithmetic exact for large capacities.
            traffic.add_load(corridor, -(-event.capacity * full_load // self.capacity))
        return traffic

    def __str__(self) -> str:
        return f"{self.name} ({self.capacity})"


@dataclass(frozen=True)
class Allocation:
    event: Event
    venue: Venue
    traffic: Traffic = field(compare=False, hash=False)

    def describe(self) -> str:
        return f"{self.event} : {self.venue.name} ({self.venue.capacity})"
