"""Domain-level validation rules for allocation input and catalog data."""

from __future__ import annotations

import re
from typing import Iterable, Mapping, Optional, Union

from backend.domain.results import AllocationError, ErrorKind


INVALID_EVENT_NAME = "Invalid event name"
INVALID_EVENT_CAPACITY = "Invalid event capacity"
VENUE_NOT_SELECTED = "Select venue to allocate event to"

# Largest capacity accepted from operator input (signed 32-bit range).
MAX_EVENT_CAPACITY = 2**31 - 1

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


def validate_event_name(name: Optional[str]) -> Optional[AllocationError]:
    # Stricter than a plain emptiness check: whitespace-only names are rejected too.
    if name is None or not name.strip():
        return AllocationError(ErrorKind.VALIDATION, INVALID_EVENT_NAME)
    return None


def parse_event_capacity(capacity_text: Optional[str]) -> Union[int, AllocationError]:
    """Parse operator-entered capacity text into a positive integer.

    Only plain decimal digits with an optional sign are accepted; surrounding
    whitespace, underscores and non-ASCII digits are rejected. Values above
    MAX_EVENT_CAPACITY are rejected without converting the full text.
    """
    invalid = AllocationError(ErrorKind.VALIDATION, INVALID_EVENT_CAPACITY)
    if not capacity_text or _INTEGER_PATTERN.fullmatch(capacity_text) is None:
        return invalid
    significant = capacity_text.lstrip("+-").lstrip("0")
    if len(significant) > len(str(MAX_EVENT_CAPACITY)):
        return invalid
    capacity = int(capacity_text)
    if capacity <= 0 or capacity > MAX_EVENT_CAPACITY:
        return invalid
    return capacity


def validate_catalog_document(
    corridors: Iterable[tuple[str, int]],
    venues: Iterable[tuple[str, int, Mapping[str, int]]],
) -> None:
    """Check referential integrity of a catalog before it is stored.

    Field-level bounds are enforced by the import DTOs; this covers the rules
    that span records.
    """
    corridor_names: set[str] = set()
    for corridor_name, _ in corridors:
        if corridor_name in corridor_names:
            raise ValueError(f"duplicate corridor name: {corridor_name}")
        corridor_names.add(corridor_name)

    venue_names: set[str] = set()
    for venue_name, _, traffic in venues:
        if venue_name in venue_names:
            raise ValueError(f"duplicate venue name: {venue_name}")
        venue_names.add(venue_name)
        unknown = sorted(set(traffic) - corridor_names)
        if unknown:
            raise ValueError(
                f"venue {venue_name} references unknown corridors: {', '.join(unknown)}"
            )
