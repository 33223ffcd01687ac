"""Tests for allocation input validation and catalog integrity rules."""

from __future__ import annotations

import pytest

from backend.domain.constraints import (
    INVALID_EVENT_CAPACITY,
    INVALID_EVENT_NAME,
    parse_event_capacity,
    validate_catalog_document,
    validate_event_name,
)
from backend.domain.results import AllocationError, ErrorKind


# --- event name ---

def test_non_empty_name_passes() -> None:
    assert validate_event_name("Concert") is None


@pytest.mark.parametrize("name", ["", "   ", None])
def test_blank_name_is_validation_error(name) -> None:
    error = validate_event_name(name)
    assert error == AllocationError(ErrorKind.VALIDATION, INVALID_EVENT_NAME)


# --- event capacity ---

@pytest.mark.parametrize(
    ("text", "expected"),
    [("80", 80), ("1", 1), ("+5", 5), ("007", 7), ("2147483647", 2147483647)],
)
def test_integer_capacity_parses(text: str, expected: int) -> None:
    assert parse_event_capacity(text) == expected


@pytest.mark.parametrize(
    "text",
    ["", None, "abc", "5.0", " 5", "5 ", "1_000", "0", "-3", "٣", "2147483648", "1" * 5000],
)
def test_malformed_or_non_positive_capacity_is_validation_error(text) -> None:
    result = parse_event_capacity(text)
    assert isinstance(result, AllocationError)
    assert result.kind is ErrorKind.VALIDATION
    assert result.message == INVALID_EVENT_CAPACITY


# --- catalog document ---

def test_consistent_catalog_passes() -> None:
    validate_catalog_document(
        corridors=[("Main St", 50), ("River Rd", 100)],
        venues=[("Hall A", 100, {"Main St": 25}), ("Park", 200, {})],
    )


def test_duplicate_corridor_raises() -> None:
    with pytest.raises(ValueError, match="duplicate corridor"):
        validate_catalog_document(
            corridors=[("Main St", 50), ("Main St", 60)],
            venues=[],
        )


def test_duplicate_venue_raises() -> None:
    with pytest.raises(ValueError, match="duplicate venue"):
        validate_catalog_document(
            corridors=[("Main St", 50)],
            venues=[("Hall A", 100, {}), ("Hall A", 80, {})],
        )


def test_unknown_corridor_reference_raises() -> None:
    with pytest.raises(ValueError, match="unknown corridors: Ghost Rd"):
        validate_catalog_document(
            corridors=[("Main St", 50)],
            venues=[("Hall A", 100, {"Ghost Rd": 5})],
        )


def test_leading_zeros_do_not_count_toward_capacity_limit() -> None:
    assert parse_event_capacity("0" * 20 + "12") == 12
