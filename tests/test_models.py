"""Tests for corridor, traffic, venue and event value objects."""

from __future__ import annotations

import pytest

from backend.domain.models import Allocation, Corridor, Event, Traffic, Venue


MAIN_ST = Corridor("Main St", 50)
RIVER_RD = Corridor("River Rd", 100)


def traffic(**loads: int) -> Traffic:
    corridors = {"main": MAIN_ST, "river": RIVER_RD}
    return Traffic({corridors[key]: load for key, load in loads.items()})


# --- Corridor ---

def test_corridor_identity_ignores_capacity() -> None:
    assert Corridor("Main St", 50) == Corridor("Main St", 999)
    assert hash(Corridor("Main St", 50)) == hash(Corridor("Main St", 999))


def test_corridor_orders_by_name_and_displays_name() -> None:
    assert sorted([RIVER_RD, MAIN_ST]) == [MAIN_ST, RIVER_RD]
    assert str(MAIN_ST) == "Main St"


@pytest.mark.parametrize(("name", "capacity"), [("", 10), ("  ", 10), ("Main St", 0)])
def test_corridor_rejects_invalid_values(name: str, capacity: int) -> None:
    with pytest.raises(ValueError):
        Corridor(name, capacity)


# --- Traffic ---

def test_load_on_absent_corridor_is_zero() -> None:
    assert Traffic().load_on(MAIN_ST) == 0


def test_merge_sums_corridor_wise() -> None:
    total = traffic(main=10).merge(traffic(main=5, river=7))
    assert total.load_on(MAIN_ST) == 15
    assert total.load_on(RIVER_RD) == 7


def test_merge_into_copy_leaves_original_untouched() -> None:
    original = traffic(main=10)
    original.copy().merge(traffic(main=30))
    assert original == traffic(main=10)


def test_subtract_drops_corridors_that_reach_zero() -> None:
    total = traffic(main=10, river=4).subtract(traffic(main=10, river=1))
    assert total.corridors_with_load() == [RIVER_RD]
    assert total.load_on(MAIN_ST) == 0


def test_subtract_more_than_present_raises_and_keeps_value() -> None:
    total = traffic(main=10, river=4)
    with pytest.raises(ValueError):
        total.subtract(traffic(main=3, river=5))
    assert total == traffic(main=10, river=4)


def test_negative_load_is_rejected() -> None:
    with pytest.raises(ValueError):
        Traffic({MAIN_ST: -1})


def test_safety_boundary_is_inclusive() -> None:
    assert traffic(main=50).is_safe()
    assert not traffic(main=51).is_safe()
    assert traffic(main=51).overloaded_corridors() == [MAIN_ST]


def test_corridors_with_load_is_restartable_and_skips_zero() -> None:
    value = traffic(main=3, river=0)
    assert value.corridors_with_load() == [MAIN_ST]
    assert value.corridors_with_load() == [MAIN_ST]


def test_equality_ignores_zero_entries() -> None:
    assert traffic(main=5, river=0) == traffic(main=5)
    assert Traffic() == Traffic()
    assert not Traffic()


def test_total_sums_many_values() -> None:
    assert Traffic.total([traffic(main=1), traffic(main=2, river=3)]) == traffic(main=3, river=3)


def test_as_dict_is_keyed_by_corridor_name() -> None:
    assert traffic(river=2, main=1).as_dict() == {"Main St": 1, "River Rd": 2}


# --- Event ---

def test_event_equality_is_by_name_and_capacity() -> None:
    assert Event("Concert", 80) == Event("Concert", 80)
    assert Event("Concert", 80) != Event("Concert", 90)
    assert str(Event("Concert", 80)) == "Concert"


@pytest.mark.parametrize(("name", "capacity"), [("", 10), (" ", 10), ("Gig", 0), ("Gig", -1)])
def test_event_rejects_invalid_values(name: str, capacity: int) -> None:
    with pytest.raises(ValueError):
        Event(name, capacity)


# --- Venue ---

def test_can_host_boundary() -> None:
    hall = Venue("Hall A", 100)
    assert hall.can_host(Event("Fits", 100))
    assert not hall.can_host(Event("Too big", 101))


def test_traffic_scales_profile_and_rounds_up() -> None:
    hall = Venue("Hall A", 100, ((MAIN_ST, 25), (RIVER_RD, 30)))
    assert hall.traffic_for(Event("Concert", 80)) == traffic(main=20, river=24)
    assert hall.traffic_for(Event("Small", 1)) == traffic(main=1, river=1)


def test_traffic_for_is_deterministic_and_fresh() -> None:
    hall = Venue("Hall A", 100, ((MAIN_ST, 25),))
    first = hall.traffic_for(Event("Concert", 80))
    first.merge(traffic(main=5))
    assert hall.traffic_for(Event("Concert", 80)) == traffic(main=20)


def test_venue_without_profile_generates_no_traffic() -> None:
    assert not Venue("Park", 150).traffic_for(Event("Picnic", 150))


def test_venue_equality_ignores_profile() -> None:
    assert Venue("Hall A", 100, ((MAIN_ST, 25),)) == Venue("Hall A", 100)


def test_venue_rejects_duplicate_corridor_in_profile() -> None:
    with pytest.raises(ValueError):
        Venue("Hall A", 100, ((MAIN_ST, 5), (MAIN_ST, 6)))


def test_allocation_description() -> None:
    allocation = Allocation(Event("Concert", 80), Venue("Hall A", 100), Traffic())
    assert allocation.describe() == "Concert : Hall A (100)"
