from __future__ import annotations

import json
import sqlite3
from dataclasses import replace

import pytest

from backend.domain.models import Corridor, Event, Traffic
from backend.repository.catalog_repository import (
    DEMO_CATALOG,
    CatalogLoadError,
    CatalogRepository,
)
from backend.utils.config import get_settings


def _build_repository(tmp_path, filename: str = "catalog.db") -> CatalogRepository:
    settings = replace(
        get_settings(),
        database_path=tmp_path / filename,
        catalog_file=None,
    )
    repository = CatalogRepository(settings)
    repository.initialize_database()
    return repository


def _write_catalog(tmp_path, document, filename: str = "venues.json"):
    path = tmp_path / filename
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


VALID_DOCUMENT = {
    "corridors": [
        {"name": "Main St", "capacity": 50},
        {"name": "River Rd", "capacity": 100},
    ],
    "venues": [
        {"name": "Hall B", "capacity": 40, "traffic": {"Main St": 40, "River Rd": 20}},
        {"name": "Hall A", "capacity": 100, "traffic": {"Main St": 25}},
        {"name": "Park", "capacity": 200},
    ],
}


def test_demo_seed_runs_once(tmp_path):
    repository = _build_repository(tmp_path)

    assert repository.seed_demo_catalog() == len(DEMO_CATALOG.venues)
    assert repository.seed_demo_catalog() == 0
    assert repository.count_venues() == len(DEMO_CATALOG.venues)


def test_demo_catalog_reproduces_reference_scenario(tmp_path):
    repository = _build_repository(tmp_path)
    repository.seed_demo_catalog()

    venues = {venue.name: venue for venue in repository.load_venues()}
    hall_a = venues["Hall A"]

    assert hall_a.capacity == 100
    assert hall_a.traffic_for(Event("Concert", 80)).load_on(Corridor("Main St", 50)) == 20


def test_import_replaces_catalog_and_shares_corridors(tmp_path):
    repository = _build_repository(tmp_path)
    repository.seed_demo_catalog()

    imported = repository.import_catalog_file(_write_catalog(tmp_path, VALID_DOCUMENT))
    venues = repository.load_venues()

    assert imported == 3
    assert [venue.name for venue in venues] == ["Hall A", "Hall B", "Park"]
    hall_a, hall_b, park = venues
    assert hall_a.traffic_profile[0][0] is hall_b.corridors[0]
    assert hall_b.traffic_for(Event("Fair", 10)) == Traffic(
        {Corridor("Main St", 50): 10, Corridor("River Rd", 100): 5}
    )
    assert park.traffic_profile == ()
    assert hall_b.corridors[1].capacity == 100


def test_missing_file_raises_catalog_load_error(tmp_path):
    repository = _build_repository(tmp_path)
    with pytest.raises(CatalogLoadError, match="Could not open file"):
        repository.import_catalog_file(tmp_path / "missing.json")


def test_malformed_json_raises_catalog_load_error(tmp_path):
    repository = _build_repository(tmp_path)
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(CatalogLoadError, match="Malformed catalog"):
        repository.import_catalog_file(path)


def test_non_utf8_file_raises_catalog_load_error(tmp_path):
    repository = _build_repository(tmp_path)
    path = tmp_path / "latin1.json"
    path.write_bytes(b"\xff\xfe")
    with pytest.raises(CatalogLoadError, match="not valid UTF-8"):
        repository.import_catalog_file(path)


@pytest.mark.parametrize(
    "document",
    [
        {"corridors": [{"name": "Main St", "capacity": 0}], "venues": []},
        {"corridors": [], "venues": [{"name": "Hall", "capacity": -5}]},
        {"corridors": [], "venues": [{"name": "  ", "capacity": 5}]},
        {
            "corridors": [{"name": "Main St", "capacity": 50}],
            "venues": [{"name": "Hall", "capacity": 5, "traffic": {"Main St": -1}}],
        },
    ],
)
def test_out_of_range_values_are_rejected(tmp_path, document):
    repository = _build_repository(tmp_path)
    with pytest.raises(CatalogLoadError):
        repository.import_catalog_file(_write_catalog(tmp_path, document))


def test_inconsistent_catalog_keeps_previous_contents(tmp_path):
    repository = _build_repository(tmp_path)
    repository.seed_demo_catalog()
    document = {
        "corridors": [{"name": "Main St", "capacity": 50}],
        "venues": [{"name": "Hall", "capacity": 5, "traffic": {"Ghost Rd": 1}}],
    }

    with pytest.raises(CatalogLoadError, match="Inconsistent catalog"):
        repository.import_catalog_file(_write_catalog(tmp_path, document))
    assert repository.count_venues() == len(DEMO_CATALOG.venues)


def test_corrupt_rows_raise_catalog_load_error(tmp_path):
    repository = _build_repository(tmp_path)
    repository.seed_demo_catalog()
    with sqlite3.connect(repository.database_path) as conn:
        conn.execute("DROP TABLE VenueTraffic;")

    with pytest.raises(CatalogLoadError, match="could not be read"):
        repository.load_venues()
