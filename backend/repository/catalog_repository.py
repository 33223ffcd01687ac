"""Repository layer responsible for loading the venue catalog."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from backend.domain.constraints import validate_catalog_document
from backend.domain.models import Corridor, Venue
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class CatalogLoadError(Exception):
    """Raised when the venue catalog cannot be read; fatal at startup."""


class CorridorDocument(BaseModel):
    name: str = Field(min_length=1)
    capacity: int = Field(gt=0)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("corridor name must be non-empty")
        return value


class VenueDocument(BaseModel):
    name: str = Field(min_length=1)
    capacity: int = Field(gt=0)
    traffic: dict[str, int] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("venue name must be non-empty")
        return value

    @field_validator("traffic")
    @classmethod
    def validate_traffic(cls, value: dict[str, int]) -> dict[str, int]:
        for corridor_name, load in value.items():
            if load < 0:
                raise ValueError(f"traffic on {corridor_name} must be >= 0")
        return value


class CatalogDocument(BaseModel):
    corridors: list[CorridorDocument] = Field(default_factory=list)
    venues: list[VenueDocument] = Field(default_factory=list)


DEMO_CATALOG = CatalogDocument(
    corridors=[
        CorridorDocument(name="Main St", capacity=50),
        CorridorDocument(name="River Rd", capacity=120),
        CorridorDocument(name="Station Ave", capacity=80),
        CorridorDocument(name="Bridge Ln", capacity=40),
    ],
    venues=[
        VenueDocument(name="Hall A", capacity=100, traffic={"Main St": 25, "River Rd": 30}),
        VenueDocument(name="Hall B", capacity=60, traffic={"Main St": 40}),
        VenueDocument(name="Riverside Arena", capacity=400, traffic={"River Rd": 100, "Bridge Ln": 30}),
        VenueDocument(name="Station Theatre", capacity=250, traffic={"Station Ave": 60, "Main St": 10}),
        VenueDocument(name="Community Centre", capacity=80, traffic={"Bridge Ln": 20, "Station Ave": 15}),
        VenueDocument(name="Park Pavilion", capacity=150, traffic={}),
    ],
)


class CatalogRepository:
    """Encapsulates SQLite access so the engine never sees storage details."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON;")
        return connection

    def initialize_database(self) -> None:
        """Create catalog tables before the first load."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Corridors (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT NOT NULL UNIQUE,
                        capacity INTEGER NOT NULL CHECK (capacity > 0)
                    );
                    """
                )
                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Venues (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT NOT NULL UNIQUE,
                        capacity INTEGER NOT NULL CHECK (capacity > 0)
                    );
                    """
                )
                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS VenueTraffic (
                        venue_id INTEGER NOT NULL,
                        corridor_id INTEGER NOT NULL,
                        load INTEGER NOT NULL CHECK (load >= 0),
                        PRIMARY KEY (venue_id, corridor_id),
                        FOREIGN KEY (venue_id) REFERENCES Venues(id) ON DELETE CASCADE,
                        FOREIGN KEY (corridor_id) REFERENCES Corridors(id) ON DELETE CASCADE
                    );
                    """
                )
                conn.commit()
            logger.info("Catalog database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise CatalogLoadError(f"Catalog database initialization failed: {exc}") from exc

    def count_venues(self) -> int:
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT COUNT(*) AS count FROM Venues;")
                return int(cursor.fetchone()["count"])
        except sqlite3.Error as exc:
            raise CatalogLoadError(f"Could not count venues: {exc}") from exc

    def seed_demo_catalog(self) -> int:
        """Store the demo network only when no venues exist; return venues seeded."""
        if self.count_venues() > 0:
            logger.info("Catalog already present; skipping demo seed")
            return 0
        self.store_catalog(DEMO_CATALOG)
        logger.info("Demo catalog seeded with %s venues", len(DEMO_CATALOG.venues))
        return len(DEMO_CATALOG.venues)

    def import_catalog_file(self, path: Path) -> int:
        """Replace the stored catalog with a JSON catalog document."""
        try:
            raw = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise CatalogLoadError(f"Could not open file: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise CatalogLoadError(f"Catalog file {path} is not valid UTF-8: {exc}") from exc
        try:
            document = CatalogDocument.model_validate_json(raw)
        except ValidationError as exc:
            raise CatalogLoadError(f"Malformed catalog file {path}: {exc}") from exc
        self.store_catalog(document)
        logger.info("Catalog imported | path=%s | venues=%s", path, len(document.venues))
        return len(document.venues)

    def store_catalog(self, document: CatalogDocument) -> None:
        try:
            validate_catalog_document(
                corridors=[(item.name, item.capacity) for item in document.corridors],
                venues=[(item.name, item.capacity, item.traffic) for item in document.venues],
            )
        except ValueError as exc:
            raise CatalogLoadError(f"Inconsistent catalog: {exc}") from exc

        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute("DELETE FROM VenueTraffic;")
                cursor.execute("DELETE FROM Venues;")
                cursor.execute("DELETE FROM Corridors;")
                cursor.executemany(
                    "INSERT INTO Corridors (name, capacity) VALUES (?, ?);",
                    [(item.name, item.capacity) for item in document.corridors],
                )
                cursor.executemany(
                    "INSERT INTO Venues (name, capacity) VALUES (?, ?);",
                    [(item.name, item.capacity) for item in document.venues],
                )
                cursor.executemany(
                    """
                    INSERT INTO VenueTraffic (venue_id, corridor_id, load)
                    SELECT v.id, c.id, ?
                    FROM Venues AS v, Corridors AS c
                    WHERE v.name = ? AND c.name = ?;
                    """,
                    [
                        (load, venue.name, corridor_name)
                        for venue in document.venues
                        for corridor_name, load in venue.traffic.items()
                    ],
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise CatalogLoadError(f"Catalog could not be stored: {exc}") from exc

    def load_venues(self) -> list[Venue]:
        """Build immutable venues, sharing one Corridor object per corridor row."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT id, name, capacity FROM Corridors ORDER BY name ASC;")
                corridors = {
                    int(row["id"]): Corridor(name=str(row["name"]), capacity=int(row["capacity"]))
                    for row in cursor.fetchall()
                }
                cursor.execute("SELECT id, name, capacity FROM Venues ORDER BY name ASC;")
                venue_rows = cursor.fetchall()
                cursor.execute(
                    """
                    SELECT venue_id, corridor_id, load
                    FROM VenueTraffic
                    ORDER BY venue_id ASC, corridor_id ASC;
                    """
                )
                profiles: dict[int, list[tuple[Corridor, int]]] = {}
                for row in cursor.fetchall():
                    profiles.setdefault(int(row["venue_id"]), []).append(
                        (corridors[int(row["corridor_id"])], int(row["load"]))
                    )
        except sqlite3.Error as exc:
            raise CatalogLoadError(f"Catalog could not be read: {exc}") from exc
        except (KeyError, ValueError) as exc:
            raise CatalogLoadError(f"Catalog row is invalid: {exc}") from exc

        try:
            venues = [
                Venue(
                    name=str(row["name"]),
                    capacity=int(row["capacity"]),
                    traffic_profile=tuple(profiles.get(int(row["id"]), [])),
                )
                for row in venue_rows
            ]
        except ValueError as exc:
            raise CatalogLoadError(f"Catalog row is invalid: {exc}") from exc
        logger.info("Catalog loaded | venues=%s | corridors=%s", len(venues), len(corridors))
        return venues
