"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_path(name: str) -> Optional[Path]:
    raw = os.getenv(name, "").strip()
    return Path(raw) if raw else None


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    database_path: Path
    catalog_file: Optional[Path]
    seed_demo_catalog: bool
    api_base_url: str
    request_timeout_seconds: float


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read settings once per process; tests derive variants with `replace`."""
    return Settings(
        app_name=os.getenv("APP_NAME", "Event Allocator"),
        app_version=os.getenv("APP_VERSION", "1.0.0"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        database_path=_env_path("CATALOG_DATABASE_PATH") or Path("data/catalog.db"),
        catalog_file=_env_path("CATALOG_FILE"),
        seed_demo_catalog=_env_bool("SEED_DEMO_CATALOG", True),
        api_base_url=os.getenv("ALLOCATOR_API_URL", "http://127.0.0.1:8000"),
        request_timeout_seconds=float(os.getenv("ALLOCATOR_API_TIMEOUT", "5")),
    )
