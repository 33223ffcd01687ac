#!/usr/bin/env python3
"""Validate local Event Allocator environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from backend.repository.catalog_repository import DEMO_CATALOG, CatalogRepository
from backend.services.allocation_engine import AllocationEngine
from backend.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="allocator-env-")

    # CHECK 1 — Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2 — Required packages importable
    package_specs = ["fastapi", "uvicorn", "pydantic", "pandas", "requests", "streamlit", "httpx", "pytest"]
    import_errors: list[str] = []
    for module_name in package_specs:
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        validation_settings = replace(
            get_settings(),
            database_path=Path(temp_dir) / "catalog_validation.db",
            catalog_file=None,
        )
        repository = CatalogRepository(validation_settings)
        venues = []

        # CHECK 3 — Catalog database initialization and demo seed
        try:
            repository.initialize_database()
            seeded = repository.seed_demo_catalog()
            if seeded != len(DEMO_CATALOG.venues):
                raise RuntimeError(f"expected {len(DEMO_CATALOG.venues)} venues, got {seeded}")
            venues = repository.load_venues()
            ok, line = _print_result("Catalog database", True, f": {len(venues)} venues")
        except Exception as exc:
            ok, line = _print_result("Catalog database", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4 — Engine add/remove round trip
        try:
            engine = AllocationEngine(venues)
            venue = engine.find_venue("Hall A")
            if venue is None:
                raise RuntimeError("demo venue 'Hall A' missing")
            outcome = engine.add_allocation("Smoke Test", "80", venue)
            if not outcome.ok:
                raise RuntimeError(outcome.error.message)
            engine.remove_allocation(outcome.allocation.event)
            if engine.corridor_report() or not engine.check_invariant():
                raise RuntimeError("engine state not restored after removal")
            ok, line = _print_result("Engine round trip", True)
        except Exception as exc:
            ok, line = _print_result("Engine round trip", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Event Allocator Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
