#!/usr/bin/env python3
"""Validate local hotel booking API environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from datetime import date
from importlib.metadata import version
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from hotel_backend.domain.models import StayInterval
from hotel_backend.repository.data_repository import DataRepository
from hotel_backend.services.availability_service import AvailabilityService
from hotel_backend.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="hotel-env-")

    # CHECK 1: Python version >= 3.10
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

    # CHECK 2: Required packages importable with versions
    package_specs = [
        ("fastapi", "fastapi"),
        ("starlette", "starlette"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("bcrypt", "bcrypt"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    import_errors: list[str] = []
    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            version(dist_name)
        except Exception as exc:  # pragma: no cover - runtime guard
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

    availability_service = None
    try:
        validation_settings = replace(
            get_settings(),
            database_path=Path(temp_dir) / "hotel_validation.db",
            availability_max_workers=2,
        )
        repository = DataRepository(validation_settings)

        # CHECK 3: Database initialization
        try:
            repository.initialize_database()
            ok, line = _print_result("Database initialization", True)
        except Exception as exc:
            ok, line = _print_result("Database initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4: Demo catalogue seeding
        try:
            seeded_room_types = repository.seed_demo_data()
            hotels = repository.list_all_hotels()
            if seeded_room_types == 0 or not hotels:
                raise RuntimeError(f"expected seeded hotels and room types, got {seeded_room_types} room types")
            ok, line = _print_result(
                "Demo catalogue seeding",
                True,
                f": {len(hotels)} hotels, {seeded_room_types} room types",
            )
        except Exception as exc:
            ok, line = _print_result("Demo catalogue seeding", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5: Hotel availability search
        availability_service = AvailabilityService(repository=repository, settings=validation_settings)
        try:
            stay = StayInterval(checkin=date(2026, 3, 1), checkout=date(2026, 3, 4))
            hotels = availability_service.search_available_hotels(stay)
            if not hotels:
                raise RuntimeError("expected at least one hotel with free rooms in an empty calendar")
            ok, line = _print_result(
                "Availability search",
                True,
                f": {len(hotels)} hotels with free rooms",
            )
        except Exception as exc:
            ok, line = _print_result("Availability search", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        if availability_service is not None:
            availability_service.close()
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Hotel Booking API Environment Validation")
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
