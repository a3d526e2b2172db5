"""Seed the configured storage with the bundled fixture.

Usage: python scripts/seed_storage.py [--reset]

--reset removes the persisted snapshot first so the fixture is loaded again.
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.attendance_dashboard.attendance_dashboard.container import build_container, build_storage
from src.attendance_dashboard.attendance_dashboard.storage.adapter import DurableStore


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--reset", action="store_true", help="drop the persisted snapshot before seeding")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    storage = build_storage(
        getattr(settings, "STORAGE_BACKEND", "memory"),
        db_config=getattr(settings, "DB_CONFIG", None),
        quota_bytes=getattr(settings, "STORAGE_QUOTA_BYTES", None),
    )
    if args.reset:
        DurableStore(storage).clear()

    container = build_container(
        storage=storage,
        fixture_path=getattr(settings, "FIXTURE_PATH", None),
        hash_method=getattr(settings, "PASSWORD_HASH_METHOD", "scrypt"),
    )
    snapshot = container.service.snapshot
    print(
        f"OK: storage {container.service.store.status.value} -> "
        f"{len(snapshot.employees)} employees, {len(snapshot.attendance_records)} attendance records"
    )


if __name__ == "__main__":
    main()
