"""Export the persisted snapshot to backups/<timestamp>.json."""

from __future__ import annotations

import importlib
import json
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.attendance_dashboard.attendance_dashboard.container import build_storage
from src.attendance_dashboard.attendance_dashboard.storage.adapter import DurableStore


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    backend = getattr(settings, "STORAGE_BACKEND", "memory")
    if backend == "memory":
        raise SystemExit("STORAGE_BACKEND=memory keeps nothing between runs; set STORAGE_BACKEND=mysql.")

    storage = build_storage(backend, db_config=settings.DB_CONFIG)
    document = DurableStore(storage).load()
    if document is None:
        raise SystemExit("No snapshot found in storage.")

    out_dir = REPO_ROOT / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)
    out_file = out_dir / f"attendance_snapshot_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
    out_file.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
    print(f"OK: Backup created: {out_file}")


if __name__ == "__main__":
    main()
