"""Create the attendance-manager database and its tables.

Reads DB_CONFIG from the settings module chosen by APP_ENV and applies
database/schema.sql. Re-running is harmless: every table uses IF NOT EXISTS.
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

from dotenv import load_dotenv

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.attendance_manager.attendance_manager.database.bootstrap import apply_schema, list_tables

_REQUIRED_TABLES = (
    "profiles",
    "classes",
    "students",
    "enrollments",
    "lesson_schedules",
    "attendance_records",
    "invoices",
    "invoice_line_items",
    "payments",
    "reference_counters",
)


def main() -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    tables = set(list_tables(db_config))
    missing = [t for t in _REQUIRED_TABLES if t not in tables]

    target = f"{db_config.get('database')} on {db_config.get('host')}:{db_config.get('port', 3306)}"
    if missing:
        print(f"Schema applied to {target}, but tables are missing: {', '.join(missing)}")
        return 1
    print(f"Attendance manager schema ready in {target} ({len(_REQUIRED_TABLES)} tables)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
