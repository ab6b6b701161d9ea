"""Create the demo teacher and student accounts.

Both log in with password ``password123``:
teacher@example.com (employee EMP001) and student@example.com (roll R001).
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.smart_attendance.smart_attendance.database.bootstrap import (
    DEMO_STUDENT,
    DEMO_TEACHER,
    ensure_demo_users,
)


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    ensure_demo_users(db_config)

    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )
    print(f"Teacher: {DEMO_TEACHER['email']} / password123")
    print(f"Student: {DEMO_STUDENT['email']} / password123")


if __name__ == "__main__":
    main()
