"""Example: drive the attendance services without Flask.

Controllers are a thin layer; reconciliation lives in the services.
"""

import importlib
import sys

from config import get_settings_module

from src.volunteer_attendance.volunteer_attendance.container import build_container


def main(person_id: str) -> None:
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, facility_timezone=settings.FACILITY_TIMEZONE)

    result = container.reconciler.smart_log(person_id)
    print(result.action.value, result.logged_count, result.any_late)
    print(container.presence_resolver.snapshot(person_id))


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else "vol-demo-1")
