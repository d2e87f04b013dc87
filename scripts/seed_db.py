from __future__ import annotations

import importlib

from dotenv import load_dotenv

from school_attendance.config import get_settings_module
from school_attendance.container import build_container
from school_attendance.users.seed import DEMO_USERS, ensure_demo_users


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(settings)

    created = ensure_demo_users(container.user_service)
    print(f"OK: Seeded {len(created)} new demo user(s): {', '.join(u for _, u, _ in DEMO_USERS)}")


if __name__ == "__main__":
    main()
