from __future__ import annotations

import importlib

from dotenv import load_dotenv

from school_attendance.config import get_settings_module
from school_attendance.database.bootstrap import apply_schema, list_tables
from school_attendance.database.connection import DBConfig, DatabaseConnection


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection(DBConfig.from_mapping(settings.DB_CONFIG))

    apply_schema(conn)
    tables = list_tables(conn)
    db = conn.config
    print(f"OK: Applied schema.sql -> {db.user}@{db.host}:{db.port}/{db.database} (tables={len(tables)})")


if __name__ == "__main__":
    main()
