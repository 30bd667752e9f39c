"""Database maintenance for office-attendance.

    python scripts/manage_db.py init [--seed]
    python scripts/manage_db.py seed
    python scripts/manage_db.py tables

Connection settings come from the active APP_ENV settings module (.env is read).
"""

from __future__ import annotations

import argparse
import importlib

from dotenv import load_dotenv

from office_attendance.config import get_settings_module
from office_attendance.database.bootstrap import apply_schema, apply_seed_sql, list_tables


def _target(db_config: dict) -> str:
    return f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="manage_db")
    sub = parser.add_subparsers(dest="command", required=True)
    init = sub.add_parser("init", help="create the database and apply schema.sql")
    init.add_argument("--seed", action="store_true", help="also insert the demo offices")
    sub.add_parser("seed", help="insert the demo offices (idempotent)")
    sub.add_parser("tables", help="list tables in the configured database")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    if args.command == "init":
        apply_schema(db_config)
        print(f"OK: applied schema.sql -> {_target(db_config)} (tables={len(list_tables(db_config))})")
        if args.seed:
            apply_seed_sql(db_config)
            print("OK: seeded demo offices")
    elif args.command == "seed":
        apply_seed_sql(db_config)
        print(f"OK: seeded demo offices -> {_target(db_config)}")
    else:
        for name in list_tables(db_config):
            print(name)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
