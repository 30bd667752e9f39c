"""Schema and seed installation for the MySQL store.

The bundled ``schema.sql`` / ``seed.sql`` carry their own ``CREATE DATABASE``
and ``USE`` lines for manual runs; those are dropped here so the scripts land
in whatever database the settings point at.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

SQL_DIR = Path(__file__).resolve().parent
SCHEMA_PATH = SQL_DIR / "schema.sql"
SEED_PATH = SQL_DIR / "seed.sql"

_DROPPED_LINES = (
    re.compile(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$"),
    re.compile(r"(?im)^\s*USE\b.*?;\s*$"),
    re.compile(r"(?m)^\s*--.*$"),
)

# A quoted literal (backslash escapes allowed), a terminator, or anything else.
_TOKEN = re.compile(r"""'(?:\\.|[^'\\])*'|"(?:\\.|[^"\\])*"|;|[^;'"]+|['"]""", re.S)


def prepare_script(sql: str) -> str:
    for pattern in _DROPPED_LINES:
        sql = pattern.sub("", sql)
    return sql


def split_sql_script(sql: str) -> Iterator[str]:
    """Yield the statements of ``sql``; ``;`` inside quotes does not split."""
    current: list[str] = []
    for token in _TOKEN.findall(sql):
        if token != ";":
            current.append(token)
            continue
        statement = "".join(current).strip()
        current = []
        if statement:
            yield statement

    tail = "".join(current).strip()
    if tail:
        yield tail


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = target.connect_args()
    if not with_database:
        kwargs.pop("database")
    return mysql.connector.connect(use_pure=True, **kwargs)


def _run_script(db_config: dict, sql: str) -> int:
    conn = _connect(DBConfig.from_mapping(db_config))
    executed = 0
    try:
        cur = conn.cursor()
        for statement in split_sql_script(prepare_script(sql)):
            cur.execute(statement)
            executed += 1
        conn.commit()
    finally:
        conn.close()
    return executed


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_mapping(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    ensure_database_exists(db_config)
    count = _run_script(db_config, Path(schema_path).read_text(encoding="utf-8"))
    logger.info("Applied schema %s (%d statements)", Path(schema_path).name, count)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path = SEED_PATH) -> None:
    count = _run_script(db_config, Path(seed_path).read_text(encoding="utf-8"))
    logger.info("Applied seed %s (%d statements)", Path(seed_path).name, count)


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(DBConfig.from_mapping(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
