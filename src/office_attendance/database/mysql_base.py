from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection) -> Iterator:
    """Dictionary cursor for one unit of work.

    Commits when the block exits cleanly, rolls back otherwise. The
    connection is always closed (or handed back to its pool).
    """
    conn = conn_factory.connect()
    cur = conn.cursor(dictionary=True)
    try:
        yield cur
    except Exception:
        conn.rollback()
        raise
    else:
        conn.commit()
    finally:
        cur.close()
        conn.close()
