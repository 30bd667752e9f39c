from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import Office
from .repository import OfficeRepository

_COLUMNS = "office_id, name, address, latitude, longitude, radius_meters, is_active"


def _row_to_office(r: Mapping[str, Any]) -> Office:
    return Office(
        office_id=int(r["office_id"]),
        name=r["name"],
        address=r.get("address") or "",
        latitude=float(r["latitude"]),
        longitude=float(r["longitude"]),
        radius_meters=int(r["radius_meters"]),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLOfficeRepository(OfficeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, office_id: int) -> Optional[Office]:
        with db_cursor(self._conn_factory) as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM offices
                WHERE office_id=%s
                """,
                (int(office_id),),
            )
            r = cur.fetchone()
            return _row_to_office(r) if r else None

    def list_active(self) -> Sequence[Office]:
        with db_cursor(self._conn_factory) as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM offices
                WHERE is_active=1
                ORDER BY name ASC
                """
            )
            return [_row_to_office(r) for r in cur.fetchall()]
