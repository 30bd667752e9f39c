from __future__ import annotations

from datetime import date
from typing import Any, Iterator, Mapping, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..common.datetime_utils import day_bounds
from ..common.geo import GeoPoint
from ..core.enums import SessionStatus
from ..core.exceptions import InvalidStateError, SessionConflictError, SessionNotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import AttendanceSession, CheckOutFields, NewSession
from .repository import SessionRepository

_COLUMNS = """
    session_id, employee_id, office_id,
    check_in, check_in_lat, check_in_lng, check_in_distance,
    check_out, check_out_lat, check_out_lng, check_out_distance,
    work_duration_minutes, notes, status
"""


def _point(lat: Any, lng: Any) -> Optional[GeoPoint]:
    if lat is None or lng is None:
        return None
    return GeoPoint(float(lat), float(lng))


def _opt_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _row_to_session(r: Mapping[str, Any]) -> AttendanceSession:
    return AttendanceSession(
        session_id=int(r["session_id"]),
        employee_id=int(r["employee_id"]),
        office_id=int(r["office_id"]),
        check_in=r["check_in"],
        check_in_location=_point(r["check_in_lat"], r["check_in_lng"]),
        check_in_distance=int(r["check_in_distance"]),
        status=SessionStatus(r["status"]),
        check_out=r.get("check_out"),
        check_out_location=_point(r.get("check_out_lat"), r.get("check_out_lng")),
        check_out_distance=_opt_int(r.get("check_out_distance")),
        work_duration_minutes=_opt_int(r.get("work_duration_minutes")),
        notes=r.get("notes"),
    )


class MySQLSessionRepository(SessionRepository):
    """Session store on MySQL.

    The open-session rule is enforced by ``UNIQUE (employee_id, open_day)``;
    completion is a conditional UPDATE on ``status='active'``.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as cur:
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_sessions WHERE session_id=%s",
                (int(session_id),),
            )
            r = cur.fetchone()
            return _row_to_session(r) if r else None

    def find_open_session_today(self, employee_id: int, *, today: date) -> Optional[AttendanceSession]:
        lower, upper = day_bounds(today, today)
        with db_cursor(self._conn_factory) as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions
                WHERE employee_id=%s AND status='active' AND check_in >= %s AND check_in < %s
                ORDER BY check_in DESC
                LIMIT 1
                """,
                (int(employee_id), lower, upper),
            )
            r = cur.fetchone()
            return _row_to_session(r) if r else None

    def create(self, new: NewSession) -> AttendanceSession:
        try:
            with db_cursor(self._conn_factory) as cur:
                cur.execute(
                    """
                    INSERT INTO attendance_sessions(
                        employee_id, office_id, check_in, check_in_lat, check_in_lng,
                        check_in_distance, notes, status, open_day
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(new.employee_id),
                        int(new.office_id),
                        new.check_in,
                        new.check_in_location.latitude,
                        new.check_in_location.longitude,
                        int(new.check_in_distance),
                        new.notes,
                        SessionStatus.ACTIVE.value,
                        new.check_in.date(),
                    ),
                )
                session_id = int(cur.lastrowid)
        except mysql.connector.IntegrityError as exc:
            if exc.errno == errorcode.ER_DUP_ENTRY:
                raise SessionConflictError(
                    f"Employee {new.employee_id} already has an open session on {new.check_in.date()}"
                ) from exc
            raise

        return AttendanceSession(
            session_id=session_id,
            employee_id=new.employee_id,
            office_id=new.office_id,
            check_in=new.check_in,
            check_in_location=new.check_in_location,
            check_in_distance=new.check_in_distance,
            status=SessionStatus.ACTIVE,
            notes=new.notes,
        )

    def complete_session(self, session_id: int, fields: CheckOutFields) -> AttendanceSession:
        with db_cursor(self._conn_factory) as cur:
            cur.execute(
                """
                UPDATE attendance_sessions
                SET check_out=%s, check_out_lat=%s, check_out_lng=%s, check_out_distance=%s,
                    work_duration_minutes=%s, notes=%s, status=%s, open_day=NULL
                WHERE session_id=%s AND status=%s
                """,
                (
                    fields.check_out,
                    fields.check_out_location.latitude,
                    fields.check_out_location.longitude,
                    int(fields.check_out_distance),
                    int(fields.work_duration_minutes),
                    fields.notes,
                    SessionStatus.COMPLETED.value,
                    int(session_id),
                    SessionStatus.ACTIVE.value,
                ),
            )
            updated = cur.rowcount > 0

            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_sessions WHERE session_id=%s",
                (int(session_id),),
            )
            r = cur.fetchone()

        if r is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        if not updated:
            raise InvalidStateError(f"Session {session_id} is already {r['status']}")
        return _row_to_session(r)

    def recent_sessions(self, employee_id: int, limit: int) -> Sequence[AttendanceSession]:
        with db_cursor(self._conn_factory) as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions
                WHERE employee_id=%s
                ORDER BY check_in DESC, session_id DESC
                LIMIT %s
                """,
                (int(employee_id), int(limit)),
            )
            return [_row_to_session(r) for r in cur.fetchall()]

    @staticmethod
    def _where(*, start, end, employee_id, office_id, status) -> tuple[str, list[object]]:
        lower, upper = day_bounds(start, end)
        clauses = ["check_in >= %s", "check_in < %s"]
        params: list[object] = [lower, upper]

        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if office_id is not None:
            clauses.append("office_id=%s")
            params.append(int(office_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(SessionStatus(status).value)

        return " AND ".join(clauses), params

    def sessions_in_range(
        self,
        *,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
        office_id: Optional[int] = None,
        status: Optional[SessionStatus] = None,
        oldest_first: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Iterator[AttendanceSession]:
        where, params = self._where(start=start, end=end, employee_id=employee_id, office_id=office_id, status=status)
        direction = "ASC" if oldest_first else "DESC"
        sql = f"""
            SELECT {_COLUMNS}
            FROM attendance_sessions
            WHERE {where}
            ORDER BY check_in {direction}, session_id {direction}
        """
        if limit is not None:
            sql += " LIMIT %s OFFSET %s"
            params += [int(limit), int(offset)]
        elif offset:
            sql += " LIMIT 18446744073709551615 OFFSET %s"
            params.append(int(offset))

        # Connection is closed before the first row is yielded.
        with db_cursor(self._conn_factory) as cur:
            cur.execute(sql, tuple(params))
            rows = cur.fetchall()
        for r in rows:
            yield _row_to_session(r)

    def count_in_range(
        self,
        *,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
        office_id: Optional[int] = None,
        status: Optional[SessionStatus] = None,
    ) -> int:
        where, params = self._where(start=start, end=end, employee_id=employee_id, office_id=office_id, status=status)
        with db_cursor(self._conn_factory) as cur:
            cur.execute(f"SELECT COUNT(*) AS total FROM attendance_sessions WHERE {where}", tuple(params))
            r = cur.fetchone()
            return int(r["total"]) if r else 0
