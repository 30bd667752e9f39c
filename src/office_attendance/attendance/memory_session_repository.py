from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date
from itertools import islice
from typing import Iterator, Optional, Sequence

from ..common.datetime_utils import day_bounds
from ..core.enums import SessionStatus
from ..core.exceptions import InvalidStateError, SessionConflictError, SessionNotFoundError
from .model import AttendanceSession, CheckOutFields, NewSession
from .repository import SessionRepository


class InMemorySessionRepository(SessionRepository):
    """Process-local session store.

    A lock per employee is held across every read-check-write sequence, so
    two requests for the same employee never both create an open session or
    both complete the same one.
    """

    def __init__(self):
        self._by_id: dict[int, AttendanceSession] = {}
        self._id = 0
        self._guard = threading.Lock()
        self._employee_locks: dict[int, threading.Lock] = {}

    def _lock_for(self, employee_id: int) -> threading.Lock:
        with self._guard:
            lock = self._employee_locks.get(employee_id)
            if lock is None:
                lock = self._employee_locks[employee_id] = threading.Lock()
            return lock

    def _snapshot(self) -> list[AttendanceSession]:
        with self._guard:
            return list(self._by_id.values())

    def _open_on(self, employee_id: int, day: date) -> Optional[AttendanceSession]:
        for s in self._snapshot():
            if s.employee_id == employee_id and s.is_active and s.work_date == day:
                return s
        return None

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        return self._by_id.get(int(session_id))

    def find_open_session_today(self, employee_id: int, *, today: date) -> Optional[AttendanceSession]:
        with self._lock_for(employee_id):
            return self._open_on(employee_id, today)

    def create(self, new: NewSession) -> AttendanceSession:
        with self._lock_for(new.employee_id):
            if self._open_on(new.employee_id, new.check_in.date()):
                raise SessionConflictError(
                    f"Employee {new.employee_id} already has an open session on {new.check_in.date()}"
                )
            with self._guard:
                self._id += 1
                session = AttendanceSession(
                    session_id=self._id,
                    employee_id=new.employee_id,
                    office_id=new.office_id,
                    check_in=new.check_in,
                    check_in_location=new.check_in_location,
                    check_in_distance=new.check_in_distance,
                    status=SessionStatus.ACTIVE,
                    notes=new.notes,
                )
                self._by_id[session.session_id] = session
            return session

    def complete_session(self, session_id: int, fields: CheckOutFields) -> AttendanceSession:
        current = self._by_id.get(int(session_id))
        if current is None:
            raise SessionNotFoundError(f"Session {session_id} not found")

        with self._lock_for(current.employee_id):
            current = self._by_id[current.session_id]
            if not current.is_active:
                raise InvalidStateError(f"Session {session_id} is already {current.status.value}")
            completed = replace(
                current,
                check_out=fields.check_out,
                check_out_location=fields.check_out_location,
                check_out_distance=fields.check_out_distance,
                work_duration_minutes=fields.work_duration_minutes,
                notes=fields.notes,
                status=SessionStatus.COMPLETED,
            )
            with self._guard:
                self._by_id[completed.session_id] = completed
            return completed

    def recent_sessions(self, employee_id: int, limit: int) -> Sequence[AttendanceSession]:
        items = [s for s in self._snapshot() if s.employee_id == employee_id]
        items.sort(key=lambda s: (s.check_in, s.session_id), reverse=True)
        return items[: int(limit)]

    def _filtered(self, *, start, end, employee_id, office_id, status) -> list[AttendanceSession]:
        lower, upper = day_bounds(start, end)
        return [
            s
            for s in self._snapshot()
            if lower <= s.check_in < upper
            and (employee_id is None or s.employee_id == employee_id)
            and (office_id is None or s.office_id == office_id)
            and (status is None or s.status == status)
        ]

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
        items = self._filtered(start=start, end=end, employee_id=employee_id, office_id=office_id, status=status)
        items.sort(key=lambda s: (s.check_in, s.session_id), reverse=not oldest_first)
        stop = None if limit is None else offset + int(limit)
        yield from islice(items, int(offset), stop)

    def count_in_range(
        self,
        *,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
        office_id: Optional[int] = None,
        status: Optional[SessionStatus] = None,
    ) -> int:
        return len(self._filtered(start=start, end=end, employee_id=employee_id, office_id=office_id, status=status))
