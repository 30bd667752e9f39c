from __future__ import annotations

from datetime import date
from typing import Iterator, Optional, Protocol, Sequence

from ..core.enums import SessionStatus
from .model import AttendanceSession, CheckOutFields, NewSession


class SessionRepository(Protocol):
    """Storage contract for attendance sessions.

    Implementations own the "one open session per employee per day" rule:
    ``create`` must check and insert atomically, ``complete_session`` must
    only move a session from ACTIVE to COMPLETED once.
    """

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def find_open_session_today(self, employee_id: int, *, today: date) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def create(self, new: NewSession) -> AttendanceSession:
        """Raises SessionConflictError if the employee already has an open session that day."""

        raise NotImplementedError

    def complete_session(self, session_id: int, fields: CheckOutFields) -> AttendanceSession:
        """Raises SessionNotFoundError or InvalidStateError instead of overwriting."""

        raise NotImplementedError

    def recent_sessions(self, employee_id: int, limit: int) -> Sequence[AttendanceSession]:
        raise NotImplementedError

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
        """Sessions whose check-in falls within [start, end] (dates inclusive).

        Each call runs the query again; nothing is cached between calls.
        """

        raise NotImplementedError

    def count_in_range(
        self,
        *,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
        office_id: Optional[int] = None,
        status: Optional[SessionStatus] = None,
    ) -> int:
        raise NotImplementedError
