from __future__ import annotations

import logging
from math import ceil
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local, whole_minutes_between
from ..common.geo import GeoPoint, haversine_distance, round_meters
from ..core.constants import DEFAULT_RECENT_LIMIT, NOTES_SEPARATOR
from ..core.exceptions import (
    AlreadyCheckedInError,
    InvalidOfficeError,
    InvalidStateError,
    NoActiveSessionError,
    OutOfRangeError,
    SessionConflictError,
    SessionNotFoundError,
)
from ..offices.model import Office
from ..offices.repository import OfficeRepository
from .model import AttendanceSession, CheckOutFields, NewSession
from .repository import SessionRepository

logger = logging.getLogger(__name__)

DistanceFn = Callable[[float, float, float, float], float]


def merge_notes(existing: Optional[str], new: Optional[str]) -> Optional[str]:
    """Append check-out notes to check-in notes.

    Empty new notes keep the existing value. Otherwise the separator is always
    written, so notes added to an empty record start with a blank line.
    """
    if not new:
        return existing
    return f"{existing or ''}{NOTES_SEPARATOR}{new}"


class AttendanceService:
    """Check-in/check-out state machine with geofence admission.

    NoSession -> Active (check_in) -> Completed (check_out). Rejections never
    write; the caller may retry after moving closer.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        offices: OfficeRepository,
        *,
        distance: DistanceFn = haversine_distance,
        clock: Callable[[], datetime] = now_local,
    ):
        self._sessions = sessions
        self._offices = offices
        self._distance = distance
        self._clock = clock

    def _admit(self, office: Office, latitude: float, longitude: float, *, action: str) -> float:
        distance = self._distance(latitude, longitude, office.latitude, office.longitude)
        if distance > office.radius_meters:
            raise OutOfRangeError(distance=ceil(distance), radius=office.radius_meters, action=action)
        return distance

    def check_in(
        self,
        employee_id: int,
        office_id: int,
        latitude: float,
        longitude: float,
        notes: Optional[str] = None,
        *,
        now: datetime | None = None,
    ) -> AttendanceSession:
        now = now or self._clock()
        today = now.date()

        if self._sessions.find_open_session_today(employee_id, today=today):
            logger.info("Check-in refused: employee %s already checked in on %s", employee_id, today)
            raise AlreadyCheckedInError()

        office = self._offices.get_by_id(office_id)
        if not office:
            logger.warning("Check-in refused: employee %s sent unknown office %s", employee_id, office_id)
            raise InvalidOfficeError(office_id)
        if not office.is_active:
            logger.warning("Check-in refused: employee %s sent inactive office %s", employee_id, office_id)
            raise InvalidOfficeError(office_id, f"{office.name} is inactive and does not accept check-ins.")

        try:
            distance = self._admit(office, latitude, longitude, action="check in")
        except OutOfRangeError as e:
            logger.info(
                "Check-in refused: employee %s is %sm from office %s (radius %sm)",
                employee_id, e.distance, office.office_id, e.radius,
            )
            raise

        try:
            session = self._sessions.create(
                NewSession(
                    employee_id=employee_id,
                    office_id=office.office_id,
                    check_in=now,
                    check_in_location=GeoPoint(latitude, longitude),
                    check_in_distance=round_meters(distance),
                    notes=notes,
                )
            )
        except SessionConflictError:
            logger.info("Check-in lost a race: employee %s already has an open session", employee_id)
            raise AlreadyCheckedInError()

        logger.info(
            "Employee %s checked in at office %s (session %s, %sm)",
            employee_id, office.office_id, session.session_id, session.check_in_distance,
        )
        return session

    def check_out(
        self,
        employee_id: int,
        latitude: float,
        longitude: float,
        notes: Optional[str] = None,
        *,
        now: datetime | None = None,
    ) -> AttendanceSession:
        now = now or self._clock()
        today = now.date()

        session = self._sessions.find_open_session_today(employee_id, today=today)
        if not session:
            raise NoActiveSessionError()

        # Current radius applies, not the one in force at check-in.
        office = self._offices.get_by_id(session.office_id)
        if not office:
            logger.error(
                "Session %s references missing office %s", session.session_id, session.office_id
            )
            raise InvalidOfficeError(session.office_id, "The office for this attendance no longer exists.")

        try:
            distance = self._admit(office, latitude, longitude, action="check out")
        except OutOfRangeError as e:
            logger.info(
                "Check-out refused: employee %s is %sm from office %s (radius %sm)",
                employee_id, e.distance, office.office_id, e.radius,
            )
            raise

        fields = CheckOutFields(
            check_out=now,
            check_out_location=GeoPoint(latitude, longitude),
            check_out_distance=round_meters(distance),
            work_duration_minutes=whole_minutes_between(session.check_in, now),
            notes=merge_notes(session.notes, notes),
        )
        try:
            completed = self._sessions.complete_session(session.session_id, fields)
        except (SessionNotFoundError, InvalidStateError):
            logger.info("Check-out lost a race: session %s is no longer active", session.session_id)
            raise NoActiveSessionError()

        logger.info(
            "Employee %s checked out of session %s after %s minutes",
            employee_id, completed.session_id, completed.work_duration_minutes,
        )
        return completed

    def get_today_session(self, employee_id: int, *, now: datetime | None = None) -> Optional[AttendanceSession]:
        now = now or self._clock()
        return self._sessions.find_open_session_today(employee_id, today=now.date())

    def recent_sessions(self, employee_id: int, *, limit: int = DEFAULT_RECENT_LIMIT) -> Sequence[AttendanceSession]:
        return self._sessions.recent_sessions(employee_id, limit)

    def available_offices(self) -> Sequence[Office]:
        return self._offices.list_active()
