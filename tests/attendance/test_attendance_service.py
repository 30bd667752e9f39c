from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import date, datetime, timedelta

import pytest

from office_attendance.attendance.memory_session_repository import InMemorySessionRepository
from office_attendance.attendance.service import AttendanceService, merge_notes
from office_attendance.core.enums import SessionStatus
from office_attendance.core.exceptions import (
    AlreadyCheckedInError,
    InvalidOfficeError,
    InvalidStateError,
    NoActiveSessionError,
    OutOfRangeError,
    SessionConflictError,
)
from office_attendance.offices.memory_office_repository import InMemoryOfficeRepository
from office_attendance.offices.model import Office

OFFICE_LAT, OFFICE_LNG = -6.2088, 106.8456
NOW = datetime(2026, 2, 2, 8, 0, 0)


def make_office(**overrides) -> Office:
    data = dict(
        office_id=1,
        name="Head Office",
        address="Jl. Jend. Sudirman No. 1",
        latitude=OFFICE_LAT,
        longitude=OFFICE_LNG,
        radius_meters=100,
        is_active=True,
    )
    data.update(overrides)
    return Office(**data)


def make_service(*offices: Office, distance=None):
    sessions = InMemorySessionRepository()
    office_repo = InMemoryOfficeRepository(offices or [make_office()])
    kwargs = {"distance": distance} if distance else {}
    return AttendanceService(sessions, office_repo, **kwargs), sessions, office_repo


def test_check_in_creates_active_session():
    svc, sessions, _ = make_service()

    s = svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG, "Test check-in", now=NOW)

    assert s.status == SessionStatus.ACTIVE
    assert s.employee_id == 7
    assert s.office_id == 1
    assert s.check_in == NOW
    assert s.check_in_distance == 0
    assert s.notes == "Test check-in"
    assert s.check_out is None
    assert s.check_out_location is None
    assert s.check_out_distance is None
    assert s.work_duration_minutes is None
    assert sessions.find_open_session_today(7, today=NOW.date()) == s


def test_check_in_stores_rounded_distance():
    svc, _, _ = make_service(distance=lambda *_: 42.6)

    s = svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG, now=NOW)

    assert s.check_in_distance == 43


def test_check_in_at_exact_radius_is_accepted():
    svc, _, _ = make_service(distance=lambda *_: 100.0)

    s = svc.check_in(7, 1, 0.0, 0.0, now=NOW)

    assert s.check_in_distance == 100


def test_check_in_one_meter_beyond_radius_is_rejected():
    svc, sessions, _ = make_service(distance=lambda *_: 101.0)

    with pytest.raises(OutOfRangeError) as exc:
        svc.check_in(7, 1, 0.0, 0.0, now=NOW)

    assert exc.value.distance == 101
    assert exc.value.radius == 100
    assert "101m away" in str(exc.value)
    assert "within 100m" in str(exc.value)
    assert sessions.find_open_session_today(7, today=NOW.date()) is None


def test_rejection_just_past_radius_reports_next_whole_meter():
    svc, _, _ = make_service(distance=lambda *_: 100.4)

    with pytest.raises(OutOfRangeError) as exc:
        svc.check_in(7, 1, 0.0, 0.0, now=NOW)

    assert exc.value.distance == 101
    assert "You are 101m away" in str(exc.value)


def test_real_geometry_boundary():
    # 0.001 degree of latitude is ~111.19 m
    svc, _, _ = make_service(make_office(latitude=0.0, longitude=0.0, radius_meters=111))
    with pytest.raises(OutOfRangeError):
        svc.check_in(7, 1, 0.001, 0.0, now=NOW)

    svc, _, _ = make_service(make_office(latitude=0.0, longitude=0.0, radius_meters=112))
    assert svc.check_in(7, 1, 0.001, 0.0, now=NOW).check_in_distance == 111


def test_check_in_far_away_is_rejected():
    svc, _, _ = make_service(make_office(radius_meters=50))

    with pytest.raises(OutOfRangeError):
        svc.check_in(7, 1, -6.3000, 106.9000, now=NOW)


def test_second_check_in_same_day_fails_without_write():
    svc, sessions, _ = make_service()
    first = svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG, now=NOW)

    with pytest.raises(AlreadyCheckedInError):
        svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG, now=NOW + timedelta(hours=1))

    assert sessions.recent_sessions(7, 10) == [first]


def test_other_employees_are_independent():
    svc, _, _ = make_service()
    svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG, now=NOW)

    assert svc.check_in(8, 1, OFFICE_LAT, OFFICE_LNG, now=NOW).employee_id == 8


def test_check_in_unknown_office():
    svc, _, _ = make_service()

    with pytest.raises(InvalidOfficeError):
        svc.check_in(7, 99, OFFICE_LAT, OFFICE_LNG, now=NOW)


def test_check_in_inactive_office():
    svc, _, _ = make_service(make_office(is_active=False))

    with pytest.raises(InvalidOfficeError) as exc:
        svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG, now=NOW)

    assert str(exc.value) == "Head Office is inactive and does not accept check-ins."


def test_check_in_again_after_check_out_same_day():
    svc, _, _ = make_service()
    svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG, now=NOW)
    svc.check_out(7, OFFICE_LAT, OFFICE_LNG, now=NOW + timedelta(hours=4))

    second = svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG, now=NOW + timedelta(hours=5))

    assert second.is_active


def test_duration_is_whole_minutes_between_check_in_and_out():
    svc, _, _ = make_service()
    svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG, now=NOW)

    s = svc.check_out(7, OFFICE_LAT, OFFICE_LNG, now=NOW + timedelta(minutes=125, seconds=40))

    assert s.status == SessionStatus.COMPLETED
    assert s.work_duration_minutes == 125
    assert s.check_out == NOW + timedelta(minutes=125, seconds=40)
    assert s.check_out_distance == 0
    assert s.check_out_location.latitude == OFFICE_LAT


def test_check_out_without_session():
    svc, _, _ = make_service()

    with pytest.raises(NoActiveSessionError):
        svc.check_out(7, OFFICE_LAT, OFFICE_LNG, now=NOW)


def test_second_check_out_fails_and_keeps_duration():
    svc, sessions, _ = make_service()
    s = svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG, now=NOW)
    svc.check_out(7, OFFICE_LAT, OFFICE_LNG, now=NOW + timedelta(minutes=60))

    with pytest.raises(NoActiveSessionError):
        svc.check_out(7, OFFICE_LAT, OFFICE_LNG, now=NOW + timedelta(minutes=90))

    assert sessions.get_by_id(s.session_id).work_duration_minutes == 60


def test_out_of_range_check_out_keeps_session_open():
    svc, sessions, _ = make_service(make_office(radius_meters=50))
    s = svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG, "morning", now=NOW)

    with pytest.raises(OutOfRangeError) as exc:
        svc.check_out(7, -6.3000, 106.9000, "evening", now=NOW + timedelta(hours=8))

    assert "to check out" in str(exc.value)
    still_open = sessions.find_open_session_today(7, today=NOW.date())
    assert still_open == s
    assert still_open.check_out is None
    assert still_open.notes == "morning"


def test_check_out_uses_current_office_radius():
    svc, _, offices = make_service(distance=lambda *_: 80.0)
    svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG, now=NOW)

    offices.save(make_office(radius_meters=60))
    with pytest.raises(OutOfRangeError) as exc:
        svc.check_out(7, OFFICE_LAT, OFFICE_LNG, now=NOW + timedelta(hours=1))
    assert exc.value.radius == 60

    offices.save(make_office(radius_meters=200))
    assert svc.check_out(7, OFFICE_LAT, OFFICE_LNG, now=NOW + timedelta(hours=2)).check_out_distance == 80


def test_check_out_allowed_when_office_was_deactivated():
    svc, _, offices = make_service()
    svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG, now=NOW)
    offices.save(make_office(is_active=False))

    assert svc.check_out(7, OFFICE_LAT, OFFICE_LNG, now=NOW + timedelta(hours=1)).status == SessionStatus.COMPLETED


def test_check_out_when_office_record_is_gone():
    svc, sessions, offices = make_service()
    svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG, now=NOW)
    offices.remove(1)

    with pytest.raises(InvalidOfficeError):
        svc.check_out(7, OFFICE_LAT, OFFICE_LNG, now=NOW + timedelta(hours=1))

    assert sessions.find_open_session_today(7, today=NOW.date()) is not None


def test_check_out_appends_notes():
    svc, _, _ = make_service()
    svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG, "Test check-in", now=NOW)

    s = svc.check_out(7, OFFICE_LAT, OFFICE_LNG, "Test check-out", now=NOW + timedelta(hours=1))

    assert s.notes == "Test check-in\nTest check-out"


def test_check_out_notes_on_empty_notes_start_with_newline():
    svc, _, _ = make_service()
    svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG, now=NOW)

    s = svc.check_out(7, OFFICE_LAT, OFFICE_LNG, "Left early", now=NOW + timedelta(hours=1))

    assert s.notes == "\nLeft early"


@pytest.mark.parametrize(
    "existing, new, expected",
    [
        (None, None, None),
        (None, "", None),
        ("morning", None, "morning"),
        ("morning", "", "morning"),
        ("", "bye", "\nbye"),
        ("morning", "bye", "morning\nbye"),
    ],
)
def test_merge_notes(existing, new, expected):
    assert merge_notes(existing, new) == expected


def test_check_out_after_midnight_does_not_find_yesterdays_session():
    svc, _, _ = make_service()
    svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG, now=datetime(2026, 2, 2, 23, 50))

    with pytest.raises(NoActiveSessionError):
        svc.check_out(7, OFFICE_LAT, OFFICE_LNG, now=datetime(2026, 2, 3, 0, 10))


def test_clock_is_read_once_per_call():
    calls = []

    def clock():
        calls.append(1)
        return NOW

    svc = AttendanceService(InMemorySessionRepository(), InMemoryOfficeRepository([make_office()]), clock=clock)
    s = svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG)

    assert s.check_in == NOW
    assert len(calls) == 1


class ConflictingStore(InMemorySessionRepository):
    """Reports no open session, then loses the insert race."""

    def find_open_session_today(self, employee_id, *, today):
        return None

    def create(self, new):
        raise SessionConflictError("duplicate")


def test_storage_conflict_reads_as_already_checked_in():
    svc = AttendanceService(ConflictingStore(), InMemoryOfficeRepository([make_office()]))

    with pytest.raises(AlreadyCheckedInError):
        svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG, now=NOW)


class StaleStore(InMemorySessionRepository):
    """Returns the open session even after another request completed it."""

    def __init__(self, stale):
        super().__init__()
        self._stale = stale

    def find_open_session_today(self, employee_id, *, today):
        return self._stale

    def complete_session(self, session_id, fields):
        raise InvalidStateError("already completed")


def test_storage_invalid_state_reads_as_no_active_session():
    svc, _, _ = make_service()
    stale = svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG, now=NOW)

    svc = AttendanceService(StaleStore(stale), InMemoryOfficeRepository([make_office()]))
    with pytest.raises(NoActiveSessionError):
        svc.check_out(7, OFFICE_LAT, OFFICE_LNG, now=NOW + timedelta(hours=1))


def test_available_offices_lists_active_by_name():
    svc, _, _ = make_service(
        make_office(office_id=1, name="Zeta"),
        make_office(office_id=2, name="Alpha"),
        make_office(office_id=3, name="Closed", is_active=False),
    )

    assert [o.name for o in svc.available_offices()] == ["Alpha", "Zeta"]


def test_recent_sessions_newest_first():
    svc, _, _ = make_service()
    for day in range(1, 8):
        now = datetime(2026, 2, day, 8, 0)
        svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG, now=now)
        svc.check_out(7, OFFICE_LAT, OFFICE_LNG, now=now + timedelta(hours=8))

    recent = svc.recent_sessions(7)

    assert len(recent) == 5
    assert [s.work_date for s in recent] == [date(2026, 2, d) for d in (7, 6, 5, 4, 3)]


def test_session_is_frozen():
    svc, _, _ = make_service()
    s = svc.check_in(7, 1, OFFICE_LAT, OFFICE_LNG, now=NOW)

    with pytest.raises(FrozenInstanceError):
        s.status = SessionStatus.COMPLETED  # type: ignore[misc]
