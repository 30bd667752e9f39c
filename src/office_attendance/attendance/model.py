from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.geo import GeoPoint
from ..core.enums import SessionStatus


@dataclass(frozen=True)
class AttendanceSession:
    """Domain entity: one check-in/check-out work period at an office."""

    session_id: int
    employee_id: int
    office_id: int
    check_in: datetime
    check_in_location: GeoPoint
    check_in_distance: int
    status: SessionStatus = SessionStatus.ACTIVE
    check_out: Optional[datetime] = None
    check_out_location: Optional[GeoPoint] = None
    check_out_distance: Optional[int] = None
    work_duration_minutes: Optional[int] = None
    notes: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    @property
    def work_date(self) -> date:
        return self.check_in.date()


@dataclass(frozen=True)
class NewSession:
    """Write model for a successful check-in."""

    employee_id: int
    office_id: int
    check_in: datetime
    check_in_location: GeoPoint
    check_in_distance: int
    notes: Optional[str] = None


@dataclass(frozen=True)
class CheckOutFields:
    """Write model for a successful check-out."""

    check_out: datetime
    check_out_location: GeoPoint
    check_out_distance: int
    work_duration_minutes: int
    notes: Optional[str] = None
