from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from math import ceil
from typing import Iterable, Optional

from ..attendance.model import AttendanceSession
from ..attendance.repository import SessionRepository
from ..common.datetime_utils import month_bounds
from ..core.constants import DEFAULT_HISTORY_PAGE_SIZE, DEFAULT_REPORT_PAGE_SIZE
from ..core.exceptions import ValidationError
from ..offices.repository import OfficeRepository
from .aggregator import AttendanceStatistics, group_by_employee, group_by_office, rank_by_hours, summarize


@dataclass(frozen=True)
class Page:
    items: list[AttendanceSession]
    page: int
    per_page: int
    total: int

    @property
    def pages(self) -> int:
        return max(1, ceil(self.total / self.per_page)) if self.per_page else 1


@dataclass(frozen=True)
class RangeReport:
    start: date
    end: date
    statistics: AttendanceStatistics
    sessions: Page
    office_id: Optional[int] = None
    employee_id: Optional[int] = None


@dataclass(frozen=True)
class DailyReport:
    day: date
    sessions: list[AttendanceSession]
    by_office: dict[str, list[AttendanceSession]] = field(default_factory=dict)
    office_id: Optional[int] = None


@dataclass(frozen=True)
class EmployeeSummary:
    employee_id: int
    statistics: AttendanceStatistics


class ReportService:
    """Read-only reports over sessions that the engine already validated."""

    def __init__(self, sessions: SessionRepository, offices: OfficeRepository):
        self._sessions = sessions
        self._offices = offices

    @staticmethod
    def _check_range(start: date, end: date) -> None:
        if end < start:
            raise ValidationError("End date must not be before start date.")

    def _page(self, *, page: int, per_page: int, **filters) -> Page:
        page = max(int(page), 1)
        per_page = max(int(per_page), 1)
        total = self._sessions.count_in_range(**filters)
        items = list(
            self._sessions.sessions_in_range(**filters, limit=per_page, offset=(page - 1) * per_page)
        )
        return Page(items=items, page=page, per_page=per_page, total=total)

    def build_range_report(
        self,
        *,
        start: date,
        end: date,
        office_id: Optional[int] = None,
        employee_id: Optional[int] = None,
        page: int = 1,
        per_page: int = DEFAULT_REPORT_PAGE_SIZE,
    ) -> RangeReport:
        self._check_range(start, end)
        filters = dict(start=start, end=end, office_id=office_id, employee_id=employee_id)

        return RangeReport(
            start=start,
            end=end,
            statistics=summarize(self._sessions.sessions_in_range(**filters)),
            sessions=self._page(page=page, per_page=per_page, **filters),
            office_id=office_id,
            employee_id=employee_id,
        )

    def build_daily_report(self, *, day: date, office_id: Optional[int] = None) -> DailyReport:
        sessions = list(
            self._sessions.sessions_in_range(start=day, end=day, office_id=office_id, oldest_first=True)
        )
        if office_id is not None:
            return DailyReport(day=day, sessions=sessions, office_id=office_id)

        by_office: dict[str, list[AttendanceSession]] = {}
        for oid, items in group_by_office(sessions).items():
            office = self._offices.get_by_id(oid)
            by_office[office.name if office else f"Office #{oid}"] = items
        return DailyReport(day=day, sessions=sessions, by_office=by_office)

    def build_monthly_summary(
        self,
        *,
        month: date,
        office_id: Optional[int] = None,
        employee_ids: Optional[Iterable[int]] = None,
    ) -> list[EmployeeSummary]:
        """Per-employee statistics for one calendar month, most hours first.

        Employees passed in ``employee_ids`` without any session still get a
        zero row.
        """
        start, end = month_bounds(month)
        grouped = group_by_employee(
            self._sessions.sessions_in_range(start=start, end=end, office_id=office_id)
        )
        for employee_id in employee_ids or ():
            grouped.setdefault(int(employee_id), [])

        summaries = [EmployeeSummary(employee_id=eid, statistics=summarize(items)) for eid, items in grouped.items()]
        return rank_by_hours(summaries)

    def build_employee_report(
        self,
        *,
        employee_id: int,
        start: date,
        end: date,
        page: int = 1,
        per_page: int = DEFAULT_REPORT_PAGE_SIZE,
    ) -> RangeReport:
        return self.build_range_report(
            start=start, end=end, employee_id=employee_id, page=page, per_page=per_page
        )

    def build_history(
        self,
        *,
        employee_id: int,
        month: date,
        page: int = 1,
        per_page: int = DEFAULT_HISTORY_PAGE_SIZE,
    ) -> RangeReport:
        start, end = month_bounds(month)
        return self.build_range_report(
            start=start, end=end, employee_id=employee_id, page=page, per_page=per_page
        )
