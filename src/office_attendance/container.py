from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .attendance.memory_session_repository import InMemorySessionRepository
from .attendance.mysql_session_repository import MySQLSessionRepository
from .attendance.repository import SessionRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .offices.memory_office_repository import InMemoryOfficeRepository
from .offices.model import Office
from .offices.mysql_office_repository import MySQLOfficeRepository
from .offices.repository import OfficeRepository
from .reports.service import ReportService


@dataclass(frozen=True)
class Container:
    offices_repo: OfficeRepository
    sessions_repo: SessionRepository

    attendance_service: AttendanceService
    report_service: ReportService


def _wire(offices_repo: OfficeRepository, sessions_repo: SessionRepository) -> Container:
    return Container(
        offices_repo=offices_repo,
        sessions_repo=sessions_repo,
        attendance_service=AttendanceService(sessions_repo, offices_repo),
        report_service=ReportService(sessions_repo, offices_repo),
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    return _wire(MySQLOfficeRepository(conn), MySQLSessionRepository(conn))


def build_memory_container(*, offices: Iterable[Office] = ()) -> Container:
    return _wire(InMemoryOfficeRepository(offices), InMemorySessionRepository())
