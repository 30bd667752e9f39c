from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, Sequence

from ..attendance.model import AttendanceSession
from ..core.enums import SessionStatus


@dataclass(frozen=True)
class AttendanceStatistics:
    total_sessions: int = 0
    total_days: int = 0
    incomplete_count: int = 0
    total_minutes: int = 0
    total_hours: float = 0.0
    average_hours: float = 0.0

    def to_dict(self) -> dict:
        return {
            "total_sessions": self.total_sessions,
            "total_days": self.total_days,
            "incomplete_count": self.incomplete_count,
            "total_minutes": self.total_minutes,
            "total_hours": self.total_hours,
            "average_hours": self.average_hours,
        }


def summarize(sessions: Iterable[AttendanceSession]) -> AttendanceStatistics:
    """Roll sessions up into totals.

    Every completed session counts as one day; sessions on the same calendar
    day are not merged. Hours are rounded to 2 decimals.
    """
    total = completed = active = minutes = 0
    for s in sessions:
        total += 1
        if s.status == SessionStatus.COMPLETED:
            completed += 1
            minutes += int(s.work_duration_minutes or 0)
        elif s.status == SessionStatus.ACTIVE:
            active += 1

    total_hours = minutes / 60
    average = total_hours / completed if completed > 0 else 0
    return AttendanceStatistics(
        total_sessions=total,
        total_days=completed,
        incomplete_count=active,
        total_minutes=minutes,
        total_hours=round(total_hours, 2),
        average_hours=round(average, 2),
    )


def group_by_employee(sessions: Iterable[AttendanceSession]) -> dict[int, list[AttendanceSession]]:
    grouped: dict[int, list[AttendanceSession]] = defaultdict(list)
    for s in sessions:
        grouped[s.employee_id].append(s)
    return dict(grouped)


def group_by_office(sessions: Iterable[AttendanceSession]) -> dict[int, list[AttendanceSession]]:
    grouped: dict[int, list[AttendanceSession]] = defaultdict(list)
    for s in sessions:
        grouped[s.office_id].append(s)
    return dict(grouped)


def format_duration(minutes: int | None) -> str:
    """``125`` -> ``"2h 5m"``; ``None`` -> ``"-"``."""
    if minutes is None:
        return "-"
    return f"{minutes // 60}h {minutes % 60}m"


def rank_by_hours(summaries: Sequence) -> list:
    return sorted(summaries, key=lambda s: s.statistics.total_minutes, reverse=True)
