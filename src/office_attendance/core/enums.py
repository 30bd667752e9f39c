from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles as written into the session by the auth layer."""

    EMPLOYEE = "employee"
    ADMIN = "admin"
    HRD = "hrd"

    @property
    def can_view_reports(self) -> bool:
        return self in (Role.ADMIN, Role.HRD)


class SessionStatus(str, Enum):
    """Lifecycle of an attendance session as stored in the database."""

    ACTIVE = "active"
    COMPLETED = "completed"
