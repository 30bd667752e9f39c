"""Helpers shared by the Flask controllers.

The logged-in user is read from ``session["user_id"]`` / ``session["role"]``,
which the authentication layer writes; nothing here authenticates.
"""

from __future__ import annotations

from functools import wraps
from typing import Any, Optional

from flask import jsonify, session

from ..attendance.model import AttendanceSession
from ..core.enums import Role
from ..core.exceptions import (
    AlreadyCheckedInError,
    AuthorizationError,
    DomainError,
    InvalidOfficeError,
    NoActiveSessionError,
    OutOfRangeError,
    ValidationError,
)
from ..offices.model import Office
from ..reports.aggregator import format_duration
from .geo import GeoPoint

_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (ValidationError, 422),
    (AuthorizationError, 403),
    (OutOfRangeError, 422),
    (AlreadyCheckedInError, 409),
    (NoActiveSessionError, 409),
    (InvalidOfficeError, 404),
)


def error_response(e: DomainError):
    status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(e, cls)), 400)
    body: dict[str, Any] = {
        "success": False,
        "error": e.code,
        "message": str(e),
    }
    if isinstance(e, OutOfRangeError):
        body["distance"] = e.distance
        body["radius"] = e.radius
    return jsonify(body), status


def _current_role() -> Optional[Role]:
    try:
        return Role(session.get("role"))
    except ValueError:
        return None


def current_employee_id() -> int:
    return int(session["user_id"])


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Please log in to continue."}), 401
        return view(*args, **kwargs)

    return wrapper


def employee_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Please log in to continue."}), 401
        if _current_role() != Role.EMPLOYEE:
            return error_response(AuthorizationError("Only employees can record attendance."))
        return view(*args, **kwargs)

    return wrapper


def manager_required(view):
    """Admin and HR only."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Please log in to continue."}), 401
        role = _current_role()
        if not role or not role.can_view_reports:
            return error_response(AuthorizationError("Only administrators and HR can view reports."))
        return view(*args, **kwargs)

    return wrapper


def point_json(p: Optional[GeoPoint]) -> Optional[dict]:
    if p is None:
        return None
    return {"latitude": p.latitude, "longitude": p.longitude}


def session_json(s: AttendanceSession) -> dict:
    return {
        "id": s.session_id,
        "employee_id": s.employee_id,
        "office_id": s.office_id,
        "status": s.status.value,
        "check_in": s.check_in.isoformat(),
        "check_in_location": point_json(s.check_in_location),
        "check_in_distance": s.check_in_distance,
        "check_out": s.check_out.isoformat() if s.check_out else None,
        "check_out_location": point_json(s.check_out_location),
        "check_out_distance": s.check_out_distance,
        "work_duration_minutes": s.work_duration_minutes,
        "work_duration": format_duration(s.work_duration_minutes),
        "notes": s.notes,
    }


def office_json(o: Office) -> dict:
    return {
        "id": o.office_id,
        "name": o.name,
        "address": o.address,
        "latitude": o.latitude,
        "longitude": o.longitude,
        "radius": o.radius_meters,
        "is_active": o.is_active,
    }


def page_json(page) -> dict:
    return {
        "items": [session_json(s) for s in page.items],
        "page": page.page,
        "per_page": page.per_page,
        "total": page.total,
        "pages": page.pages,
    }
