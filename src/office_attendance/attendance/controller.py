from __future__ import annotations

import logging
from datetime import date

from flask import Flask, current_app, jsonify, request

from ..common.datetime_utils import parse_month
from ..common.validators import CheckInRequest, CheckOutRequest, require_int
from ..common.web import (
    current_employee_id,
    employee_required,
    error_response,
    page_json,
    session_json,
)
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_PAGE_SIZE, NOTES_MAX_LENGTH
from ..core.exceptions import DomainError, ValidationError
from ..reports.aggregator import format_duration

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _notes_limit() -> int:
        return int(current_app.config.get("NOTES_MAX_LENGTH", NOTES_MAX_LENGTH))

    @app.route("/api/attendance/today", methods=["GET"], endpoint="api_attendance_today")
    @employee_required
    def today():
        employee_id = current_employee_id()
        active = container.attendance_service.get_today_session(employee_id)
        recent = container.attendance_service.recent_sessions(employee_id)
        return jsonify(
            {
                "success": True,
                "data": {
                    "active": session_json(active) if active else None,
                    "recent": [session_json(s) for s in recent],
                },
            }
        ), 200

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="api_check_in")
    @employee_required
    def check_in():
        try:
            req = CheckInRequest.from_payload(request.get_json(silent=True) or {}, notes_max_length=_notes_limit())
            session = container.attendance_service.check_in(
                current_employee_id(),
                req.office_id,
                req.latitude,
                req.longitude,
                req.notes,
            )
            office = container.offices_repo.get_by_id(session.office_id)
            name = office.name if office else f"office #{session.office_id}"
            return jsonify(
                {
                    "success": True,
                    "message": f"Successfully checked in at {name}!",
                    "data": session_json(session),
                }
            ), 201
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Check-in failed for employee %s", current_employee_id())
            return jsonify({"success": False, "message": "System error while checking in."}), 500

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="api_check_out")
    @employee_required
    def check_out():
        try:
            req = CheckOutRequest.from_payload(request.get_json(silent=True) or {}, notes_max_length=_notes_limit())
            session = container.attendance_service.check_out(
                current_employee_id(),
                req.latitude,
                req.longitude,
                req.notes,
            )
            return jsonify(
                {
                    "success": True,
                    "message": f"Successfully checked out! Work duration: {format_duration(session.work_duration_minutes)}",
                    "data": session_json(session),
                }
            ), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Check-out failed for employee %s", current_employee_id())
            return jsonify({"success": False, "message": "System error while checking out."}), 500

    @app.route("/api/attendance/history", methods=["GET"], endpoint="api_attendance_history")
    @employee_required
    def history():
        try:
            month_arg = request.args.get("month")
            try:
                month = parse_month(month_arg) if month_arg else date.today().replace(day=1)
            except ValueError:
                raise ValidationError("Month must be in YYYY-MM format.")
            page = require_int(request.args.get("page", 1), "Page")

            report = container.report_service.build_history(
                employee_id=current_employee_id(),
                month=month,
                page=page,
                per_page=int(current_app.config.get("HISTORY_PAGE_SIZE", DEFAULT_HISTORY_PAGE_SIZE)),
            )
        except DomainError as e:
            return error_response(e)

        return jsonify(
            {
                "success": True,
                "data": {
                    "month": month.strftime("%Y-%m"),
                    "statistics": report.statistics.to_dict(),
                    "sessions": page_json(report.sessions),
                },
            }
        ), 200
