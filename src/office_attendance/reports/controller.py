from __future__ import annotations

from datetime import date
from typing import Optional

from flask import Flask, current_app, jsonify, request

from ..common.datetime_utils import month_bounds, parse_iso_date, parse_month
from ..common.validators import require_int
from ..common.web import error_response, manager_required, page_json, session_json
from ..container import Container
from ..core.constants import DEFAULT_REPORT_PAGE_SIZE
from ..core.exceptions import DomainError, ValidationError


def register(app: Flask, container: Container) -> None:
    def _date_arg(name: str, default: date) -> date:
        value = request.args.get(name)
        if not value:
            return default
        try:
            return parse_iso_date(value)
        except ValueError:
            raise ValidationError(f"{name} must be in YYYY-MM-DD format.")

    def _month_arg(name: str = "month") -> date:
        value = request.args.get(name)
        if not value:
            return date.today().replace(day=1)
        try:
            return parse_month(value)
        except ValueError:
            raise ValidationError(f"{name} must be in YYYY-MM format.")

    def _optional_int_arg(name: str) -> Optional[int]:
        value = request.args.get(name)
        return require_int(value, name) if value not in (None, "") else None

    def _int_list_arg(name: str) -> list[int]:
        return [require_int(v, name) for v in request.args.getlist(name) if v != ""]

    def _per_page() -> int:
        return int(current_app.config.get("REPORT_PAGE_SIZE", DEFAULT_REPORT_PAGE_SIZE))

    def _range_json(report) -> dict:
        return {
            "filters": {
                "start_date": report.start.isoformat(),
                "end_date": report.end.isoformat(),
                "office_id": report.office_id,
                "employee_id": report.employee_id,
            },
            "statistics": report.statistics.to_dict(),
            "sessions": page_json(report.sessions),
        }

    @app.route("/api/reports", methods=["GET"], endpoint="api_reports")
    @manager_required
    def reports_index():
        try:
            first, last = month_bounds(date.today())
            report = container.report_service.build_range_report(
                start=_date_arg("start_date", first),
                end=_date_arg("end_date", last),
                office_id=_optional_int_arg("office_id"),
                employee_id=_optional_int_arg("employee_id"),
                page=_optional_int_arg("page") or 1,
                per_page=_per_page(),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "data": _range_json(report)}), 200

    @app.route("/api/reports/daily", methods=["GET"], endpoint="api_reports_daily")
    @manager_required
    def reports_daily():
        try:
            report = container.report_service.build_daily_report(
                day=_date_arg("date", date.today()),
                office_id=_optional_int_arg("office_id"),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify(
            {
                "success": True,
                "data": {
                    "date": report.day.isoformat(),
                    "office_id": report.office_id,
                    "sessions": [session_json(s) for s in report.sessions],
                    "by_office": {
                        name: [session_json(s) for s in items] for name, items in report.by_office.items()
                    },
                },
            }
        ), 200

    @app.route("/api/reports/monthly", methods=["GET"], endpoint="api_reports_monthly")
    @manager_required
    def reports_monthly():
        try:
            month = _month_arg()
            summaries = container.report_service.build_monthly_summary(
                month=month,
                office_id=_optional_int_arg("office_id"),
                employee_ids=_int_list_arg("employee_id"),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify(
            {
                "success": True,
                "data": {
                    "month": month.strftime("%Y-%m"),
                    "month_name": month.strftime("%B %Y"),
                    "employees": [
                        {"employee_id": s.employee_id, **s.statistics.to_dict()} for s in summaries
                    ],
                },
            }
        ), 200

    @app.route("/api/reports/employees/<int:employee_id>", methods=["GET"], endpoint="api_reports_employee")
    @manager_required
    def reports_employee(employee_id: int):
        try:
            first, last = month_bounds(date.today())
            report = container.report_service.build_employee_report(
                employee_id=employee_id,
                start=_date_arg("start_date", first),
                end=_date_arg("end_date", last),
                page=_optional_int_arg("page") or 1,
                per_page=_per_page(),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "data": _range_json(report)}), 200
