from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import login_required, office_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/offices", methods=["GET"], endpoint="api_offices")
    @login_required
    def api_offices():
        offices = container.attendance_service.available_offices()
        return jsonify({"success": True, "data": [office_json(o) for o in offices]}), 200
