from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_date_param
from ..common.http import current_user_id, login_required
from ..common.validators import require_date_range
from ..container import Container
from .serializer import serialize_attendance, serialize_capabilities


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def _respond(message: str, day):
        return jsonify({"message": message, "attendance": serialize_attendance(day, now=service.now())})

    @app.route("/api/v1/attendances", methods=["GET"], endpoint="attendances_index")
    @login_required
    def index():
        start_s = request.args.get("start_date")
        end_s = request.args.get("end_date")
        start = parse_date_param(start_s, "start_date") if start_s and end_s else None
        end = parse_date_param(end_s, "end_date") if start_s and end_s else None

        now = service.now()
        days = service.history(current_user_id(), start_date=start, end_date=end)
        return jsonify({"attendances": [serialize_attendance(d, now=now) for d in days]})

    @app.route("/api/v1/attendances/<int:attendance_id>", methods=["GET"], endpoint="attendances_show")
    @login_required
    def show(attendance_id: int):
        day = service.get_for_user(current_user_id(), attendance_id)
        return jsonify({"attendance": serialize_attendance(day, now=service.now())})

    @app.route("/api/v1/attendances/today", methods=["GET"], endpoint="attendances_today")
    @login_required
    def today():
        day = service.get_or_create_today(current_user_id())
        return jsonify({"attendance": serialize_attendance(day, now=service.now()), **serialize_capabilities(day)})

    @app.route("/api/v1/attendances/clock_in", methods=["POST"], endpoint="attendances_clock_in")
    @login_required
    def clock_in():
        return _respond("Successfully clocked in", service.clock_in(current_user_id()))

    @app.route("/api/v1/attendances/clock_out", methods=["POST"], endpoint="attendances_clock_out")
    @login_required
    def clock_out():
        return _respond("Successfully clocked out", service.clock_out(current_user_id()))

    @app.route("/api/v1/attendances/break_start", methods=["POST"], endpoint="attendances_break_start")
    @login_required
    def break_start():
        return _respond("Break started", service.start_break(current_user_id()))

    @app.route("/api/v1/attendances/break_end", methods=["POST"], endpoint="attendances_break_end")
    @login_required
    def break_end():
        return _respond("Break ended", service.end_break(current_user_id()))

    @app.route("/api/v1/attendances/statistics", methods=["GET"], endpoint="attendances_statistics")
    @login_required
    def statistics():
        today = service.now().date()
        start_s = request.args.get("start_date")
        end_s = request.args.get("end_date")
        start = parse_date_param(start_s, "start_date") if start_s else today.replace(day=1)
        end = parse_date_param(end_s, "end_date") if end_s else today
        require_date_range(start, end)

        stats = container.statistics_service.date_range(current_user_id(), start, end)
        return jsonify({"statistics": stats.to_dict()})

    @app.route("/api/v1/attendances/monthly/<int:year>/<int:month>", methods=["GET"], endpoint="attendances_monthly")
    @login_required
    def monthly(year: int, month: int):
        stats = container.statistics_service.monthly(current_user_id(), year, month)
        return jsonify({"statistics": stats.to_dict()})
