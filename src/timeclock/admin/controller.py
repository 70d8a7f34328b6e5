from __future__ import annotations

from flask import Flask, jsonify, request

from ..attendance.serializer import serialize_admin_row, serialize_attendance
from ..common.datetime_utils import parse_date_param
from ..common.http import admin_required, current_user_id, json_body
from ..core.constants import DEFAULT_AUDIT_LOG_LIMIT
from ..core.exceptions import ValidationError
from ..container import Container
from .export import build_attendance_csv


def _optional_date(name: str):
    value = request.args.get(name)
    return parse_date_param(value, name) if value else None


def _optional_int(name: str):
    value = request.args.get(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError.for_field(name, "must be an integer")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/v1/admin/attendances", methods=["GET"], endpoint="admin_attendances")
    @admin_required
    def attendances():
        rows = container.admin_attendance_service.list_attendances(
            start_date=_optional_date("start_date"),
            end_date=_optional_date("end_date"),
            user_id=_optional_int("user_id"),
        )
        return jsonify({"attendances": [serialize_admin_row(r) for r in rows]})

    @app.route("/api/v1/admin/attendances/<int:attendance_id>", methods=["PUT", "PATCH"], endpoint="admin_update_attendance")
    @admin_required
    def update_attendance(attendance_id: int):
        data = json_body()
        fields = data.get("attendance")
        if fields is not None and not isinstance(fields, dict):
            raise ValidationError.for_field("attendance", "must be an object")

        result = container.correction_service.override_fields(
            attendance_id,
            fields or {},
            data.get("reason"),
            current_user_id(),
        )
        return jsonify(
            {
                "message": "Attendance updated successfully",
                "attendance": {
                    "user_id": result.day.user_id,
                    **serialize_attendance(result.day, now=container.attendance_service.now()),
                },
                "audit_log": {
                    "id": result.audit.audit_id,
                    "action": result.audit.action,
                    "changes": result.audit.changes_to_dict(),
                    "reason": result.audit.reason,
                },
            }
        )

    @app.route("/api/v1/admin/audit_logs", methods=["GET"], endpoint="admin_audit_logs")
    @admin_required
    def audit_logs():
        entries = container.audit_service.list_entries(
            start_date=_optional_date("start_date"),
            end_date=_optional_date("end_date"),
            subject_id=_optional_int("target_user_id"),
            limit=_optional_int("limit") or DEFAULT_AUDIT_LOG_LIMIT,
        )
        return jsonify({"audit_logs": entries})

    @app.route("/api/v1/admin/export_csv", methods=["GET"], endpoint="admin_export_csv")
    @admin_required
    def export_csv():
        rows = container.admin_attendance_service.list_attendances(
            start_date=_optional_date("start_date"),
            end_date=_optional_date("end_date"),
            newest_first=False,
        )
        filename = f"attendance_export_{container.attendance_service.now().strftime('%Y%m%d')}.csv"
        return app.response_class(
            build_attendance_csv(rows),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
