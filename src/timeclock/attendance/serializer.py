from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..common.time_math import format_minutes
from .model import AttendanceDay, AttendanceListRow


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def serialize_events(day: AttendanceDay) -> list[dict]:
    events = sorted(day.events, key=lambda e: (e.timestamp, e.event_id or 0))
    return [{"id": e.event_id, "type": e.event_type.value, "timestamp": _iso(e.timestamp)} for e in events]


def serialize_attendance(day: AttendanceDay, *, now: datetime) -> dict:
    return {
        "id": day.attendance_id,
        "date": _iso(day.work_date),
        "status": day.status.value,
        "clock_in_time": _iso(day.clock_in_time),
        "clock_out_time": _iso(day.clock_out_time),
        "total_work_minutes": day.total_work_minutes,
        "total_break_minutes": day.total_break_minutes,
        "current_work_minutes": day.current_work_minutes(now),
        "current_break_minutes": day.current_break_minutes(),
        "formatted_work_time": format_minutes(day.total_work_minutes),
        "formatted_break_time": format_minutes(day.total_break_minutes),
        "formatted_total_office_time": format_minutes(day.total_office_minutes(now)),
        "complete": day.is_complete,
        "in_progress": day.is_in_progress,
        "events": serialize_events(day),
    }


def serialize_capabilities(day: AttendanceDay) -> dict:
    return {
        "can_clock_in": day.can_clock_in,
        "can_clock_out": day.can_clock_out,
        "can_start_break": day.can_start_break,
        "can_end_break": day.can_end_break,
    }


def serialize_admin_row(row: AttendanceListRow) -> dict:
    day = row.day
    return {
        "id": day.attendance_id,
        "user": {"id": day.user_id, "name": row.user_name, "email": row.user_email},
        "date": _iso(day.work_date),
        "clock_in_time": _iso(day.clock_in_time),
        "clock_out_time": _iso(day.clock_out_time),
        "total_work_minutes": day.total_work_minutes,
        "total_break_minutes": day.total_break_minutes,
        "status": day.status.value,
        "events": serialize_events(day),
    }
