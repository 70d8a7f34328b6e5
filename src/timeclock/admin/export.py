from __future__ import annotations

import csv
import io
from typing import Iterable

from ..attendance.model import AttendanceListRow

CSV_HEADERS = [
    "Date",
    "Employee Name",
    "Employee Email",
    "Clock In",
    "Clock Out",
    "Work Hours",
    "Break Minutes",
    "Status",
]


def _csv_row(row: AttendanceListRow) -> list:
    day = row.day
    return [
        day.work_date.strftime("%Y-%m-%d"),
        row.user_name,
        row.user_email,
        day.clock_in_time.strftime("%H:%M") if day.clock_in_time else "",
        day.clock_out_time.strftime("%H:%M") if day.clock_out_time else "",
        round(day.total_work_minutes / 60.0, 2) if day.total_work_minutes else 0,
        day.total_break_minutes or 0,
        day.status.value.replace("_", " ").capitalize(),
    ]


def build_attendance_csv(rows: Iterable[AttendanceListRow]) -> bytes:
    """Render attendance rows as CSV bytes (UTF-8 with BOM for Excel)."""
    out = io.StringIO()
    writer = csv.writer(out)
    writer.writerow(CSV_HEADERS)
    for row in rows:
        writer.writerow(_csv_row(row))
    return out.getvalue().encode("utf-8-sig")
