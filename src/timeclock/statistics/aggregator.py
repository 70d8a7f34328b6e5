from __future__ import annotations

from typing import Iterable

from ..attendance.model import AttendanceDay
from .model import AttendanceStatistics


def summarize(days: Iterable[AttendanceDay]) -> AttendanceStatistics:
    """Fold attendance days into totals; only completed (clocked-out) days count."""
    working_days = 0
    total_work = 0
    total_break = 0
    for day in days:
        if not day.is_complete:
            continue
        working_days += 1
        total_work += int(day.total_work_minutes)
        total_break += int(day.total_break_minutes)

    average = total_work // working_days if working_days else 0
    return AttendanceStatistics(
        working_days=working_days,
        total_work_minutes=total_work,
        total_break_minutes=total_break,
        average_work_minutes_per_day=average,
    )
