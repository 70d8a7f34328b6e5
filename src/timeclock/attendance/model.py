from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.time_math import minutes_between
from ..core.enums import AttendanceStatus, ClockEventType


@dataclass(frozen=True)
class ClockEvent:
    """Immutable punch record belonging to one attendance day."""

    event_type: ClockEventType
    timestamp: datetime
    event_id: Optional[int] = None


@dataclass(frozen=True)
class AttendanceDay:
    """Domain entity: one employee's attendance for one calendar date.

    ``events`` is kept in chronological order. Status and totals change only
    through ``attendance.lifecycle`` or the administrative override.
    """

    attendance_id: int
    user_id: int
    work_date: date
    status: AttendanceStatus = AttendanceStatus.NOT_STARTED
    clock_in_time: Optional[datetime] = None
    clock_out_time: Optional[datetime] = None
    total_work_minutes: int = 0
    total_break_minutes: int = 0
    events: tuple[ClockEvent, ...] = ()

    @property
    def can_clock_in(self) -> bool:
        return self.status == AttendanceStatus.NOT_STARTED

    @property
    def can_clock_out(self) -> bool:
        return self.status in (AttendanceStatus.CLOCKED_IN, AttendanceStatus.ON_BREAK)

    @property
    def can_start_break(self) -> bool:
        return self.status == AttendanceStatus.CLOCKED_IN

    @property
    def can_end_break(self) -> bool:
        return self.status == AttendanceStatus.ON_BREAK

    @property
    def is_complete(self) -> bool:
        return self.status == AttendanceStatus.CLOCKED_OUT

    @property
    def is_in_progress(self) -> bool:
        return self.status in (AttendanceStatus.CLOCKED_IN, AttendanceStatus.ON_BREAK)

    def current_break_minutes(self) -> int:
        # An open break segment is not counted until it ends.
        return self.total_break_minutes

    def total_office_minutes(self, now: datetime) -> int:
        if not self.clock_in_time:
            return 0
        return minutes_between(self.clock_in_time, self.clock_out_time or now)

    def current_work_minutes(self, now: datetime) -> int:
        if not self.clock_in_time:
            return 0
        return self.total_office_minutes(now) - self.current_break_minutes()


@dataclass(frozen=True)
class AttendanceListRow:
    """Read-model for admin listings and CSV export (day joined with its user)."""

    day: AttendanceDay
    user_name: str
    user_email: str
