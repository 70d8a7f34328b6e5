from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Optional, Sequence

import structlog

from ..common.datetime_utils import now_local
from ..common.validators import require_date_range
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import DuplicateRecordError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from . import lifecycle
from .model import AttendanceDay
from .repository import AttendanceRepository

logger = structlog.get_logger(__name__)


class AttendanceService:
    """Employee-facing use cases: today's day, the four clock actions, history."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        clock: Callable[[], datetime] = now_local,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        self._attendance = attendance
        self._users = users
        self._clock = clock
        self._history_limit = int(history_limit)

    def now(self) -> datetime:
        return self._clock()

    def get_or_create_today(self, user_id: int, *, work_date: Optional[date] = None) -> AttendanceDay:
        today = self.now().date()
        work_date = work_date or today
        if work_date > today:
            raise ValidationError.for_field("date", "cannot be in the future")

        existing = self._attendance.get_for_user_and_date(user_id, work_date)
        if existing:
            return existing

        if not self._users.get_by_id(user_id):
            raise NotFoundError("Employee not found")

        try:
            day = self._attendance.create_day(user_id=user_id, work_date=work_date)
        except DuplicateRecordError:
            # Lost a first-touch race; the other request's row is the one.
            day = self._attendance.get_for_user_and_date(user_id, work_date)
            if day is None:
                raise
            logger.info("attendance_day_reread_after_conflict", user_id=user_id, attendance_id=day.attendance_id, work_date=work_date)
            return day

        logger.info("attendance_day_created", user_id=user_id, attendance_id=day.attendance_id, work_date=work_date)
        return day

    def _perform(self, user_id: int, action: Callable[[AttendanceDay, datetime], lifecycle.Transition], name: str) -> AttendanceDay:
        now = self.now()
        day = self.get_or_create_today(user_id, work_date=now.date())
        transition = action(day, now)
        saved = self._attendance.save_transition(transition.day, transition.new_events)
        logger.info(
            name,
            user_id=user_id,
            attendance_id=saved.attendance_id,
            status=saved.status.value,
            events=[e.event_type.value for e in transition.new_events],
        )
        return saved

    def clock_in(self, user_id: int) -> AttendanceDay:
        return self._perform(user_id, lifecycle.clock_in, "clocked_in")

    def clock_out(self, user_id: int) -> AttendanceDay:
        return self._perform(user_id, lifecycle.clock_out, "clocked_out")

    def start_break(self, user_id: int) -> AttendanceDay:
        return self._perform(user_id, lifecycle.start_break, "break_started")

    def end_break(self, user_id: int) -> AttendanceDay:
        return self._perform(user_id, lifecycle.end_break, "break_ended")

    def history(
        self,
        user_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceDay]:
        if start_date and end_date:
            require_date_range(start_date, end_date)
            return self._attendance.list_for_user(user_id, start_date=start_date, end_date=end_date)
        return self._attendance.list_for_user(user_id, limit=self._history_limit)

    def get_for_user(self, user_id: int, attendance_id: int) -> AttendanceDay:
        day = self._attendance.get_by_id(attendance_id)
        if not day or day.user_id != int(user_id):
            raise NotFoundError("Attendance record not found")
        return day
