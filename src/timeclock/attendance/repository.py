from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..audit.model import AuditEntry
from .model import AttendanceDay, AttendanceListRow, ClockEvent


class AttendanceRepository(Protocol):
    """Storage for attendance days and their clock events.

    Every mutating method is one transaction: the day row and whatever goes
    with it (events, audit entry) commit together or not at all.
    """

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceDay]:
        raise NotImplementedError

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceDay]:
        raise NotImplementedError

    def create_day(self, *, user_id: int, work_date: date) -> AttendanceDay:
        """Insert a not-started day; raises ``DuplicateRecordError`` if one exists."""

        raise NotImplementedError

    def list_for_user(
        self,
        user_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceDay]:
        """Newest first."""

        raise NotImplementedError

    def list_admin_view(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        user_id: Optional[int] = None,
        newest_first: bool = True,
    ) -> Sequence[AttendanceListRow]:
        raise NotImplementedError

    def save_transition(self, day: AttendanceDay, new_events: Sequence[ClockEvent]) -> AttendanceDay:
        raise NotImplementedError

    def save_override(self, day: AttendanceDay, *, audit: AuditEntry) -> int:
        """Admin-only direct write; returns the audit entry id."""

        raise NotImplementedError
