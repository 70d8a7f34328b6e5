from __future__ import annotations

import calendar
from dataclasses import asdict
from datetime import date

from ..attendance.repository import AttendanceRepository
from ..common.validators import require_date_range, require_year_month
from .aggregator import summarize
from .model import MonthlyStatistics, RangeStatistics


class StatisticsService:
    """Read-only summaries over a user's attendance days."""

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def monthly(self, user_id: int, year: int, month: int) -> MonthlyStatistics:
        require_year_month(year, month)

        start = date(int(year), int(month), 1)
        end = date(int(year), int(month), calendar.monthrange(int(year), int(month))[1])
        days = self._attendance.list_for_user(user_id, start_date=start, end_date=end)

        return MonthlyStatistics(**asdict(summarize(days)), year=int(year), month=int(month))

    def date_range(self, user_id: int, start: date, end: date) -> RangeStatistics:
        require_date_range(start, end)

        days = self._attendance.list_for_user(user_id, start_date=start, end_date=end)
        return RangeStatistics(
            **asdict(summarize(days)),
            start_date=start,
            end_date=end,
            total_days=(end - start).days + 1,
        )
