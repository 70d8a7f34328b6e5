from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date

from ..common.time_math import format_minutes


@dataclass(frozen=True)
class AttendanceStatistics:
    working_days: int = 0
    total_work_minutes: int = 0
    total_break_minutes: int = 0
    average_work_minutes_per_day: int = 0

    @property
    def formatted_total_work_time(self) -> str:
        return format_minutes(self.total_work_minutes)

    @property
    def formatted_total_break_time(self) -> str:
        return format_minutes(self.total_break_minutes)

    @property
    def formatted_average_work_time_per_day(self) -> str:
        return format_minutes(self.average_work_minutes_per_day)

    def to_dict(self) -> dict:
        out = {
            "working_days": self.working_days,
            "total_work_minutes": self.total_work_minutes,
            "total_break_minutes": self.total_break_minutes,
            "average_work_minutes_per_day": self.average_work_minutes_per_day,
            "formatted_total_work_time": self.formatted_total_work_time,
            "formatted_total_break_time": self.formatted_total_break_time,
            "formatted_average_work_time_per_day": self.formatted_average_work_time_per_day,
        }
        for key, value in asdict(self).items():
            if isinstance(value, date):
                out[key] = value.isoformat()
            else:
                out.setdefault(key, value)
        return out


@dataclass(frozen=True)
class MonthlyStatistics(AttendanceStatistics):
    year: int = 0
    month: int = 0


@dataclass(frozen=True)
class RangeStatistics(AttendanceStatistics):
    start_date: date = date.min
    end_date: date = date.min
    total_days: int = 0
