from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    EMPLOYEE = "employee"
    ADMIN = "admin"


class AttendanceStatus(str, Enum):
    """Live status of one attendance day, as stored in the database."""

    NOT_STARTED = "not_started"
    CLOCKED_IN = "clocked_in"
    ON_BREAK = "on_break"
    CLOCKED_OUT = "clocked_out"


class ClockEventType(str, Enum):
    """Kind of punch recorded against an attendance day."""

    CLOCK_IN = "clock_in"
    CLOCK_OUT = "clock_out"
    BREAK_START = "break_start"
    BREAK_END = "break_end"
