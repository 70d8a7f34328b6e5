"""Attendance lifecycle engine.

Transitions are pure: each action takes an ``AttendanceDay`` and the current
time and returns a ``Transition`` holding the updated day plus the clock
events to append. Persisting both atomically is the caller's job.

    not_started --clock_in-->    clocked_in
    clocked_in  --break_start--> on_break
    on_break    --break_end-->   clocked_in
    clocked_in  --clock_out-->   clocked_out

Clocking out while on break is ``end_break`` followed by ``clock_out``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

import structlog

from ..common.time_math import minutes_between
from ..core.enums import AttendanceStatus, ClockEventType
from ..core.exceptions import InvalidStateError, ValidationError
from .model import AttendanceDay, ClockEvent

logger = structlog.get_logger(__name__)


TRANSITIONS: dict[tuple[AttendanceStatus, ClockEventType], AttendanceStatus] = {
    (AttendanceStatus.NOT_STARTED, ClockEventType.CLOCK_IN): AttendanceStatus.CLOCKED_IN,
    (AttendanceStatus.CLOCKED_IN, ClockEventType.BREAK_START): AttendanceStatus.ON_BREAK,
    (AttendanceStatus.ON_BREAK, ClockEventType.BREAK_END): AttendanceStatus.CLOCKED_IN,
    (AttendanceStatus.CLOCKED_IN, ClockEventType.CLOCK_OUT): AttendanceStatus.CLOCKED_OUT,
}

REJECTION_MESSAGES: dict[ClockEventType, str] = {
    ClockEventType.CLOCK_IN: "Already clocked in today",
    ClockEventType.CLOCK_OUT: "Cannot clock out. Must be clocked in first",
    ClockEventType.BREAK_START: "Cannot start break. Must be clocked in first",
    ClockEventType.BREAK_END: "Cannot end break. Must be on break first",
}


@dataclass(frozen=True)
class Transition:
    day: AttendanceDay
    new_events: tuple[ClockEvent, ...]

    def then(self, other: "Transition") -> "Transition":
        return Transition(day=other.day, new_events=self.new_events + other.new_events)


def next_status(status: AttendanceStatus, event_type: ClockEventType) -> AttendanceStatus:
    try:
        return TRANSITIONS[(status, event_type)]
    except KeyError:
        raise InvalidStateError(REJECTION_MESSAGES[event_type]) from None


def _apply(day: AttendanceDay, event_type: ClockEventType, now: datetime, **changes) -> Transition:
    status = next_status(day.status, event_type)
    event = ClockEvent(event_type=event_type, timestamp=now)
    updated = replace(day, status=status, events=day.events + (event,), **changes)
    return Transition(day=updated, new_events=(event,))


def open_break_start(day: AttendanceDay) -> Optional[ClockEvent]:
    """Most recent break_start not yet matched by a break_end."""
    open_start: Optional[ClockEvent] = None
    for event in day.events:
        if event.event_type == ClockEventType.BREAK_START:
            open_start = event
        elif event.event_type == ClockEventType.BREAK_END:
            open_start = None
    return open_start


def recalculate_totals(day: AttendanceDay) -> AttendanceDay:
    """Final work minutes for a completed day: office time minus breaks, never negative."""
    if day.status != AttendanceStatus.CLOCKED_OUT or not (day.clock_in_time and day.clock_out_time):
        return day
    office = minutes_between(day.clock_in_time, day.clock_out_time)
    return replace(day, total_work_minutes=max(office - day.total_break_minutes, 0))


def clock_in(day: AttendanceDay, now: datetime) -> Transition:
    return _apply(day, ClockEventType.CLOCK_IN, now, clock_in_time=now)


def start_break(day: AttendanceDay, now: datetime) -> Transition:
    return _apply(day, ClockEventType.BREAK_START, now)


def end_break(day: AttendanceDay, now: datetime) -> Transition:
    next_status(day.status, ClockEventType.BREAK_END)

    start = open_break_start(day)
    if start is None:
        logger.warning(
            "break_end_without_break_start",
            attendance_id=day.attendance_id,
            user_id=day.user_id,
        )
        delta = 0
    else:
        delta = max(minutes_between(start.timestamp, now), 0)

    return _apply(day, ClockEventType.BREAK_END, now, total_break_minutes=day.total_break_minutes + delta)


def clock_out(day: AttendanceDay, now: datetime) -> Transition:
    if not day.can_clock_out:
        raise InvalidStateError(REJECTION_MESSAGES[ClockEventType.CLOCK_OUT])

    if day.status == AttendanceStatus.ON_BREAK:
        closing = end_break(day, now)
        return closing.then(clock_out(closing.day, now))

    if day.clock_in_time and now <= day.clock_in_time:
        raise ValidationError.for_field("clock_out_time", "must be after clock in time")

    transition = _apply(day, ClockEventType.CLOCK_OUT, now, clock_out_time=now)
    return Transition(day=recalculate_totals(transition.day), new_events=transition.new_events)
