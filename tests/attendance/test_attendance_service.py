from __future__ import annotations

from datetime import date, datetime

import pytest

from timeclock.attendance import service as service_module
from timeclock.attendance.model import AttendanceDay
from timeclock.attendance.service import AttendanceService
from timeclock.core.enums import AttendanceStatus, ClockEventType
from timeclock.core.exceptions import DuplicateRecordError, InvalidStateError, NotFoundError, ValidationError


@pytest.fixture
def service(attendance_repo, users_repo, clock) -> AttendanceService:
    return AttendanceService(attendance_repo, users_repo, clock=clock, history_limit=2)


class RecordingLogger:
    def __init__(self):
        self.events: list[str] = []

    def info(self, event, **kw):
        self.events.append(event)

    warning = info


@pytest.fixture
def events(monkeypatch) -> list[str]:
    recorder = RecordingLogger()
    monkeypatch.setattr(service_module, "logger", recorder)
    return recorder.events


def test_get_or_create_today_creates_once(service, attendance_repo, fixed_now):
    first = service.get_or_create_today(2)
    second = service.get_or_create_today(2)

    assert first.attendance_id == second.attendance_id
    assert first.work_date == fixed_now.date()
    assert first.status == AttendanceStatus.NOT_STARTED
    assert first.total_work_minutes == 0 and first.total_break_minutes == 0
    assert len(attendance_repo.days) == 1


def test_get_or_create_today_rereads_after_duplicate(service, attendance_repo, fixed_now, events):
    winner = AttendanceDay(attendance_id=99, user_id=2, work_date=fixed_now.date())
    calls = {"n": 0}
    original_get = attendance_repo.get_for_user_and_date

    def racing_get(user_id, work_date):
        # First lookup misses; the other writer inserts before our create.
        calls["n"] += 1
        if calls["n"] == 1:
            attendance_repo.add(winner)
            return None
        return original_get(user_id, work_date)

    attendance_repo.get_for_user_and_date = racing_get

    day = service.get_or_create_today(2)
    assert day.attendance_id == 99
    assert len(attendance_repo.days) == 1
    assert events == ["attendance_day_reread_after_conflict"]


def test_duplicate_without_visible_row_is_propagated(service, attendance_repo):
    def always_duplicate(*, user_id, work_date):
        raise DuplicateRecordError("Duplicate entry")

    attendance_repo.create_day = always_duplicate
    with pytest.raises(DuplicateRecordError):
        service.get_or_create_today(2)


def test_future_dates_are_rejected(service):
    with pytest.raises(ValidationError):
        service.get_or_create_today(2, work_date=date(2026, 2, 3))


def test_unknown_employee(service):
    with pytest.raises(NotFoundError):
        service.get_or_create_today(404)


def test_clock_actions_persist_day_and_events(service, attendance_repo, clock):
    service.clock_in(2)
    clock.set(2026, 2, 2, 12, 0)
    service.start_break(2)
    clock.set(2026, 2, 2, 12, 45)
    service.end_break(2)
    clock.set(2026, 2, 2, 18, 0)
    day = service.clock_out(2)

    assert day.status == AttendanceStatus.CLOCKED_OUT
    assert day.total_break_minutes == 45
    assert day.total_work_minutes == 540 - 45
    assert all(e.event_id is not None for e in day.events)
    assert attendance_repo.get_by_id(day.attendance_id) == day


def test_clock_out_from_break_stores_both_events(service, clock):
    service.clock_in(2)
    clock.set(2026, 2, 2, 12, 0)
    service.start_break(2)
    clock.set(2026, 2, 2, 12, 30)
    day = service.clock_out(2)

    assert [e.event_type for e in day.events][-2:] == [ClockEventType.BREAK_END, ClockEventType.CLOCK_OUT]
    assert day.total_break_minutes == 30
    assert day.total_work_minutes == 210 - 30


def test_rejected_action_leaves_store_untouched(service, attendance_repo):
    day = service.clock_in(2)
    with pytest.raises(InvalidStateError):
        service.clock_in(2)
    assert attendance_repo.get_by_id(day.attendance_id) == day


def test_history_uses_limit_without_range(service, attendance_repo):
    for d in (1, 2, 3):
        attendance_repo.add(AttendanceDay(attendance_id=d, user_id=2, work_date=date(2026, 1, d)))
    attendance_repo.add(AttendanceDay(attendance_id=10, user_id=3, work_date=date(2026, 1, 1)))

    assert [d.work_date.day for d in service.history(2)] == [3, 2]
    in_range = service.history(2, start_date=date(2026, 1, 1), end_date=date(2026, 1, 3))
    assert len(in_range) == 3


def test_get_for_user_hides_other_users_days(service, attendance_repo):
    attendance_repo.add(AttendanceDay(attendance_id=7, user_id=3, work_date=date(2026, 1, 5)))
    with pytest.raises(NotFoundError):
        service.get_for_user(2, 7)
    assert service.get_for_user(3, 7).attendance_id == 7


def test_fresh_day_logs_creation(service, events):
    service.get_or_create_today(2)
    service.get_or_create_today(2)
    assert events == ["attendance_day_created"]
