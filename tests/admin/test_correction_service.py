from __future__ import annotations

from datetime import date, datetime

import pytest

from timeclock.admin.service import CorrectionService
from timeclock.attendance.model import AttendanceDay
from timeclock.core.enums import AttendanceStatus
from timeclock.core.exceptions import NotFoundError, ValidationError


@pytest.fixture
def completed_day(attendance_repo) -> AttendanceDay:
    return attendance_repo.add(
        AttendanceDay(
            attendance_id=11,
            user_id=2,
            work_date=date(2026, 2, 1),
            status=AttendanceStatus.CLOCKED_OUT,
            clock_in_time=datetime(2026, 2, 1, 9, 0),
            clock_out_time=datetime(2026, 2, 1, 17, 30),
            total_work_minutes=480,
            total_break_minutes=30,
        )
    )


@pytest.fixture
def service(attendance_repo, clock) -> CorrectionService:
    return CorrectionService(attendance_repo, clock=clock)


@pytest.mark.parametrize("reason", [None, "", "   "])
def test_blank_reason_has_no_side_effects(service, attendance_repo, completed_day, reason):
    with pytest.raises(ValidationError) as exc:
        service.override_fields(11, {"clock_in_time": "2026-02-01T08:00:00"}, reason, actor_id=1)

    assert "reason" in exc.value.errors
    assert attendance_repo.get_by_id(11) == completed_day
    assert attendance_repo.audit_entries == []


def test_blank_reason_checked_before_lookup(service):
    with pytest.raises(ValidationError):
        service.override_fields(999, {}, "", actor_id=1)


def test_unknown_attendance(service):
    with pytest.raises(NotFoundError):
        service.override_fields(999, {"total_break_minutes": 10}, "fix", actor_id=1)


def test_changed_time_recomputes_totals_and_audits(service, attendance_repo, completed_day, fixed_now):
    result = service.override_fields(11, {"clock_in_time": "2026-02-01T08:30:00"}, "forgot to clock in", actor_id=1)

    assert result.day.clock_in_time == datetime(2026, 2, 1, 8, 30)
    assert result.day.total_work_minutes == 540 - 30
    assert attendance_repo.get_by_id(11) == result.day

    [entry] = attendance_repo.audit_entries
    assert entry.audit_id == result.audit.audit_id
    assert entry.action == "update_attendance"
    assert entry.actor_id == 1 and entry.subject_id == 2
    assert entry.reason == "forgot to clock in"
    assert entry.created_at == fixed_now
    assert entry.changes_to_dict() == {
        "clock_in_time": {"from": "2026-02-01T09:00:00", "to": "2026-02-01T08:30:00"},
        "total_work_minutes": {"from": 480, "to": 510},
    }


def test_minutes_only_override_keeps_supplied_values(service, completed_day):
    result = service.override_fields(11, {"total_work_minutes": 400, "total_break_minutes": "45"}, "manual", actor_id=1)

    assert result.day.total_work_minutes == 400
    assert result.day.total_break_minutes == 45
    assert result.day.clock_in_time == completed_day.clock_in_time
    assert set(result.audit.field_changes) == {"total_work_minutes", "total_break_minutes"}


def test_break_change_with_time_change_feeds_recalculation(service, completed_day):
    result = service.override_fields(
        11,
        {"clock_out_time": "2026-02-01T18:00:00", "total_break_minutes": 60},
        "long lunch",
        actor_id=1,
    )
    assert result.day.total_work_minutes == 540 - 60


def test_field_errors_are_aggregated(service, attendance_repo, completed_day):
    with pytest.raises(ValidationError) as exc:
        service.override_fields(
            11,
            {"clock_in_time": "yesterday", "total_break_minutes": -5, "status": "clocked_in"},
            "fix",
            actor_id=1,
        )

    assert set(exc.value.errors) == {"clock_in_time", "total_break_minutes", "status"}
    assert attendance_repo.audit_entries == []


def test_clock_out_must_follow_clock_in(service, attendance_repo, completed_day):
    with pytest.raises(ValidationError) as exc:
        service.override_fields(11, {"clock_out_time": "2026-02-01T08:00:00"}, "typo", actor_id=1)
    assert exc.value.errors == {"clock_out_time": ["must be after clock in time"]}
    assert attendance_repo.get_by_id(11) == completed_day


def test_empty_fields_rejected(service, completed_day):
    with pytest.raises(ValidationError) as exc:
        service.override_fields(11, {}, "nothing", actor_id=1)
    assert "attendance" in exc.value.errors


def test_no_op_override_still_audited(service, attendance_repo, completed_day):
    result = service.override_fields(11, {"total_break_minutes": 30}, "double-checked", actor_id=1)
    assert result.audit.field_changes == {}
    assert len(attendance_repo.audit_entries) == 1
