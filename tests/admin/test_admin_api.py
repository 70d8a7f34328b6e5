from __future__ import annotations

from datetime import date, datetime

import pytest

from timeclock.attendance.model import AttendanceDay
from timeclock.core.enums import AttendanceStatus, Role


@pytest.fixture(autouse=True)
def seeded(attendance_repo):
    attendance_repo.add(
        AttendanceDay(
            attendance_id=11,
            user_id=2,
            work_date=date(2026, 2, 1),
            status=AttendanceStatus.CLOCKED_OUT,
            clock_in_time=datetime(2026, 2, 1, 9, 0),
            clock_out_time=datetime(2026, 2, 1, 17, 0),
            total_work_minutes=450,
            total_break_minutes=30,
        )
    )
    attendance_repo.add(AttendanceDay(attendance_id=12, user_id=3, work_date=date(2026, 2, 2)))


def test_employees_cannot_use_admin_routes(client, login):
    login(2)
    resp = client.get("/api/v1/admin/attendances")
    assert resp.status_code == 403
    assert resp.get_json()["error"]["kind"] == "authorization_failure"


def test_list_attendances_with_filter(client, login):
    login(1, Role.ADMIN)
    body = client.get("/api/v1/admin/attendances?user_id=2").get_json()
    assert [a["id"] for a in body["attendances"]] == [11]
    assert body["attendances"][0]["user"]["email"] == "alice@example.com"

    body = client.get("/api/v1/admin/attendances").get_json()
    assert [a["id"] for a in body["attendances"]] == [12, 11]


def test_update_attendance_then_audit_log(client, login):
    login(1, Role.ADMIN)
    resp = client.put(
        "/api/v1/admin/attendances/11",
        json={"attendance": {"clock_out_time": "2026-02-01T18:00:00"}, "reason": "left late"},
    )
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["attendance"]["total_work_minutes"] == 510
    assert body["audit_log"]["changes"]["total_work_minutes"] == {"from": 450, "to": 510}

    logs = client.get("/api/v1/admin/audit_logs?target_user_id=2").get_json()["audit_logs"]
    assert len(logs) == 1
    assert logs[0]["reason"] == "left late"
    assert logs[0]["admin_user"]["id"] == 1
    assert logs[0]["target_user"]["email"] == "alice@example.com"


def test_update_without_reason_is_rejected(client, login, attendance_repo):
    login(1, Role.ADMIN)
    resp = client.put("/api/v1/admin/attendances/11", json={"attendance": {"total_work_minutes": 1}})
    err = resp.get_json()["error"]

    assert resp.status_code == 422
    assert err["kind"] == "validation_failure"
    assert err["errors"] == {"reason": ["can't be blank"]}
    assert attendance_repo.get_by_id(11).total_work_minutes == 450


def test_update_unknown_attendance(client, login):
    login(1, Role.ADMIN)
    resp = client.put("/api/v1/admin/attendances/404", json={"attendance": {"total_work_minutes": 1}, "reason": "x"})
    assert resp.status_code == 404


def test_export_csv(client, login):
    login(1, Role.ADMIN)
    resp = client.get("/api/v1/admin/export_csv")

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert resp.headers["Content-Disposition"] == "attachment; filename=attendance_export_20260202.csv"
    lines = resp.data.decode("utf-8-sig").splitlines()
    assert lines[0].startswith("Date,Employee Name")
    assert lines[1].startswith("2026-02-01,Alice Employee")
