from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from itertools import count
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from timeclock.attendance.model import AttendanceDay, AttendanceListRow
from timeclock.audit.model import AuditEntry, AuditLogRow
from timeclock.container import wire_container
from timeclock.core.enums import Role
from timeclock.core.exceptions import DuplicateRecordError
from timeclock.main import create_app
from timeclock.users.model import User


class InMemoryUsers:
    def __init__(self, users: list[User]):
        self.users_by_id = {u.user_id: u for u in users}

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users_by_id.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users_by_id.values() if u.email == email), None)

    def list_admin_view(self):
        return [
            {"id": u.user_id, "name": u.name, "email": u.email, "role": u.role.value, "created_at": None, "total_attendances": 0}
            for u in self.users_by_id.values()
        ]


class InMemoryAttendance:
    def __init__(self, users: InMemoryUsers):
        self._users = users
        self.days: dict[int, AttendanceDay] = {}
        self.audit_entries: list[AuditEntry] = []
        self._day_ids = count(1)
        self._event_ids = count(1)
        self._audit_ids = count(1)

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceDay]:
        return self.days.get(int(attendance_id))

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceDay]:
        return next((d for d in self.days.values() if d.user_id == user_id and d.work_date == work_date), None)

    def create_day(self, *, user_id: int, work_date: date) -> AttendanceDay:
        if self.get_for_user_and_date(user_id, work_date):
            raise DuplicateRecordError("Duplicate entry")
        day = AttendanceDay(attendance_id=next(self._day_ids), user_id=user_id, work_date=work_date)
        self.days[day.attendance_id] = day
        return day

    def add(self, day: AttendanceDay) -> AttendanceDay:
        self.days[day.attendance_id] = day
        return day

    def list_for_user(self, user_id, *, start_date=None, end_date=None, limit=None):
        items = [
            d
            for d in self.days.values()
            if d.user_id == user_id
            and (start_date is None or d.work_date >= start_date)
            and (end_date is None or d.work_date <= end_date)
        ]
        items.sort(key=lambda d: d.work_date, reverse=True)
        return items[:limit] if limit else items

    def list_admin_view(self, *, start_date=None, end_date=None, user_id=None, newest_first=True):
        rows = []
        for d in self.days.values():
            if user_id is not None and d.user_id != user_id:
                continue
            if start_date is not None and d.work_date < start_date:
                continue
            if end_date is not None and d.work_date > end_date:
                continue
            u = self._users.get_by_id(d.user_id)
            rows.append(AttendanceListRow(day=d, user_name=u.name, user_email=u.email))
        rows.sort(key=lambda r: (r.day.work_date, r.user_name), reverse=newest_first)
        return rows

    def save_transition(self, day, new_events):
        stored = {id(e): replace(e, event_id=next(self._event_ids)) for e in new_events}
        saved = replace(day, events=tuple(stored.get(id(e), e) for e in day.events))
        self.days[saved.attendance_id] = saved
        return saved

    def save_override(self, day, *, audit):
        audit_id = next(self._audit_ids)
        self.days[day.attendance_id] = day
        self.audit_entries.append(replace(audit, audit_id=audit_id))
        return audit_id


class InMemoryAudit:
    def __init__(self, attendance: InMemoryAttendance, users: InMemoryUsers):
        self._attendance = attendance
        self._users = users

    def list_entries(self, *, start_date=None, end_date=None, subject_id=None, limit=100):
        entries = [
            e
            for e in self._attendance.audit_entries
            if (subject_id is None or e.subject_id == subject_id)
            and (start_date is None or e.created_at.date() >= start_date)
            and (end_date is None or e.created_at.date() <= end_date)
        ]
        entries.sort(key=lambda e: (e.created_at, e.audit_id), reverse=True)
        rows = []
        for e in entries[:limit]:
            actor = self._users.get_by_id(e.actor_id)
            subject = self._users.get_by_id(e.subject_id)
            rows.append(
                AuditLogRow(
                    entry=e,
                    actor_name=actor.name,
                    actor_email=actor.email,
                    subject_name=subject.name,
                    subject_email=subject.email,
                )
            )
        return rows


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, *args) -> None:
        self.now = datetime(*args)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 9, 0, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers(
        [
            User(1, "Admin Demo", "admin@example.com", generate_password_hash("admin123"), Role.ADMIN),
            User(2, "Alice Employee", "alice@example.com", generate_password_hash("secret"), Role.EMPLOYEE),
            User(3, "Bob Employee", "bob@example.com", generate_password_hash("secret"), Role.EMPLOYEE),
        ]
    )


@pytest.fixture
def attendance_repo(users_repo) -> InMemoryAttendance:
    return InMemoryAttendance(users_repo)


@pytest.fixture
def audit_repo(attendance_repo, users_repo) -> InMemoryAudit:
    return InMemoryAudit(attendance_repo, users_repo)


@pytest.fixture
def container(users_repo, attendance_repo, audit_repo, clock):
    return wire_container(
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        audit_repo=audit_repo,
        clock=clock,
    )


@pytest.fixture
def app(container):
    return create_app(container=container, settings_module="timeclock.config.testing")


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(user_id: int, role: Role = Role.EMPLOYEE) -> None:
        with client.session_transaction() as sess:
            sess["user_id"] = user_id
            sess["role"] = role.value

    return _login
