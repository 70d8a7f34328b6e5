from __future__ import annotations

from collections import defaultdict
from dataclasses import replace
from datetime import date
from typing import Iterable, Optional, Sequence

from ..audit.model import AuditEntry
from ..audit.mysql_audit_repository import insert_audit_entry
from ..core.enums import AttendanceStatus, ClockEventType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceDay, AttendanceListRow, ClockEvent
from .repository import AttendanceRepository

_DAY_COLUMNS = """
    a.attendance_id, a.user_id, a.work_date, a.status,
    a.clock_in_time, a.clock_out_time, a.total_work_minutes, a.total_break_minutes
"""


def _row_to_day(r: dict, events: Iterable[ClockEvent] = ()) -> AttendanceDay:
    return AttendanceDay(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        clock_in_time=r.get("clock_in_time"),
        clock_out_time=r.get("clock_out_time"),
        total_work_minutes=int(r.get("total_work_minutes") or 0),
        total_break_minutes=int(r.get("total_break_minutes") or 0),
        events=tuple(events),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_events(self, cur, attendance_ids: Sequence[int]) -> dict[int, list[ClockEvent]]:
        out: dict[int, list[ClockEvent]] = defaultdict(list)
        if not attendance_ids:
            return out
        placeholders = ",".join(["%s"] * len(attendance_ids))
        cur.execute(
            f"""
            SELECT event_id, attendance_id, event_type, event_time
            FROM clock_events
            WHERE attendance_id IN ({placeholders})
            ORDER BY event_time ASC, event_id ASC
            """,
            tuple(int(i) for i in attendance_ids),
        )
        for r in fetchall(cur):
            out[int(r["attendance_id"])].append(
                ClockEvent(
                    event_type=ClockEventType(r["event_type"]),
                    timestamp=r["event_time"],
                    event_id=int(r["event_id"]),
                )
            )
        return out

    def _fetch_day(self, cur, where: str, params: tuple) -> Optional[AttendanceDay]:
        cur.execute(f"SELECT {_DAY_COLUMNS} FROM attendances a WHERE {where}", params)
        r = fetchone(cur)
        if not r:
            return None
        events = self._load_events(cur, [int(r["attendance_id"])])
        return _row_to_day(r, events.get(int(r["attendance_id"]), []))

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceDay]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._fetch_day(cur, "a.attendance_id=%s", (int(attendance_id),))

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceDay]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._fetch_day(cur, "a.user_id=%s AND a.work_date=%s", (int(user_id), work_date))

    def create_day(self, *, user_id: int, work_date: date) -> AttendanceDay:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendances(user_id, work_date, status, total_work_minutes, total_break_minutes)
                VALUES(%s,%s,%s,0,0)
                """,
                (int(user_id), work_date, AttendanceStatus.NOT_STARTED.value),
            )
            return AttendanceDay(attendance_id=int(cur.lastrowid), user_id=int(user_id), work_date=work_date)

    def list_for_user(
        self,
        user_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceDay]:
        clauses = ["a.user_id=%s"]
        params: list[object] = [int(user_id)]
        if start_date is not None:
            clauses.append("a.work_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("a.work_date <= %s")
            params.append(end_date)

        sql = f"SELECT {_DAY_COLUMNS} FROM attendances a WHERE {' AND '.join(clauses)} ORDER BY a.work_date DESC"
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            rows = fetchall(cur)
            events = self._load_events(cur, [int(r["attendance_id"]) for r in rows])
            return [_row_to_day(r, events.get(int(r["attendance_id"]), [])) for r in rows]

    def list_admin_view(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        user_id: Optional[int] = None,
        newest_first: bool = True,
    ) -> Sequence[AttendanceListRow]:
        clauses = ["1=1"]
        params: list[object] = []
        if start_date is not None:
            clauses.append("a.work_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("a.work_date <= %s")
            params.append(end_date)
        if user_id is not None:
            clauses.append("a.user_id=%s")
            params.append(int(user_id))

        direction = "DESC" if newest_first else "ASC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_DAY_COLUMNS}, u.name AS user_name, u.email AS user_email
                FROM attendances a
                JOIN users u ON u.user_id = a.user_id
                WHERE {' AND '.join(clauses)}
                ORDER BY a.work_date {direction}, u.name ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)
            events = self._load_events(cur, [int(r["attendance_id"]) for r in rows])
            return [
                AttendanceListRow(
                    day=_row_to_day(r, events.get(int(r["attendance_id"]), [])),
                    user_name=r["user_name"],
                    user_email=r["user_email"],
                )
                for r in rows
            ]

    def _update_day(self, cur, day: AttendanceDay) -> None:
        cur.execute(
            """
            UPDATE attendances
            SET status=%s, clock_in_time=%s, clock_out_time=%s,
                total_work_minutes=%s, total_break_minutes=%s
            WHERE attendance_id=%s
            """,
            (
                day.status.value,
                day.clock_in_time,
                day.clock_out_time,
                int(day.total_work_minutes),
                int(day.total_break_minutes),
                int(day.attendance_id),
            ),
        )

    def save_transition(self, day: AttendanceDay, new_events: Sequence[ClockEvent]) -> AttendanceDay:
        with db_cursor(self._conn_factory) as (_, cur):
            self._update_day(cur, day)
            stored: dict[int, ClockEvent] = {}
            for event in new_events:
                cur.execute(
                    "INSERT INTO clock_events(attendance_id, event_type, event_time) VALUES(%s,%s,%s)",
                    (int(day.attendance_id), event.event_type.value, event.timestamp),
                )
                stored[id(event)] = replace(event, event_id=int(cur.lastrowid))

        events = tuple(stored.get(id(e), e) for e in day.events)
        return replace(day, events=events)

    def save_override(self, day: AttendanceDay, *, audit: AuditEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            self._update_day(cur, day)
            return insert_audit_entry(cur, audit)
