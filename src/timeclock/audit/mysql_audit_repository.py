from __future__ import annotations

import json
from datetime import date, datetime, time
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, load_json_column
from .model import AuditEntry, AuditLogRow, changes_from_dict
from .repository import AuditRepository


def insert_audit_entry(cur, entry: AuditEntry) -> int:
    """Insert inside the caller's transaction."""
    cur.execute(
        """
        INSERT INTO audit_logs(actor_id, subject_id, action, change_data, reason, created_at)
        VALUES(%s,%s,%s,%s,%s,%s)
        """,
        (
            int(entry.actor_id),
            int(entry.subject_id),
            entry.action,
            json.dumps(entry.changes_to_dict(), default=str),
            entry.reason,
            entry.created_at or datetime.now(),
        ),
    )
    return int(cur.lastrowid)


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_entries(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        subject_id: Optional[int] = None,
        limit: int = 100,
    ) -> Sequence[AuditLogRow]:
        clauses = ["1=1"]
        params: list[object] = []

        if start_date is not None:
            clauses.append("al.created_at >= %s")
            params.append(datetime.combine(start_date, time.min))
        if end_date is not None:
            clauses.append("al.created_at <= %s")
            params.append(datetime.combine(end_date, time.max))
        if subject_id is not None:
            clauses.append("al.subject_id=%s")
            params.append(int(subject_id))

        where = " AND ".join(clauses)
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    al.audit_id, al.actor_id, al.subject_id, al.action, al.change_data, al.reason, al.created_at,
                    a.name AS actor_name, a.email AS actor_email,
                    s.name AS subject_name, s.email AS subject_email
                FROM audit_logs al
                JOIN users a ON a.user_id = al.actor_id
                JOIN users s ON s.user_id = al.subject_id
                WHERE {where}
                ORDER BY al.created_at DESC, al.audit_id DESC
                LIMIT %s
                """,
                tuple(params),
            )
            rows = fetchall(cur)

        return [
            AuditLogRow(
                entry=AuditEntry(
                    audit_id=int(r["audit_id"]),
                    actor_id=int(r["actor_id"]),
                    subject_id=int(r["subject_id"]),
                    action=r["action"],
                    field_changes=changes_from_dict(load_json_column(r.get("change_data"))),
                    reason=r["reason"],
                    created_at=r["created_at"],
                ),
                actor_name=r["actor_name"],
                actor_email=r["actor_email"],
                subject_name=r["subject_name"],
                subject_email=r["subject_email"],
            )
            for r in rows
        ]
