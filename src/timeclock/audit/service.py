from __future__ import annotations

from datetime import date
from typing import Optional

from ..common.validators import require_date_range
from ..core.constants import DEFAULT_AUDIT_LOG_LIMIT, MAX_AUDIT_LOG_LIMIT
from .model import AuditLogRow
from .repository import AuditRepository


class AuditService:
    def __init__(self, audit: AuditRepository):
        self._audit = audit

    def list_entries(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        subject_id: Optional[int] = None,
        limit: int = DEFAULT_AUDIT_LOG_LIMIT,
    ) -> list[dict]:
        if start_date and end_date:
            require_date_range(start_date, end_date)
        limit = max(1, min(int(limit), MAX_AUDIT_LOG_LIMIT))
        rows = self._audit.list_entries(start_date=start_date, end_date=end_date, subject_id=subject_id, limit=limit)
        return [self._to_dict(r) for r in rows]

    @staticmethod
    def _to_dict(row: AuditLogRow) -> dict:
        e = row.entry
        return {
            "id": e.audit_id,
            "admin_user": {"id": e.actor_id, "name": row.actor_name, "email": row.actor_email},
            "target_user": {"id": e.subject_id, "name": row.subject_name, "email": row.subject_email},
            "action": e.action,
            "changes": e.changes_to_dict(),
            "summary": e.change_summary(),
            "reason": e.reason,
            "created_at": e.created_at.isoformat() if e.created_at else None,
        }
