from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AuditLogRow


class AuditRepository(Protocol):
    """Read side of the audit trail.

    Entries are written only together with the correction they describe
    (see ``AttendanceRepository.save_override``).
    """

    def list_entries(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        subject_id: Optional[int] = None,
        limit: int = 100,
    ) -> Sequence[AuditLogRow]:
        raise NotImplementedError
