from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional, Sequence

import structlog

from ..attendance.lifecycle import recalculate_totals
from ..attendance.model import AttendanceDay, AttendanceListRow
from ..attendance.repository import AttendanceRepository
from ..audit.model import AuditEntry, compute_field_changes
from ..common.datetime_utils import now_local, parse_iso_datetime
from ..common.validators import require_date_range, require_non_negative_int
from ..core.constants import (
    AUDIT_ACTION_UPDATE_ATTENDANCE,
    OVERRIDABLE_FIELDS,
    OVERRIDABLE_MINUTE_FIELDS,
    OVERRIDABLE_TIME_FIELDS,
)
from ..core.exceptions import NotFoundError, ValidationError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CorrectionResult:
    day: AttendanceDay
    audit: AuditEntry


def _snapshot(day: AttendanceDay) -> dict[str, Any]:
    return {name: getattr(day, name) for name in OVERRIDABLE_FIELDS}


class CorrectionService:
    """Administrative override of attendance fields.

    This bypasses the lifecycle state machine. Every successful override is
    stored together with exactly one audit entry.
    """

    def __init__(self, attendance: AttendanceRepository, *, clock: Callable[[], datetime] = now_local):
        self._attendance = attendance
        self._clock = clock

    @staticmethod
    def _parse_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
        errors: dict[str, list[str]] = {}
        parsed: dict[str, Any] = {}

        if not fields:
            raise ValidationError.for_field("attendance", "must include at least one field")

        for name, raw in fields.items():
            if name not in OVERRIDABLE_FIELDS:
                errors.setdefault(name, []).append("is not permitted")
                continue

            if name in OVERRIDABLE_TIME_FIELDS:
                try:
                    value = parse_iso_datetime(raw)
                except (TypeError, ValueError):
                    errors.setdefault(name, []).append("is not a valid timestamp")
                    continue
                if value is None:
                    errors.setdefault(name, []).append("can't be blank")
                    continue
                parsed[name] = value
            elif name in OVERRIDABLE_MINUTE_FIELDS:
                try:
                    parsed[name] = require_non_negative_int(raw, name)
                except ValidationError as e:
                    for field_name, messages in e.errors.items():
                        errors.setdefault(field_name, []).extend(messages)

        if errors:
            raise ValidationError("Failed to update attendance", errors=errors)
        return parsed

    def override_fields(
        self,
        attendance_id: int,
        fields: Mapping[str, Any],
        reason: Optional[str],
        actor_id: int,
    ) -> CorrectionResult:
        if not reason or not str(reason).strip():
            raise ValidationError(
                "Reason is required for attendance modifications",
                errors={"reason": ["can't be blank"]},
            )
        reason = str(reason).strip()

        day = self._attendance.get_by_id(attendance_id)
        if not day:
            raise NotFoundError("Attendance record not found")

        parsed = self._parse_fields(fields)
        updated = replace(day, **parsed)

        if updated.clock_in_time and updated.clock_out_time and updated.clock_out_time <= updated.clock_in_time:
            raise ValidationError(
                "Failed to update attendance",
                errors={"clock_out_time": ["must be after clock in time"]},
            )

        if any(getattr(updated, name) != getattr(day, name) for name in OVERRIDABLE_TIME_FIELDS):
            updated = recalculate_totals(updated)

        audit = AuditEntry(
            actor_id=int(actor_id),
            subject_id=day.user_id,
            action=AUDIT_ACTION_UPDATE_ATTENDANCE,
            reason=reason,
            field_changes=compute_field_changes(_snapshot(day), _snapshot(updated), OVERRIDABLE_FIELDS),
            created_at=self._clock(),
        )
        audit_id = self._attendance.save_override(updated, audit=audit)
        audit = replace(audit, audit_id=audit_id)

        logger.info(
            "attendance_overridden",
            attendance_id=day.attendance_id,
            actor_id=int(actor_id),
            subject_id=day.user_id,
            audit_id=audit_id,
            fields=sorted(audit.field_changes),
        )
        return CorrectionResult(day=updated, audit=audit)


class AdminAttendanceService:
    """Cross-employee listing used by the admin screens and CSV export."""

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def list_attendances(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        user_id: Optional[int] = None,
        newest_first: bool = True,
    ) -> Sequence[AttendanceListRow]:
        if start_date and end_date:
            require_date_range(start_date, end_date)
        return self._attendance.list_admin_view(
            start_date=start_date,
            end_date=end_date,
            user_id=user_id,
            newest_first=newest_first,
        )
