from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional


@dataclass(frozen=True)
class FieldChange:
    from_value: Any
    to_value: Any

    def to_dict(self) -> dict:
        return {"from": _plain(self.from_value), "to": _plain(self.to_value)}


@dataclass(frozen=True)
class AuditEntry:
    """Immutable record of an administrator's manual correction."""

    actor_id: int
    subject_id: int
    action: str
    reason: str
    field_changes: Mapping[str, FieldChange] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    audit_id: Optional[int] = None

    def changes_to_dict(self) -> dict:
        return {name: change.to_dict() for name, change in self.field_changes.items()}

    def change_summary(self) -> str:
        if not self.field_changes:
            return "No changes recorded"
        parts = []
        for name, change in self.field_changes.items():
            label = name.replace("_", " ").capitalize()
            parts.append(f"{label}: {_display(change.from_value)} → {_display(change.to_value)}")
        return ", ".join(parts)


@dataclass(frozen=True)
class AuditLogRow:
    """Read-model for the admin audit listing (entry joined with both users)."""

    entry: AuditEntry
    actor_name: str
    actor_email: str
    subject_name: str
    subject_email: str


def compute_field_changes(before: Mapping[str, Any], after: Mapping[str, Any], fields: Iterable[str]) -> dict[str, FieldChange]:
    """Diff limited to ``fields``; unchanged values are left out."""
    changes: dict[str, FieldChange] = {}
    for name in fields:
        old, new = before.get(name), after.get(name)
        if old != new:
            changes[name] = FieldChange(from_value=old, to_value=new)
    return changes


def changes_from_dict(data: Optional[Mapping[str, Any]]) -> dict[str, FieldChange]:
    out: dict[str, FieldChange] = {}
    for name, info in (data or {}).items():
        if isinstance(info, Mapping):
            out[name] = FieldChange(from_value=info.get("from"), to_value=info.get("to"))
        elif isinstance(info, (list, tuple)) and len(info) == 2:
            out[name] = FieldChange(from_value=info[0], to_value=info[1])
    return out


def _plain(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _display(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    return str(value)
