from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; ``None``/empty stays ``None``.

    Aware timestamps are converted to local naive time so they compare with
    values produced by :func:`now_local`.
    """
    if value is None or isinstance(value, datetime):
        return value
    v = str(value).strip()
    if not v:
        return None
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    dt = datetime.fromisoformat(v)
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def parse_date_param(value: str, field_name: str) -> date:
    try:
        return parse_iso_date((value or "").strip())
    except ValueError:
        raise ValidationError.for_field(field_name, "Invalid date format. Use YYYY-MM-DD")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
