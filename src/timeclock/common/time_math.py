"""Minute arithmetic shared by the lifecycle engine, statistics and reports."""

from __future__ import annotations

from datetime import datetime
from typing import Optional


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from ``start`` to ``end``, floored."""
    return int((end - start).total_seconds() // 60)


def format_minutes(minutes: Optional[int]) -> str:
    """Render minutes as ``HH:MM``; hours are not wrapped at 24."""
    if minutes is None or minutes < 0:
        return "00:00"
    minutes = int(minutes)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
