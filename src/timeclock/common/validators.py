from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError.for_field(field_name, f"{field_name} can't be blank")
    return str(value).strip()


def require_year_month(year: int, month: int) -> None:
    errors: dict[str, list[str]] = {}
    if int(year) <= 0:
        errors["year"] = ["year must be greater than 0"]
    elif int(year) > date.max.year:
        errors["year"] = [f"year must not exceed {date.max.year}"]
    if not 1 <= int(month) <= 12:
        errors["month"] = ["month must be between 1 and 12"]
    if errors:
        raise ValidationError("Invalid year or month", errors=errors)


def require_date_range(start: date, end: date) -> None:
    if end < start:
        raise ValidationError.for_field("end_date", "end_date must be on or after start_date")


def require_non_negative_int(value, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError.for_field(field_name, "must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError.for_field(field_name, "must be an integer")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError.for_field(field_name, "must be an integer")
    if number < 0:
        raise ValidationError.for_field(field_name, "must be greater than or equal to 0")
    return number
