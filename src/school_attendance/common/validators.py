from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} must not be empty")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_date_range(start: Optional[date], end: Optional[date]) -> tuple[date, date]:
    if not start or not end:
        raise ValidationError("Please select both start and end dates.")
    if start > end:
        raise ValidationError("Start date must not be after end date.")
    return start, end
