from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required.")
    return value.strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters.")
    return value


def normalize_student_identifier(value: Optional[str]) -> str:
    """License numbers and emails are compared trimmed and case-insensitively."""
    return require_non_empty(value, "Student identifier").lower()


def normalize_middle_initial(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value[:1].upper() if value else None
