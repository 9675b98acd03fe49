from __future__ import annotations

import re
from typing import Optional

from ..core.exceptions import ValidationError

_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def optional_email(value: Optional[str], field_name: str = "Email") -> Optional[str]:
    """Blank means no email; anything else must look like one."""
    v = (value or "").strip()
    if not v:
        return None
    if not _EMAIL.match(v):
        raise ValidationError(f"{field_name} is not a valid email address")
    return v


def require_positive_id(value, field_name: str) -> int:
    try:
        v = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid")
    if v <= 0:
        raise ValidationError(f"{field_name} is invalid")
    return v
