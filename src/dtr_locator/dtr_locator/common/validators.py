from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_positive_int(value: Any, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if number <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return number


def optional_text(value: Any, field_name: str, *, max_len: int) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if len(text) > max_len:
        raise ValidationError(f"{field_name} exceeds {max_len} characters")
    return text
