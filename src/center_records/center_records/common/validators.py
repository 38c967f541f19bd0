from __future__ import annotations

import re
from typing import Optional

from ..core.constants import MAX_GRADE, MIN_GRADE, NO_GRADE
from ..core.exceptions import ValidationError

_NON_DIGITS = re.compile(r"\D")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters long")
    return value


def digits_only(value: object) -> str:
    """Strip everything that is not a digit ("123-456-789-01" -> "12345678901")."""
    return _NON_DIGITS.sub("", "" if value is None else str(value))


def require_digits(value: object, field_name: str, length: int) -> str:
    cleaned = digits_only(value)
    if len(cleaned) != length:
        raise ValidationError(f"{field_name} must be exactly {length} digits (got {len(cleaned)})")
    return cleaned


def optional_digits(value: object, field_name: str, length: int) -> Optional[str]:
    if value is None or not str(value).strip():
        return None
    return require_digits(value, field_name, length)


def is_valid_grade(value: Optional[str]) -> bool:
    if value == NO_GRADE:
        return True
    try:
        number = float(str(value))
    except (TypeError, ValueError):
        return False
    return MIN_GRADE <= number <= MAX_GRADE


def require_grade(value: Optional[str]) -> str:
    text = "" if value is None else str(value).strip()
    if not is_valid_grade(text):
        raise ValidationError(f"Grade must be between {MIN_GRADE} and {MAX_GRADE} or \"{NO_GRADE}\" (got {text!r})")
    return text
