from __future__ import annotations

import math
from typing import Any, Optional

from ..core.constants import FACE_DESCRIPTOR_LENGTH, MAX_MARK, MIN_MARK
from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_max_length(value: str, field_name: str, max_len: int) -> str:
    if len(value) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters")
    return value


def is_valid_descriptor(value: Any) -> bool:
    """True for a list/tuple of exactly 128 finite numbers."""
    if not isinstance(value, (list, tuple)) or len(value) != FACE_DESCRIPTOR_LENGTH:
        return False
    for v in value:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return False
        if not math.isfinite(v):
            return False
    return True


def require_descriptor(value: Any, message: str = "A valid 128-number face descriptor is required.") -> list[float]:
    if not is_valid_descriptor(value):
        raise ValidationError(message)
    return [float(v) for v in value]


def is_valid_mark(value: int) -> bool:
    return MIN_MARK <= value <= MAX_MARK


def parse_mark_digits(digits: str) -> Optional[int]:
    """Integer value of a digit run, or None when the run is too long to be a mark."""
    significant = digits.lstrip("0") or "0"
    if len(significant) > len(str(MAX_MARK)):
        return None
    return int(significant)


def coerce_mark(value: Any) -> Optional[int]:
    """Lenient integer parsing for client-supplied marks.

    Leading digits are kept ("85 marks" -> 85, 72.5 -> 72); anything without
    leading digits yields None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else None

    text = str(value).strip()
    sign = ""
    if text[:1] in {"-", "+"}:
        sign, text = text[0], text[1:]
    digits = ""
    for ch in text:
        if not "0" <= ch <= "9":
            break
        digits += ch
    if not digits:
        return None
    mark = parse_mark_digits(digits)
    if mark is None:
        return None
    return -mark if sign == "-" else mark
