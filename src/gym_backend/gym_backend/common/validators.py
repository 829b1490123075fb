from __future__ import annotations

import math
import re
from enum import Enum
from typing import Optional, Type, TypeVar

from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")
_HHMM_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")

E = TypeVar("E", bound=Enum)


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_email(value: Optional[str], field_name: str = "Email") -> str:
    email = require_non_empty(value, field_name).lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError(f"{field_name} is not valid")
    return email


def require_enum(enum_cls: Type[E], value, field_name: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = [m.value for m in enum_cls]
        raise ValidationError(f"{field_name} is not valid", details={"valid_values": allowed})


def require_number(value, field_name: str, *, minimum: Optional[float] = None, maximum: Optional[float] = None) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be a finite number")
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field_name} must be >= {minimum:g}")
    if maximum is not None and number > maximum:
        raise ValidationError(f"{field_name} must be <= {maximum:g}")
    return number


def require_int(value, field_name: str, *, minimum: Optional[int] = None) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field_name} must be >= {minimum}")
    return number


def require_hhmm(value: Optional[str], field_name: str) -> str:
    v = (value or "").strip()
    if not _HHMM_RE.match(v):
        raise ValidationError(f"{field_name} must use HH:MM format")
    return v


def hhmm_to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)
