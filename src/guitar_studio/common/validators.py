from __future__ import annotations

import re
from datetime import time
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId

from ..core.exceptions import ValidationError

_HHMM = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} không hợp lệ")
    return str(value).strip()


def require_object_id(value: Any, field_name: str = "id") -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise ValidationError(f"{field_name} không hợp lệ")


def optional_object_id(value: Any, field_name: str = "id") -> Optional[ObjectId]:
    if value in (None, ""):
        return None
    return require_object_id(value, field_name)


def parse_hhmm(value: str) -> time:
    """Parse a 'HH:MM' string (hour may be a single digit)."""
    v = (value or "").strip()
    if not _HHMM.match(v):
        raise ValidationError("Time must be in HH:mm format")
    hours, minutes = v.split(":")
    return time(hour=int(hours), minute=int(minutes))


def require_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} không hợp lệ")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} không hợp lệ")
