from __future__ import annotations

from dataclasses import fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from bson import ObjectId


def to_json(value: Any) -> Any:
    """Convert Mongo documents / dataclass dicts into JSON-safe values."""

    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_json(v) for v in value]
    return value


def _camel(name: str) -> str:
    if name == "id":
        return "_id"
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def dump(obj: Any) -> Any:
    """Render a domain dataclass as the camelCase JSON shape used by the API.

    Only dataclass field names are renamed; free-form dicts (e.g. product
    specifications) keep their keys.
    """

    if is_dataclass(obj) and not isinstance(obj, type):
        return {_camel(f.name): dump(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, dict):
        return {k: dump(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [dump(v) for v in obj]
    return to_json(obj)
