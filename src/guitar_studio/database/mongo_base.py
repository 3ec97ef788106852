from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from ..common.datetime_utils import day_bounds, now_local


def stamp_created(doc: Dict[str, Any], *, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or now_local()
    doc["createdAt"] = now
    doc["updatedAt"] = now
    return doc


def stamp_updated(changes: Dict[str, Any], *, now: Optional[datetime] = None) -> Dict[str, Any]:
    changes["updatedAt"] = now or now_local()
    return changes


def prune_none(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Drop optional fields that were not provided (mirrors 'undefined' on the wire)."""
    return {k: v for k, v in doc.items() if v is not None}


def same_day(value: datetime) -> Dict[str, datetime]:
    """Range filter matching any timestamp on the calendar day of value."""
    start, end = day_bounds(value)
    return {"$gte": start, "$lte": end}
