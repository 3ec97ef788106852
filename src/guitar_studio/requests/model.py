from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from bson import ObjectId

from ..core.enums import RequestStatus


@dataclass(frozen=True)
class AbsenceRequest:
    id: ObjectId
    student_id: ObjectId
    enrollment_id: ObjectId
    session_date: datetime
    reason: str
    requested_at: datetime
    status: RequestStatus
    class_id: Optional[ObjectId] = None
    decided_by: Optional[ObjectId] = None
    decided_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class MakeupRequest:
    id: ObjectId
    student_id: ObjectId
    enrollment_id: ObjectId
    original_session_date: datetime
    new_session_date: datetime
    reason: str
    requested_at: datetime
    status: RequestStatus
    original_class_id: Optional[ObjectId] = None
    new_class_id: Optional[ObjectId] = None
    decided_by: Optional[ObjectId] = None
    decided_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewAbsenceRequest:
    student_id: ObjectId
    enrollment_id: ObjectId
    session_date: datetime
    reason: str
    requested_at: datetime
    status: RequestStatus
    class_id: Optional[ObjectId] = None


@dataclass(frozen=True)
class NewMakeupRequest:
    student_id: ObjectId
    enrollment_id: ObjectId
    original_session_date: datetime
    new_session_date: datetime
    reason: str
    requested_at: datetime
    status: RequestStatus
    original_class_id: Optional[ObjectId] = None
    new_class_id: Optional[ObjectId] = None
