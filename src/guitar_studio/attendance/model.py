from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from bson import ObjectId

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    id: ObjectId
    student_id: ObjectId
    session_date: datetime
    status: AttendanceStatus
    marked_by: ObjectId
    marked_at: datetime
    enrollment_id: Optional[ObjectId] = None
    class_id: Optional[ObjectId] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewAttendance:
    student_id: ObjectId
    session_date: datetime
    status: AttendanceStatus
    marked_by: ObjectId
    marked_at: datetime
    enrollment_id: Optional[ObjectId] = None
    class_id: Optional[ObjectId] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class AttendanceSummary:
    """Tổng hợp chuyên cần của một học sinh trên một khoá học."""

    total_sessions: int
    attended: int
    makeup: int
    excused: int
    unexcused: int
