from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Protocol, Sequence

from bson import ObjectId

from .model import AttendanceRecord, NewAttendance


class AttendanceRepository(Protocol):
    def list_filtered(
        self,
        *,
        student_id: Optional[ObjectId] = None,
        enrollment_id: Optional[ObjectId] = None,
        class_id: Optional[ObjectId] = None,
        session_day: Optional[datetime] = None,
    ) -> Sequence[AttendanceRecord]:
        """session_day matches the whole calendar day."""

        raise NotImplementedError

    def get_by_id(self, attendance_id: ObjectId) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_for_student_on(
        self, student_id: ObjectId, day: datetime, *, class_id: Optional[ObjectId] = None
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, record: NewAttendance) -> ObjectId:
        raise NotImplementedError

    def update(self, attendance_id: ObjectId, changes: Dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, attendance_id: ObjectId) -> bool:
        raise NotImplementedError
