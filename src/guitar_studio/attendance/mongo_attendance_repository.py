from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from bson import ObjectId

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mongo_base import same_day, stamp_created, stamp_updated
from .model import AttendanceRecord, NewAttendance
from .repository import AttendanceRepository


def _to_record(doc: dict) -> AttendanceRecord:
    return AttendanceRecord(
        id=doc["_id"],
        student_id=doc["studentId"],
        session_date=doc["sessionDate"],
        status=AttendanceStatus(doc["status"]),
        marked_by=doc.get("markedBy"),
        marked_at=doc.get("markedAt"),
        enrollment_id=doc.get("enrollmentId"),
        class_id=doc.get("classId"),
        notes=doc.get("notes"),
        created_at=doc.get("createdAt"),
        updated_at=doc.get("updatedAt"),
    )


class MongoAttendanceRepository(AttendanceRepository):
    def __init__(self, conn: DatabaseConnection):
        self._conn = conn

    @property
    def _attendance(self):
        return self._conn.db()["attendance"]

    def list_filtered(
        self,
        *,
        student_id: Optional[ObjectId] = None,
        enrollment_id: Optional[ObjectId] = None,
        class_id: Optional[ObjectId] = None,
        session_day: Optional[datetime] = None,
    ) -> Sequence[AttendanceRecord]:
        query: Dict[str, Any] = {}
        if student_id is not None:
            query["studentId"] = student_id
        if enrollment_id is not None:
            query["enrollmentId"] = enrollment_id
        if class_id is not None:
            query["classId"] = class_id
        if session_day is not None:
            query["sessionDate"] = same_day(session_day)
        return [_to_record(d) for d in self._attendance.find(query)]

    def get_by_id(self, attendance_id: ObjectId) -> Optional[AttendanceRecord]:
        doc = self._attendance.find_one({"_id": attendance_id})
        return _to_record(doc) if doc else None

    def find_for_student_on(
        self, student_id: ObjectId, day: datetime, *, class_id: Optional[ObjectId] = None
    ) -> Optional[AttendanceRecord]:
        query: Dict[str, Any] = {"studentId": student_id, "sessionDate": same_day(day)}
        if class_id is not None:
            query["classId"] = class_id
        doc = self._attendance.find_one(query)
        return _to_record(doc) if doc else None

    def create(self, record: NewAttendance) -> ObjectId:
        doc: Dict[str, Any] = {
            "studentId": record.student_id,
            "sessionDate": record.session_date,
            "status": record.status.value,
            "markedBy": record.marked_by,
            "markedAt": record.marked_at,
        }
        if record.enrollment_id is not None:
            doc["enrollmentId"] = record.enrollment_id
        if record.class_id is not None:
            doc["classId"] = record.class_id
        if record.notes is not None:
            doc["notes"] = record.notes
        return self._attendance.insert_one(stamp_created(doc)).inserted_id

    def update(self, attendance_id: ObjectId, changes: Dict[str, Any]) -> bool:
        result = self._attendance.update_one({"_id": attendance_id}, {"$set": stamp_updated(dict(changes))})
        return result.matched_count > 0

    def delete(self, attendance_id: ObjectId) -> bool:
        return self._attendance.delete_one({"_id": attendance_id}).deleted_count > 0
