from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Sequence

from bson import ObjectId

from ..core.constants import DEFAULT_TOTAL_SESSIONS
from ..core.enums import EnrollmentStatus, PaymentMode
from ..database.connection import DatabaseConnection
from ..database.mongo_base import stamp_created, stamp_updated
from .model import Enrollment, NewEnrollment, ScheduledSession, schedule_doc
from .repository import EnrollmentRepository

_OPEN_STATUSES = [EnrollmentStatus.PENDING.value, EnrollmentStatus.ACTIVE.value]


def _to_enrollment(doc: dict) -> Enrollment:
    schedule = (doc.get("schedule") or {}).get("sessions") or []
    total = int(doc.get("totalSessions") or DEFAULT_TOTAL_SESSIONS)
    return Enrollment(
        id=doc["_id"],
        student_id=doc["studentId"],
        course_id=doc["courseId"],
        frequency=int(doc.get("frequency") or 1),
        start_date=doc["startDate"],
        end_date=doc["endDate"],
        status=EnrollmentStatus(doc.get("status") or EnrollmentStatus.PENDING.value),
        total_sessions=total,
        completed_sessions=int(doc.get("completedSessions") or 0),
        remaining_sessions=int(doc.get("remainingSessions", total) or 0),
        payment_mode=PaymentMode(doc.get("paymentMode") or PaymentMode.DEFAULT.value),
        custom_weeks=doc.get("customWeeks"),
        deferral_weeks=doc.get("deferralWeeks"),
        cycle=doc.get("cycle"),
        schedule=tuple(
            ScheduledSession(
                day_of_week=int(s.get("dayOfWeek", 0)),
                time_slot=s.get("timeSlot", ""),
                class_id=ObjectId(str(s["classId"])) if s.get("classId") else None,
            )
            for s in schedule
        ),
        created_at=doc.get("createdAt"),
        updated_at=doc.get("updatedAt"),
    )


class MongoEnrollmentRepository(EnrollmentRepository):
    def __init__(self, conn: DatabaseConnection):
        self._conn = conn

    @property
    def _enrollments(self):
        return self._conn.db()["enrollments"]

    def list_filtered(
        self,
        *,
        student_id: Optional[ObjectId] = None,
        course_id: Optional[ObjectId] = None,
        status: Optional[EnrollmentStatus] = None,
    ) -> Sequence[Enrollment]:
        query: Dict[str, Any] = {}
        if student_id is not None:
            query["studentId"] = student_id
        if course_id is not None:
            query["courseId"] = course_id
        if status is not None:
            query["status"] = status.value
        return [_to_enrollment(d) for d in self._enrollments.find(query)]

    def get_by_id(self, enrollment_id: ObjectId) -> Optional[Enrollment]:
        doc = self._enrollments.find_one({"_id": enrollment_id})
        return _to_enrollment(doc) if doc else None

    def find_open_for_student(self, student_id: ObjectId, *, exclude_id: Optional[ObjectId] = None) -> Optional[Enrollment]:
        query: Dict[str, Any] = {"studentId": student_id, "status": {"$in": _OPEN_STATUSES}}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        doc = self._enrollments.find_one(query)
        return _to_enrollment(doc) if doc else None

    def find_pending_for_student(self, student_id: ObjectId) -> Optional[Enrollment]:
        doc = self._enrollments.find_one({"studentId": student_id, "status": EnrollmentStatus.PENDING.value})
        return _to_enrollment(doc) if doc else None

    def list_open_for_students(self, student_ids: Iterable[ObjectId]) -> Sequence[Enrollment]:
        query = {"studentId": {"$in": list(student_ids)}, "status": {"$in": _OPEN_STATUSES}}
        return [_to_enrollment(d) for d in self._enrollments.find(query)]

    def count_for_student(self, student_id: ObjectId) -> int:
        return self._enrollments.count_documents({"studentId": student_id})

    def create(self, enrollment: NewEnrollment) -> ObjectId:
        doc: Dict[str, Any] = {
            "studentId": enrollment.student_id,
            "courseId": enrollment.course_id,
            "frequency": enrollment.frequency,
            "startDate": enrollment.start_date,
            "endDate": enrollment.end_date,
            "status": enrollment.status.value,
            "schedule": schedule_doc(enrollment.schedule),
            "paymentMode": enrollment.payment_mode.value,
            "totalSessions": enrollment.total_sessions,
            "completedSessions": 0,
            "remainingSessions": enrollment.total_sessions,
        }
        if enrollment.cycle is not None:
            doc["cycle"] = enrollment.cycle
        if enrollment.custom_weeks is not None:
            doc["customWeeks"] = enrollment.custom_weeks
        return self._enrollments.insert_one(stamp_created(doc)).inserted_id

    def update(self, enrollment_id: ObjectId, changes: Dict[str, Any]) -> bool:
        result = self._enrollments.update_one({"_id": enrollment_id}, {"$set": stamp_updated(dict(changes))})
        return result.matched_count > 0

    def record_completed_session(self, enrollment_id: ObjectId) -> bool:
        result = self._enrollments.update_one(
            {"_id": enrollment_id},
            {"$inc": {"completedSessions": 1, "remainingSessions": -1}, "$set": stamp_updated({})},
        )
        return result.matched_count > 0
