from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from bson import ObjectId

from ..database.connection import DatabaseConnection
from ..database.mongo_base import stamp_created, stamp_updated
from .model import ClassSession, NewClass, StudioClass, session_doc
from .repository import ClassRepository


def _to_class(doc: dict) -> StudioClass:
    return StudioClass(
        id=doc["_id"],
        name=doc.get("name", ""),
        grade=int(doc.get("grade") or 0),
        sessions=tuple(
            ClassSession(day_of_week=int(s["dayOfWeek"]), start_time=s["startTime"], end_time=s["endTime"])
            for s in doc.get("sessions") or []
        ),
        enrolled_students=tuple(ObjectId(str(s)) for s in doc.get("enrolledStudents") or []),
        is_active=bool(doc.get("isActive", True)),
        cancelled_dates=tuple(doc.get("cancelledDates") or []),
        max_students=doc.get("maxStudents"),
        created_at=doc.get("createdAt"),
        updated_at=doc.get("updatedAt"),
    )


class MongoClassRepository(ClassRepository):
    def __init__(self, conn: DatabaseConnection):
        self._conn = conn

    @property
    def _classes(self):
        return self._conn.db()["classes"]

    def list_filtered(self, *, grade: Optional[int] = None, is_active: Optional[bool] = None) -> Sequence[StudioClass]:
        query: Dict[str, Any] = {}
        if grade is not None:
            query["grade"] = grade
        if is_active is not None:
            query["isActive"] = is_active
        return [_to_class(d) for d in self._classes.find(query)]

    def get_by_id(self, class_id: ObjectId) -> Optional[StudioClass]:
        doc = self._classes.find_one({"_id": class_id})
        return _to_class(doc) if doc else None

    def list_enrolling(self, student_id: ObjectId, *, exclude_id: Optional[ObjectId] = None) -> Sequence[StudioClass]:
        query: Dict[str, Any] = {"enrolledStudents": student_id}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        return [_to_class(d) for d in self._classes.find(query)]

    def create(self, new_class: NewClass) -> ObjectId:
        doc: Dict[str, Any] = {
            "name": new_class.name,
            "grade": new_class.grade,
            "sessions": [session_doc(s) for s in new_class.sessions],
            "enrolledStudents": [],
            "isActive": True,
        }
        if new_class.max_students is not None:
            doc["maxStudents"] = new_class.max_students
        return self._classes.insert_one(stamp_created(doc)).inserted_id

    def update(self, class_id: ObjectId, changes: Dict[str, Any]) -> bool:
        result = self._classes.update_one({"_id": class_id}, {"$set": stamp_updated(dict(changes))})
        return result.matched_count > 0

    def delete(self, class_id: ObjectId) -> bool:
        return self._classes.delete_one({"_id": class_id}).deleted_count > 0

    def add_student(self, class_id: ObjectId, student_id: ObjectId) -> bool:
        result = self._classes.update_one(
            {"_id": class_id},
            {"$addToSet": {"enrolledStudents": student_id}, "$set": stamp_updated({})},
        )
        return result.matched_count > 0

    def remove_student(self, class_id: ObjectId, student_id: ObjectId) -> bool:
        result = self._classes.update_one(
            {"_id": class_id},
            {"$pull": {"enrolledStudents": student_id}, "$set": stamp_updated({})},
        )
        return result.matched_count > 0

    def add_cancelled_date(self, class_id: ObjectId, day: datetime) -> bool:
        result = self._classes.update_one(
            {"_id": class_id},
            {"$push": {"cancelledDates": day}, "$set": stamp_updated({})},
        )
        return result.matched_count > 0
