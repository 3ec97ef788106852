from __future__ import annotations

from typing import Optional, Sequence

from bson import ObjectId

from ..core.constants import DEFAULT_TOTAL_SESSIONS
from ..core.enums import CourseFormat, CourseType
from ..database.connection import DatabaseConnection
from ..database.mongo_base import stamp_created
from .model import Course, NewCourse
from .repository import CourseRepository


def _to_course(doc: dict) -> Course:
    return Course(
        id=doc["_id"],
        name=doc.get("name", ""),
        type=CourseType(doc["type"]),
        format=CourseFormat(doc["format"]),
        max_students=int(doc.get("maxStudents") or 0),
        total_sessions=int(doc.get("totalSessions") or DEFAULT_TOTAL_SESSIONS),
        created_at=doc.get("createdAt"),
        updated_at=doc.get("updatedAt"),
    )


class MongoCourseRepository(CourseRepository):
    def __init__(self, conn: DatabaseConnection):
        self._conn = conn

    @property
    def _courses(self):
        return self._conn.db()["courses"]

    def list_all(self) -> Sequence[Course]:
        return [_to_course(d) for d in self._courses.find({})]

    def get_by_id(self, course_id: ObjectId) -> Optional[Course]:
        doc = self._courses.find_one({"_id": course_id})
        return _to_course(doc) if doc else None

    def count(self) -> int:
        return self._courses.count_documents({})

    def create(self, course: NewCourse) -> ObjectId:
        doc = {
            "name": course.name,
            "type": course.type.value,
            "format": course.format.value,
            "maxStudents": course.max_students,
            "totalSessions": course.total_sessions,
        }
        return self._courses.insert_one(stamp_created(doc)).inserted_id
