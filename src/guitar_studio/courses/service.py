from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..common.validators import require_int, require_non_empty, require_object_id
from ..core.constants import DEFAULT_TOTAL_SESSIONS
from ..core.enums import CourseFormat, CourseType
from ..core.exceptions import NotFoundError, ValidationError
from .model import STANDARD_COURSES, Course, NewCourse
from .repository import CourseRepository

logger = logging.getLogger(__name__)


class CourseService:
    def __init__(self, courses: CourseRepository):
        self._courses = courses

    def list_courses(self) -> Sequence[Course]:
        return self._courses.list_all()

    def get_course(self, course_id: Any) -> Course:
        course = self._courses.get_by_id(require_object_id(course_id, "courseId"))
        if not course:
            raise NotFoundError("Course not found")
        return course

    def create_course(
        self,
        *,
        name: str,
        type: str,
        format: str,
        max_students: Any,
        total_sessions: Optional[Any] = None,
    ) -> Course:
        name = require_non_empty(name, "Tên khoá học")
        try:
            course_type = CourseType(type)
            course_format = CourseFormat(format)
        except ValueError:
            raise ValidationError("Loại hoặc hình thức khoá học không hợp lệ")

        max_students = require_int(max_students, "maxStudents")
        if max_students < 1:
            raise ValidationError("maxStudents phải lớn hơn 0")

        sessions = DEFAULT_TOTAL_SESSIONS if total_sessions in (None, "") else require_int(total_sessions, "totalSessions")
        if sessions < 1:
            raise ValidationError("totalSessions phải lớn hơn 0")

        course_id = self._courses.create(
            NewCourse(
                name=name,
                type=course_type,
                format=course_format,
                max_students=max_students,
                total_sessions=sessions,
            )
        )
        return self.get_course(course_id)

    def seed_standard_courses(self) -> int:
        """Insert the six standard courses when the collection is empty."""

        if self._courses.count() > 0:
            logger.info("Courses already exist, skipping seed")
            return 0
        for course in STANDARD_COURSES:
            self._courses.create(course)
        logger.info("Seeded %d courses", len(STANDARD_COURSES))
        return len(STANDARD_COURSES)
