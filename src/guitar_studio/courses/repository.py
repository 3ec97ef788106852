from __future__ import annotations

from typing import Optional, Protocol, Sequence

from bson import ObjectId

from .model import Course, NewCourse


class CourseRepository(Protocol):
    def list_all(self) -> Sequence[Course]:
        raise NotImplementedError

    def get_by_id(self, course_id: ObjectId) -> Optional[Course]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def create(self, course: NewCourse) -> ObjectId:
        raise NotImplementedError
