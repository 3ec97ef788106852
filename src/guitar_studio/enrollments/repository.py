from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Protocol, Sequence

from bson import ObjectId

from ..core.enums import EnrollmentStatus
from .model import Enrollment, NewEnrollment


class EnrollmentRepository(Protocol):
    def list_filtered(
        self,
        *,
        student_id: Optional[ObjectId] = None,
        course_id: Optional[ObjectId] = None,
        status: Optional[EnrollmentStatus] = None,
    ) -> Sequence[Enrollment]:
        raise NotImplementedError

    def get_by_id(self, enrollment_id: ObjectId) -> Optional[Enrollment]:
        raise NotImplementedError

    def find_open_for_student(self, student_id: ObjectId, *, exclude_id: Optional[ObjectId] = None) -> Optional[Enrollment]:
        """Pending or active enrollment of the student, if any."""

        raise NotImplementedError

    def find_pending_for_student(self, student_id: ObjectId) -> Optional[Enrollment]:
        raise NotImplementedError

    def list_open_for_students(self, student_ids: Iterable[ObjectId]) -> Sequence[Enrollment]:
        raise NotImplementedError

    def count_for_student(self, student_id: ObjectId) -> int:
        raise NotImplementedError

    def create(self, enrollment: NewEnrollment) -> ObjectId:
        raise NotImplementedError

    def update(self, enrollment_id: ObjectId, changes: Dict[str, Any]) -> bool:
        raise NotImplementedError

    def record_completed_session(self, enrollment_id: ObjectId) -> bool:
        """completedSessions += 1, remainingSessions -= 1."""

        raise NotImplementedError
