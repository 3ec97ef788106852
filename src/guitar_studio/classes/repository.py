from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Protocol, Sequence

from bson import ObjectId

from .model import NewClass, StudioClass


class ClassRepository(Protocol):
    def list_filtered(self, *, grade: Optional[int] = None, is_active: Optional[bool] = None) -> Sequence[StudioClass]:
        raise NotImplementedError

    def get_by_id(self, class_id: ObjectId) -> Optional[StudioClass]:
        raise NotImplementedError

    def list_enrolling(self, student_id: ObjectId, *, exclude_id: Optional[ObjectId] = None) -> Sequence[StudioClass]:
        """Classes whose roster contains the student."""

        raise NotImplementedError

    def create(self, new_class: NewClass) -> ObjectId:
        raise NotImplementedError

    def update(self, class_id: ObjectId, changes: Dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, class_id: ObjectId) -> bool:
        raise NotImplementedError

    def add_student(self, class_id: ObjectId, student_id: ObjectId) -> bool:
        raise NotImplementedError

    def remove_student(self, class_id: ObjectId, student_id: ObjectId) -> bool:
        raise NotImplementedError

    def add_cancelled_date(self, class_id: ObjectId, day: datetime) -> bool:
        raise NotImplementedError
