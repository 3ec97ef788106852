from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from bson import ObjectId

from ..core.enums import RequestStatus
from .model import AbsenceRequest, MakeupRequest, NewAbsenceRequest, NewMakeupRequest


class RequestRepository(Protocol):
    # Absence requests
    def create_absence(self, request: NewAbsenceRequest) -> ObjectId:
        raise NotImplementedError

    def get_absence(self, request_id: ObjectId) -> Optional[AbsenceRequest]:
        raise NotImplementedError

    def list_absences(
        self,
        *,
        student_id: Optional[ObjectId] = None,
        enrollment_id: Optional[ObjectId] = None,
        class_id: Optional[ObjectId] = None,
        status: Optional[RequestStatus] = None,
    ) -> Sequence[AbsenceRequest]:
        raise NotImplementedError

    def find_absence(
        self, student_id: ObjectId, day: datetime, *, class_id: Optional[ObjectId] = None
    ) -> Optional[AbsenceRequest]:
        raise NotImplementedError

    def decide_absence(self, *, request_id: ObjectId, status: RequestStatus, decided_by: ObjectId) -> bool:
        """Only pending requests are updated."""

        raise NotImplementedError

    # Makeup requests
    def create_makeup(self, request: NewMakeupRequest) -> ObjectId:
        raise NotImplementedError

    def get_makeup(self, request_id: ObjectId) -> Optional[MakeupRequest]:
        raise NotImplementedError

    def list_makeups(
        self,
        *,
        student_id: Optional[ObjectId] = None,
        enrollment_id: Optional[ObjectId] = None,
        status: Optional[RequestStatus] = None,
    ) -> Sequence[MakeupRequest]:
        raise NotImplementedError

    def find_makeup_for_original(
        self, student_id: ObjectId, original_class_id: ObjectId, day: datetime
    ) -> Optional[MakeupRequest]:
        raise NotImplementedError

    def decide_makeup(self, *, request_id: ObjectId, status: RequestStatus, decided_by: ObjectId) -> bool:
        raise NotImplementedError

    def delete_approved_makeups_into(self, class_id: ObjectId, day: datetime) -> int:
        """Remove approved makeups that target class_id on that day; returns the count."""

        raise NotImplementedError
