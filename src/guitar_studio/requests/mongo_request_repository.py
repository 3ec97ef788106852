from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from bson import ObjectId

from ..common.datetime_utils import now_local
from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mongo_base import prune_none, same_day, stamp_created, stamp_updated
from .model import AbsenceRequest, MakeupRequest, NewAbsenceRequest, NewMakeupRequest
from .repository import RequestRepository


def _to_absence(doc: dict) -> AbsenceRequest:
    return AbsenceRequest(
        id=doc["_id"],
        student_id=doc["studentId"],
        enrollment_id=doc["enrollmentId"],
        session_date=doc["sessionDate"],
        reason=doc.get("reason", ""),
        requested_at=doc.get("requestedAt"),
        status=RequestStatus(doc.get("status") or RequestStatus.PENDING.value),
        class_id=doc.get("classId"),
        decided_by=doc.get("decidedBy"),
        decided_at=doc.get("decidedAt"),
        created_at=doc.get("createdAt"),
        updated_at=doc.get("updatedAt"),
    )


def _to_makeup(doc: dict) -> MakeupRequest:
    return MakeupRequest(
        id=doc["_id"],
        student_id=doc["studentId"],
        enrollment_id=doc["enrollmentId"],
        original_session_date=doc["originalSessionDate"],
        new_session_date=doc["newSessionDate"],
        reason=doc.get("reason", ""),
        requested_at=doc.get("requestedAt"),
        status=RequestStatus(doc.get("status") or RequestStatus.PENDING.value),
        original_class_id=doc.get("originalClassId"),
        new_class_id=doc.get("newClassId"),
        decided_by=doc.get("decidedBy"),
        decided_at=doc.get("decidedAt"),
        created_at=doc.get("createdAt"),
        updated_at=doc.get("updatedAt"),
    )


class MongoRequestRepository(RequestRepository):
    def __init__(self, conn: DatabaseConnection):
        self._conn = conn

    @property
    def _absences(self):
        return self._conn.db()["absenceRequests"]

    @property
    def _makeups(self):
        return self._conn.db()["makeupRequests"]

    @staticmethod
    def _decision(status: RequestStatus, decided_by: ObjectId) -> Dict[str, Any]:
        now = now_local()
        return stamp_updated({"status": status.value, "decidedBy": decided_by, "decidedAt": now}, now=now)

    # -------- Absence requests --------
    def create_absence(self, request: NewAbsenceRequest) -> ObjectId:
        doc = prune_none(
            {
                "studentId": request.student_id,
                "enrollmentId": request.enrollment_id,
                "classId": request.class_id,
                "sessionDate": request.session_date,
                "reason": request.reason,
                "requestedAt": request.requested_at,
                "status": request.status.value,
            }
        )
        return self._absences.insert_one(stamp_created(doc)).inserted_id

    def get_absence(self, request_id: ObjectId) -> Optional[AbsenceRequest]:
        doc = self._absences.find_one({"_id": request_id})
        return _to_absence(doc) if doc else None

    def list_absences(
        self,
        *,
        student_id: Optional[ObjectId] = None,
        enrollment_id: Optional[ObjectId] = None,
        class_id: Optional[ObjectId] = None,
        status: Optional[RequestStatus] = None,
    ) -> Sequence[AbsenceRequest]:
        query: Dict[str, Any] = prune_none(
            {
                "studentId": student_id,
                "enrollmentId": enrollment_id,
                "classId": class_id,
                "status": status.value if status else None,
            }
        )
        return [_to_absence(d) for d in self._absences.find(query)]

    def find_absence(
        self, student_id: ObjectId, day: datetime, *, class_id: Optional[ObjectId] = None
    ) -> Optional[AbsenceRequest]:
        query: Dict[str, Any] = {"studentId": student_id, "sessionDate": same_day(day)}
        if class_id is not None:
            query["classId"] = class_id
        doc = self._absences.find_one(query)
        return _to_absence(doc) if doc else None

    def decide_absence(self, *, request_id: ObjectId, status: RequestStatus, decided_by: ObjectId) -> bool:
        result = self._absences.update_one(
            {"_id": request_id, "status": RequestStatus.PENDING.value},
            {"$set": self._decision(status, decided_by)},
        )
        return result.modified_count > 0

    # -------- Makeup requests --------
    def create_makeup(self, request: NewMakeupRequest) -> ObjectId:
        doc = prune_none(
            {
                "studentId": request.student_id,
                "enrollmentId": request.enrollment_id,
                "originalClassId": request.original_class_id,
                "originalSessionDate": request.original_session_date,
                "newClassId": request.new_class_id,
                "newSessionDate": request.new_session_date,
                "reason": request.reason,
                "requestedAt": request.requested_at,
                "status": request.status.value,
            }
        )
        return self._makeups.insert_one(stamp_created(doc)).inserted_id

    def get_makeup(self, request_id: ObjectId) -> Optional[MakeupRequest]:
        doc = self._makeups.find_one({"_id": request_id})
        return _to_makeup(doc) if doc else None

    def list_makeups(
        self,
        *,
        student_id: Optional[ObjectId] = None,
        enrollment_id: Optional[ObjectId] = None,
        status: Optional[RequestStatus] = None,
    ) -> Sequence[MakeupRequest]:
        query: Dict[str, Any] = prune_none(
            {
                "studentId": student_id,
                "enrollmentId": enrollment_id,
                "status": status.value if status else None,
            }
        )
        return [_to_makeup(d) for d in self._makeups.find(query)]

    def find_makeup_for_original(
        self, student_id: ObjectId, original_class_id: ObjectId, day: datetime
    ) -> Optional[MakeupRequest]:
        doc = self._makeups.find_one(
            {
                "studentId": student_id,
                "originalClassId": original_class_id,
                "originalSessionDate": same_day(day),
            }
        )
        return _to_makeup(doc) if doc else None

    def decide_makeup(self, *, request_id: ObjectId, status: RequestStatus, decided_by: ObjectId) -> bool:
        result = self._makeups.update_one(
            {"_id": request_id, "status": RequestStatus.PENDING.value},
            {"$set": self._decision(status, decided_by)},
        )
        return result.modified_count > 0

    def delete_approved_makeups_into(self, class_id: ObjectId, day: datetime) -> int:
        result = self._makeups.delete_many(
            {
                "newClassId": class_id,
                "newSessionDate": same_day(day),
                "status": RequestStatus.APPROVED.value,
            }
        )
        return result.deleted_count
