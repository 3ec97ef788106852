from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, List, Optional, Sequence, Tuple

from bson import ObjectId

from ..attendance.model import NewAttendance
from ..attendance.repository import AttendanceRepository
from ..classes.model import StudioClass
from ..classes.repository import ClassRepository
from ..common.datetime_utils import now_local, parse_datetime, start_of_day
from ..common.validators import optional_object_id, require_non_empty, require_object_id
from ..core.constants import ABSENCE_MIN_NOTICE_HOURS, MAKEUP_MIN_NOTICE_DAYS
from ..core.enums import AttendanceStatus, RequestStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..enrollments.repository import EnrollmentRepository
from .model import AbsenceRequest, MakeupRequest, NewAbsenceRequest, NewMakeupRequest
from .repository import RequestRepository

logger = logging.getLogger(__name__)


def _optional_status(value: Optional[str]) -> Optional[RequestStatus]:
    if not value:
        return None
    try:
        return RequestStatus(value)
    except ValueError:
        return None


class RequestService:
    """Use case: xin nghỉ (absence) và học bù (makeup).

    Yêu cầu mới được lưu ở trạng thái approved; giáo viên vẫn có thể duyệt/từ chối
    các yêu cầu còn pending (ví dụ yêu cầu học bù sinh ra khi huỷ lớp).
    """

    def __init__(
        self,
        requests: RequestRepository,
        attendance: AttendanceRepository,
        enrollments: EnrollmentRepository,
        classes: ClassRepository,
    ):
        self._requests = requests
        self._attendance = attendance
        self._enrollments = enrollments
        self._classes = classes

    # Absence
    def list_absences(
        self,
        *,
        student_id: Optional[str] = None,
        enrollment_id: Optional[str] = None,
        class_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Sequence[AbsenceRequest]:
        return self._requests.list_absences(
            student_id=optional_object_id(student_id, "studentId"),
            enrollment_id=optional_object_id(enrollment_id, "enrollmentId"),
            class_id=optional_object_id(class_id, "classId"),
            status=_optional_status(status),
        )

    def create_absence(
        self,
        *,
        student_id: Any,
        enrollment_id: Any,
        session_date: Any,
        reason: str,
        class_id: Any = None,
        marked_by_teacher: bool = False,
        now: Optional[datetime] = None,
    ) -> AbsenceRequest:
        if not student_id or not enrollment_id or not session_date or not reason:
            raise ValidationError("Missing required fields")

        sid = require_object_id(student_id, "studentId")
        eid = require_object_id(enrollment_id, "enrollmentId")
        cid = optional_object_id(class_id, "classId")
        session_at = parse_datetime(session_date, "sessionDate")
        reason = require_non_empty(reason, "Lý do")
        now = now or now_local()

        if not marked_by_teacher:
            hours_until = (session_at - now).total_seconds() / 3600
            if hours_until < ABSENCE_MIN_NOTICE_HOURS:
                raise ValidationError(
                    f"Absence request must be made at least {ABSENCE_MIN_NOTICE_HOURS} hours before the session"
                )

        request_id = self._requests.create_absence(
            NewAbsenceRequest(
                student_id=sid,
                enrollment_id=eid,
                class_id=cid,
                session_date=session_at,
                reason=reason,
                requested_at=now,
                status=RequestStatus.APPROVED,
            )
        )

        day = start_of_day(session_at)
        if not self._attendance.find_for_student_on(sid, day):
            # the student reported it, so the record is marked by the student
            self._attendance.create(
                NewAttendance(
                    student_id=sid,
                    session_date=day,
                    status=AttendanceStatus.EXCUSED,
                    marked_by=sid,
                    marked_at=now,
                    enrollment_id=eid,
                    class_id=cid,
                )
            )

        created = self._requests.get_absence(request_id)
        if not created:
            raise NotFoundError("Absence request not found")
        return created

    # Makeup
    def list_makeups(
        self,
        *,
        student_id: Optional[str] = None,
        enrollment_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Sequence[MakeupRequest]:
        return self._requests.list_makeups(
            student_id=optional_object_id(student_id, "studentId"),
            enrollment_id=optional_object_id(enrollment_id, "enrollmentId"),
            status=_optional_status(status),
        )

    def create_makeup(
        self,
        *,
        student_id: Any,
        enrollment_id: Any,
        original_session_date: Any,
        new_session_date: Any,
        reason: str,
        original_class_id: Any = None,
        new_class_id: Any = None,
        now: Optional[datetime] = None,
    ) -> MakeupRequest:
        if not student_id or not enrollment_id or not original_session_date or not new_session_date or not reason:
            raise ValidationError("Missing required fields")

        new_at = parse_datetime(new_session_date, "newSessionDate")
        now = now or now_local()
        days_until = (new_at - now).total_seconds() / 86400
        if days_until < MAKEUP_MIN_NOTICE_DAYS:
            raise ValidationError(
                f"Makeup request must be made at least {MAKEUP_MIN_NOTICE_DAYS} day before the new session"
            )

        new_cid = optional_object_id(new_class_id, "newClassId")
        if new_cid is not None:
            new_class = self._classes.get_by_id(new_cid)
            if not new_class:
                raise NotFoundError("New class not found")
            if new_class.is_full():
                raise ValidationError("Class is full")

        # The roster of the new class is left unchanged.
        request_id = self._requests.create_makeup(
            NewMakeupRequest(
                student_id=require_object_id(student_id, "studentId"),
                enrollment_id=require_object_id(enrollment_id, "enrollmentId"),
                original_class_id=optional_object_id(original_class_id, "originalClassId"),
                original_session_date=parse_datetime(original_session_date, "originalSessionDate"),
                new_class_id=new_cid,
                new_session_date=new_at,
                reason=require_non_empty(reason, "Lý do"),
                requested_at=now,
                status=RequestStatus.APPROVED,
            )
        )
        created = self._requests.get_makeup(request_id)
        if not created:
            raise NotFoundError("Makeup request not found")
        return created

    def available_makeup_classes(
        self, enrollment_id: Optional[str], *, now: Optional[datetime] = None
    ) -> List[Tuple[StudioClass, datetime]]:
        """Active classes with a free slot and their earliest session at least one day away."""

        if not enrollment_id:
            raise ValidationError("enrollmentId is required")
        enrollment = self._enrollments.get_by_id(require_object_id(enrollment_id, "enrollmentId"))
        if not enrollment:
            raise NotFoundError("Enrollment not found")

        earliest = (now or now_local()) + timedelta(days=MAKEUP_MIN_NOTICE_DAYS)
        out: List[Tuple[StudioClass, datetime]] = []
        for studio_class in self._classes.list_filtered(is_active=True):
            if studio_class.is_full():
                continue
            next_at = studio_class.next_session_after(earliest)
            if next_at is not None:
                out.append((studio_class, next_at))
        out.sort(key=lambda item: item[1])
        return out

    # Teacher decisions
    def _require_teacher(self, current_role: Role) -> None:
        if current_role != Role.TEACHER:
            raise AuthorizationError("Bạn không có quyền")

    def approve_absence(self, *, current_role: Role, teacher_id: ObjectId, request_id: Any) -> AbsenceRequest:
        return self._decide_absence(current_role, teacher_id, request_id, RequestStatus.APPROVED)

    def reject_absence(self, *, current_role: Role, teacher_id: ObjectId, request_id: Any) -> AbsenceRequest:
        return self._decide_absence(current_role, teacher_id, request_id, RequestStatus.REJECTED)

    def _decide_absence(
        self, current_role: Role, teacher_id: ObjectId, request_id: Any, status: RequestStatus
    ) -> AbsenceRequest:
        self._require_teacher(current_role)
        rid = require_object_id(request_id, "requestId")
        req = self._requests.get_absence(rid)
        if not req:
            raise NotFoundError("Absence request not found")
        if req.status != RequestStatus.PENDING:
            raise ValidationError("Yêu cầu đã được xử lý")
        if not self._requests.decide_absence(request_id=rid, status=status, decided_by=teacher_id):
            raise ValidationError("Cập nhật yêu cầu thất bại")
        logger.info("Absence request %s %s by %s", rid, status.value, teacher_id)
        return self._requests.get_absence(rid)

    def approve_makeup(self, *, current_role: Role, teacher_id: ObjectId, request_id: Any) -> MakeupRequest:
        return self._decide_makeup(current_role, teacher_id, request_id, RequestStatus.APPROVED)

    def reject_makeup(self, *, current_role: Role, teacher_id: ObjectId, request_id: Any) -> MakeupRequest:
        return self._decide_makeup(current_role, teacher_id, request_id, RequestStatus.REJECTED)

    def _decide_makeup(
        self, current_role: Role, teacher_id: ObjectId, request_id: Any, status: RequestStatus
    ) -> MakeupRequest:
        self._require_teacher(current_role)
        rid = require_object_id(request_id, "requestId")
        req = self._requests.get_makeup(rid)
        if not req:
            raise NotFoundError("Makeup request not found")
        if req.status != RequestStatus.PENDING:
            raise ValidationError("Yêu cầu đã được xử lý")
        if not self._requests.decide_makeup(request_id=rid, status=status, decided_by=teacher_id):
            raise ValidationError("Cập nhật yêu cầu thất bại")
        logger.info("Makeup request %s %s by %s", rid, status.value, teacher_id)
        return self._requests.get_makeup(rid)
