from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bson import ObjectId

from ..attendance.model import NewAttendance
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import at_time, day_of_week, now_local, parse_datetime, start_of_day
from ..common.validators import parse_hhmm, require_int, require_object_id
from ..core.constants import CLASS_CANCELLED_MAKEUP_NOTE, CLASS_CANCELLED_NOTE, VALID_GRADES
from ..core.enums import AttendanceStatus, EnrollmentStatus, RequestStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..enrollments.repository import EnrollmentRepository
from ..requests.model import NewAbsenceRequest, NewMakeupRequest
from ..requests.repository import RequestRepository
from ..users.repository import StudentProfileRepository
from .model import ClassSession, NewClass, StudioClass, session_doc
from .repository import ClassRepository

logger = logging.getLogger(__name__)

_DEFAULT_SESSION_TIME = "08:00"


def _minutes(hhmm: str) -> int:
    t = parse_hhmm(hhmm)
    return t.hour * 60 + t.minute


def sessions_overlap(a: ClassSession, b: ClassSession) -> bool:
    """Same weekday and intersecting [start, end) time ranges."""

    if a.day_of_week != b.day_of_week:
        return False
    return _minutes(a.start_time) < _minutes(b.end_time) and _minutes(b.start_time) < _minutes(a.end_time)


def parse_sessions(raw: Any) -> Tuple[ClassSession, ...]:
    if not isinstance(raw, list) or not raw:
        raise ValidationError("At least one session is required")

    out: List[ClassSession] = []
    for s in raw:
        if not isinstance(s, dict):
            raise ValidationError("Invalid session")
        dow = s.get("dayOfWeek")
        if isinstance(dow, bool) or not isinstance(dow, int) or dow < 0 or dow > 6:
            raise ValidationError("Day of week must be between 0 (Sunday) and 6 (Saturday)")

        start, end = str(s.get("startTime") or ""), str(s.get("endTime") or "")
        if _minutes(end) <= _minutes(start):
            raise ValidationError("End time must be after start time")
        out.append(ClassSession(day_of_week=dow, start_time=start.strip(), end_time=end.strip()))
    return tuple(out)


def _grade(value: Any) -> int:
    grade = require_int(value, "grade")
    if grade not in VALID_GRADES:
        raise ValidationError("Grade must be between 6 and 12")
    return grade


def _optional_max_students(value: Any) -> Optional[int]:
    if value in (None, ""):
        return None
    n = require_int(value, "maxStudents")
    if n < 1:
        raise ValidationError("maxStudents phải lớn hơn 0")
    return n


class ClassService:
    def __init__(
        self,
        classes: ClassRepository,
        enrollments: EnrollmentRepository,
        profiles: StudentProfileRepository,
        attendance: AttendanceRepository,
        requests: RequestRepository,
    ):
        self._classes = classes
        self._enrollments = enrollments
        self._profiles = profiles
        self._attendance = attendance
        self._requests = requests

    def _get(self, class_id: ObjectId) -> StudioClass:
        studio_class = self._classes.get_by_id(class_id)
        if not studio_class:
            raise NotFoundError("Class not found")
        return studio_class

    def list_classes(self, *, grade: Optional[str] = None, is_active: Optional[str] = None) -> Sequence[StudioClass]:
        return self._classes.list_filtered(
            grade=require_int(grade, "grade") if grade else None,
            is_active=(is_active == "true") if is_active is not None else None,
        )

    def get_class(self, class_id: Any) -> StudioClass:
        return self._get(require_object_id(class_id, "classId"))

    def _check_conflicts(self, grade: int, sessions: Sequence[ClassSession]) -> None:
        # Classes repeat weekly, so only the weekday and time range matter.
        for existing in self._classes.list_filtered(grade=grade, is_active=True):
            for old in existing.sessions:
                for new in sessions:
                    if sessions_overlap(old, new):
                        raise ValidationError(
                            f'Lớp học trùng giờ với lớp "{existing.name}" ({old.start_time} - {old.end_time})'
                        )

    def create_class(self, *, name: Any, grade: Any, sessions: Any, max_students: Any = None) -> StudioClass:
        if not name or not grade or not sessions:
            raise ValidationError("Missing required fields: name, grade, and at least one session")

        g = _grade(grade)
        parsed = parse_sessions(sessions)
        self._check_conflicts(g, parsed)

        class_id = self._classes.create(
            NewClass(
                name=str(name).strip(),
                grade=g,
                sessions=parsed,
                max_students=_optional_max_students(max_students),
            )
        )
        return self._get(class_id)

    def update_class(self, class_id: Any, data: Dict[str, Any]) -> StudioClass:
        cid = require_object_id(class_id, "classId")
        self._get(cid)

        changes: Dict[str, Any] = {}
        if "name" in data:
            if not str(data["name"] or "").strip():
                raise ValidationError("Class name is required")
            changes["name"] = str(data["name"]).strip()
        if "grade" in data:
            changes["grade"] = _grade(data["grade"])
        if "sessions" in data:
            parsed = parse_sessions(data["sessions"])
            for i, first in enumerate(parsed):
                for second in parsed[i + 1:]:
                    if sessions_overlap(first, second):
                        raise ValidationError("Sessions cannot overlap on the same day")
            changes["sessions"] = [session_doc(s) for s in parsed]
        if "isActive" in data:
            changes["isActive"] = bool(data["isActive"])
        if "maxStudents" in data:
            changes["maxStudents"] = _optional_max_students(data["maxStudents"])

        if not self._classes.update(cid, changes):
            raise NotFoundError("Class not found")
        return self._get(cid)

    def delete_class(self, class_id: Any) -> None:
        if not self._classes.delete(require_object_id(class_id, "classId")):
            raise NotFoundError("Class not found")

    def add_student(self, class_id: Any, student_id: Any) -> StudioClass:
        """Xếp học sinh vào lớp: kích hoạt đăng ký đang chờ và đồng bộ lớp/khối vào hồ sơ."""

        if not student_id:
            raise ValidationError("Student ID is required")
        cid = require_object_id(class_id, "classId")
        sid = require_object_id(student_id, "studentId")

        studio_class = self._get(cid)
        if studio_class.has_student(sid):
            raise ValidationError("Student is already enrolled in this class")

        if not self._classes.add_student(cid, sid):
            raise NotFoundError("Class not found")

        pending = self._enrollments.find_pending_for_student(sid)
        if pending:
            self._enrollments.update(pending.id, {"status": EnrollmentStatus.ACTIVE.value})

        self._profiles.upsert(sid, {"group": studio_class.name, "grade": studio_class.grade})
        return self._get(cid)

    def remove_student(self, class_id: Any, student_id: Any) -> StudioClass:
        if not student_id:
            raise ValidationError("Student ID is required")
        cid = require_object_id(class_id, "classId")
        sid = require_object_id(student_id, "studentId")

        self._get(cid)
        if not self._classes.remove_student(cid, sid):
            raise NotFoundError("Class not found")

        others = self._classes.list_enrolling(sid, exclude_id=cid)
        if others:
            self._profiles.upsert(sid, {"group": others[0].name, "grade": others[0].grade})
        else:
            self._profiles.upsert(sid, {"group": None, "grade": None})
        return self._get(cid)

    def _session_start(self, studio_class: StudioClass, day: datetime) -> datetime:
        dow = day_of_week(day)
        same_day = [s for s in studio_class.sessions if s.day_of_week == dow]
        if same_day:
            return at_time(day, same_day[0].start_time)
        if studio_class.sessions:
            return at_time(day, studio_class.sessions[0].start_time)
        return at_time(day, _DEFAULT_SESSION_TIME)

    def cancel_date(
        self,
        class_id: Any,
        date: Any,
        *,
        teacher_id: ObjectId,
        now: Optional[datetime] = None,
    ) -> StudioClass:
        """Huỷ lớp vào một ngày.

        Mỗi học sinh của lớp được ghi vắng có phép; học sinh chưa xin nghỉ trước
        nhận thêm một yêu cầu học bù ở trạng thái pending. Các buổi học bù đã
        duyệt vào lớp này trong ngày đó bị huỷ.
        """

        if not date:
            raise ValidationError("Date is required")
        cid = require_object_id(class_id, "classId")
        studio_class = self._get(cid)

        day = start_of_day(parse_datetime(date, "date"))
        if studio_class.is_cancelled_on(day):
            raise ValidationError("This date is already cancelled")

        if not self._classes.add_cancelled_date(cid, day):
            raise NotFoundError("Class not found")

        now = now or now_local()
        session_at = self._session_start(studio_class, day)
        enrollments = self._enrollments.list_open_for_students(studio_class.enrolled_students)

        for enrollment in enrollments:
            student_id = enrollment.student_id
            existing_absence = self._requests.find_absence(student_id, day, class_id=cid)

            if not self._attendance.find_for_student_on(student_id, day, class_id=cid):
                self._attendance.create(
                    NewAttendance(
                        student_id=student_id,
                        enrollment_id=enrollment.id,
                        class_id=cid,
                        session_date=session_at,
                        status=AttendanceStatus.EXCUSED,
                        notes=CLASS_CANCELLED_NOTE,
                        marked_by=teacher_id,
                        marked_at=now,
                    )
                )

            if existing_absence:
                # Students who already asked for leave get no makeup session.
                continue

            self._requests.create_absence(
                NewAbsenceRequest(
                    student_id=student_id,
                    enrollment_id=enrollment.id,
                    class_id=cid,
                    session_date=session_at,
                    reason=CLASS_CANCELLED_NOTE,
                    requested_at=now,
                    status=RequestStatus.APPROVED,
                )
            )
            if not self._requests.find_makeup_for_original(student_id, cid, day):
                self._requests.create_makeup(
                    NewMakeupRequest(
                        student_id=student_id,
                        enrollment_id=enrollment.id,
                        original_class_id=cid,
                        original_session_date=session_at,
                        # placeholder until the student picks a makeup class
                        new_session_date=session_at + timedelta(days=7),
                        reason=CLASS_CANCELLED_MAKEUP_NOTE,
                        requested_at=now,
                        status=RequestStatus.PENDING,
                    )
                )

        refunded = self._requests.delete_approved_makeups_into(cid, day)
        logger.info(
            "Cancelled class %s on %s: %d enrollments notified, %d makeups refunded",
            cid,
            day.date().isoformat(),
            len(enrollments),
            refunded,
        )
        return self._get(cid)
