from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import now_local, parse_datetime
from ..common.validators import optional_object_id, require_object_id
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..enrollments.repository import EnrollmentRepository
from .model import AttendanceRecord, AttendanceSummary, NewAttendance
from .repository import AttendanceRepository

# Statuses that consume one session of the enrollment
_COUNTED_STATUSES = frozenset({AttendanceStatus.PRESENT, AttendanceStatus.MAKEUP})


def _status(value: Any) -> AttendanceStatus:
    try:
        return AttendanceStatus(value)
    except ValueError:
        raise ValidationError("status không hợp lệ")


def summarize(records: Sequence[AttendanceRecord], total_sessions: int) -> AttendanceSummary:
    """Đếm số buổi đi học, học bù, vắng có phép và vắng không phép."""

    attended = sum(1 for r in records if r.status == AttendanceStatus.PRESENT)
    makeup = sum(1 for r in records if r.status == AttendanceStatus.MAKEUP)
    excused = sum(1 for r in records if r.status == AttendanceStatus.EXCUSED)
    unexcused = max(0, total_sessions - attended - makeup + excused)
    return AttendanceSummary(
        total_sessions=total_sessions,
        attended=attended,
        makeup=makeup,
        excused=excused,
        unexcused=unexcused,
    )


class AttendanceService:
    def __init__(self, attendance: AttendanceRepository, enrollments: EnrollmentRepository):
        self._attendance = attendance
        self._enrollments = enrollments

    def list_attendance(
        self,
        *,
        student_id: Optional[str] = None,
        enrollment_id: Optional[str] = None,
        class_id: Optional[str] = None,
        session_date: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        return self._attendance.list_filtered(
            student_id=optional_object_id(student_id, "studentId"),
            enrollment_id=optional_object_id(enrollment_id, "enrollmentId"),
            class_id=optional_object_id(class_id, "classId"),
            session_day=parse_datetime(session_date, "sessionDate") if session_date else None,
        )

    def get_attendance(self, attendance_id: Any) -> AttendanceRecord:
        record = self._attendance.get_by_id(require_object_id(attendance_id, "attendanceId"))
        if not record:
            raise NotFoundError("Attendance not found")
        return record

    def mark_attendance(
        self,
        *,
        student_id: Any,
        session_date: Any,
        status: Any,
        marked_by: Any,
        enrollment_id: Any = None,
        class_id: Any = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        if not student_id or not session_date or not status or not marked_by:
            raise ValidationError("Missing required fields")

        sid = require_object_id(student_id, "studentId")
        day = parse_datetime(session_date, "sessionDate")
        st = _status(status)
        eid = optional_object_id(enrollment_id, "enrollmentId")

        if self._attendance.find_for_student_on(sid, day):
            raise ValidationError("Attendance already recorded for this session")

        attendance_id = self._attendance.create(
            NewAttendance(
                student_id=sid,
                session_date=day,
                status=st,
                marked_by=require_object_id(marked_by, "markedBy"),
                marked_at=now or now_local(),
                enrollment_id=eid,
                class_id=optional_object_id(class_id, "classId"),
                notes=notes or None,
            )
        )

        if eid is not None and st in _COUNTED_STATUSES:
            self._enrollments.record_completed_session(eid)

        return self.get_attendance(attendance_id)

    def update_attendance(self, attendance_id: Any, data: Dict[str, Any]) -> AttendanceRecord:
        aid = require_object_id(attendance_id, "attendanceId")
        self.get_attendance(aid)

        changes: Dict[str, Any] = {}
        if "status" in data:
            changes["status"] = _status(data["status"]).value
        if "notes" in data:
            changes["notes"] = data["notes"]
        if not self._attendance.update(aid, changes):
            raise NotFoundError("Attendance not found")
        return self.get_attendance(aid)

    def delete_attendance(self, attendance_id: Any) -> None:
        aid = require_object_id(attendance_id, "attendanceId")
        self.get_attendance(aid)
        if not self._attendance.delete(aid):
            raise NotFoundError("Attendance not found")

    def summary_for_enrollment(self, enrollment_id: Any) -> AttendanceSummary:
        eid = require_object_id(enrollment_id, "enrollmentId")
        enrollment = self._enrollments.get_by_id(eid)
        if not enrollment:
            raise NotFoundError("Enrollment not found")
        return summarize(self._attendance.list_filtered(enrollment_id=eid), enrollment.total_sessions)
