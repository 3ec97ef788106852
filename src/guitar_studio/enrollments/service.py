from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bson import ObjectId

from ..classes.repository import ClassRepository
from ..common.datetime_utils import at_time, day_of_week, now_local, parse_datetime, start_of_day
from ..common.serialization import dump
from ..common.validators import optional_object_id, require_int, require_object_id
from ..core.constants import DEFAULT_TOTAL_SESSIONS, DEFAULT_WEEKS_BY_FREQUENCY, MAX_DEFERRAL_WEEKS
from ..core.enums import EnrollmentStatus, PaymentMode, RequestStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..requests.model import NewAbsenceRequest
from ..requests.repository import RequestRepository
from ..schedules.session_number import calculate_session_number
from .model import Enrollment, NewEnrollment, ScheduledSession, schedule_doc
from .repository import EnrollmentRepository

logger = logging.getLogger(__name__)


def calculate_total_sessions(
    frequency: int,
    payment_mode: PaymentMode = PaymentMode.DEFAULT,
    custom_weeks: Optional[int] = None,
) -> int:
    """default: 12 buổi; custom: số tuần * tần suất học."""

    if payment_mode == PaymentMode.CUSTOM and custom_weeks:
        return int(custom_weeks) * int(frequency)
    return DEFAULT_TOTAL_SESSIONS


def calculate_end_date(
    start_date: datetime,
    frequency: int,
    payment_mode: PaymentMode = PaymentMode.DEFAULT,
    custom_weeks: Optional[int] = None,
) -> datetime:
    """default: 18 tuần (1 buổi/tuần) hoặc 9 tuần (2 buổi/tuần); custom: số tuần tuỳ chọn."""

    if payment_mode == PaymentMode.CUSTOM and custom_weeks:
        weeks = int(custom_weeks)
    else:
        weeks = DEFAULT_WEEKS_BY_FREQUENCY[int(frequency)]
    return start_date + timedelta(weeks=weeks)


def enrollment_view(enrollment: Enrollment) -> dict:
    data = dump(enrollment)
    data["schedule"] = {"sessions": data["schedule"]}
    return data


def _frequency(value: Any) -> int:
    frequency = require_int(value, "frequency")
    if frequency not in DEFAULT_WEEKS_BY_FREQUENCY:
        raise ValidationError("frequency phải là 1 hoặc 2")
    return frequency


def _payment_mode(value: Any) -> PaymentMode:
    if value in (None, ""):
        return PaymentMode.DEFAULT
    try:
        return PaymentMode(value)
    except ValueError:
        raise ValidationError("paymentMode không hợp lệ")


def _optional_positive_int(value: Any, field_name: str) -> Optional[int]:
    if value in (None, ""):
        return None
    number = require_int(value, field_name)
    if number <= 0:
        raise ValidationError(f"{field_name} phải lớn hơn 0")
    return number


def _parse_schedule(value: Any) -> Tuple[ScheduledSession, ...]:
    if not value:
        return ()
    sessions = value.get("sessions", []) if isinstance(value, dict) else value
    if not isinstance(sessions, list):
        raise ValidationError("schedule không hợp lệ")

    out: List[ScheduledSession] = []
    for s in sessions:
        if not isinstance(s, dict):
            raise ValidationError("schedule không hợp lệ")
        dow = require_int(s.get("dayOfWeek"), "dayOfWeek")
        if dow < 0 or dow > 6:
            raise ValidationError("Day of week must be between 0 (Sunday) and 6 (Saturday)")
        out.append(
            ScheduledSession(
                day_of_week=dow,
                time_slot=str(s.get("timeSlot") or ""),
                class_id=optional_object_id(s.get("classId"), "classId"),
            )
        )
    return tuple(out)


def _optional_status(value: Optional[str]) -> Optional[EnrollmentStatus]:
    if not value:
        return None
    try:
        return EnrollmentStatus(value)
    except ValueError:
        # unknown status filter is ignored
        return None


class EnrollmentService:
    def __init__(self, enrollments: EnrollmentRepository, classes: ClassRepository, requests: RequestRepository):
        self._enrollments = enrollments
        self._classes = classes
        self._requests = requests

    def _get(self, enrollment_id: ObjectId) -> Enrollment:
        enrollment = self._enrollments.get_by_id(enrollment_id)
        if not enrollment:
            raise NotFoundError("Enrollment not found")
        return enrollment

    def list_enrollments(
        self,
        *,
        student_id: Optional[str] = None,
        course_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Sequence[Enrollment]:
        return self._enrollments.list_filtered(
            student_id=optional_object_id(student_id, "studentId"),
            course_id=optional_object_id(course_id, "courseId"),
            status=_optional_status(status),
        )

    def get_enrollment(self, enrollment_id: Any) -> Enrollment:
        return self._get(require_object_id(enrollment_id, "enrollmentId"))

    def create_enrollment(
        self,
        *,
        student_id: Any,
        course_id: Any,
        frequency: Any,
        start_date: Any,
        payment_mode: Any = None,
        custom_weeks: Any = None,
        cycle: Any = None,
        schedule: Any = None,
    ) -> Enrollment:
        if not student_id or not course_id or not frequency or not start_date:
            raise ValidationError("Missing required fields")

        sid = require_object_id(student_id, "studentId")
        cid = require_object_id(course_id, "courseId")
        freq = _frequency(frequency)
        start = parse_datetime(start_date, "startDate")
        mode = _payment_mode(payment_mode)
        weeks = _optional_positive_int(custom_weeks, "customWeeks")
        sessions = _parse_schedule(schedule)

        if self._enrollments.find_open_for_student(sid):
            raise ValidationError("Student already has an active enrollment")

        enrollment_id = self._enrollments.create(
            NewEnrollment(
                student_id=sid,
                course_id=cid,
                frequency=freq,
                start_date=start,
                end_date=calculate_end_date(start, freq, mode, weeks),
                total_sessions=calculate_total_sessions(freq, mode, weeks),
                payment_mode=mode,
                custom_weeks=weeks,
                cycle=_optional_positive_int(cycle, "cycle"),
                schedule=sessions,
            )
        )
        return self._get(enrollment_id)

    def update_enrollment(self, enrollment_id: Any, data: Dict[str, Any]) -> Enrollment:
        eid = require_object_id(enrollment_id, "enrollmentId")
        existing = self._get(eid)

        changes: Dict[str, Any] = {}
        frequency = existing.frequency
        if data.get("frequency"):
            frequency = _frequency(data["frequency"])
            changes["frequency"] = frequency

        start = existing.start_date
        if data.get("startDate"):
            start = parse_datetime(data["startDate"], "startDate")
            changes["startDate"] = start

        mode = existing.payment_mode
        if "paymentMode" in data:
            mode = _payment_mode(data["paymentMode"])
            changes["paymentMode"] = mode.value

        custom_weeks = existing.custom_weeks
        if "customWeeks" in data:
            custom_weeks = _optional_positive_int(data["customWeeks"], "customWeeks")
            changes["customWeeks"] = custom_weeks

        if "cycle" in data:
            changes["cycle"] = _optional_positive_int(data["cycle"], "cycle")
        if "schedule" in data:
            changes["schedule"] = schedule_doc(_parse_schedule(data["schedule"]))
        if data.get("status"):
            try:
                changes["status"] = EnrollmentStatus(data["status"]).value
            except ValueError:
                raise ValidationError("status không hợp lệ")

        if data.get("frequency") or data.get("startDate") or "paymentMode" in data or "customWeeks" in data:
            changes["endDate"] = calculate_end_date(start, frequency, mode, custom_weeks)

        if "paymentMode" in data or "customWeeks" in data or data.get("frequency"):
            total = calculate_total_sessions(frequency, mode, custom_weeks)
            changes["totalSessions"] = total
            changes["remainingSessions"] = max(0, total - existing.completed_sessions)

        if not self._enrollments.update(eid, changes):
            raise NotFoundError("Enrollment not found")
        return self._get(eid)

    def _class_start(self, class_id: ObjectId, day: datetime) -> datetime:
        studio_class = self._classes.get_by_id(class_id)
        if not studio_class or not studio_class.sessions:
            return start_of_day(day)
        dow = day_of_week(day)
        session = next((s for s in studio_class.sessions if s.day_of_week == dow), studio_class.sessions[0])
        return at_time(day, session.start_time)

    def defer_enrollment(self, enrollment_id: Any, *, deferral_weeks: Any, now: Optional[datetime] = None) -> Enrollment:
        """Bảo lưu 1-4 tuần (chỉ một lần); các buổi trong thời gian bảo lưu được ghi nhận vắng có phép."""

        weeks = require_int(deferral_weeks, "deferralWeeks") if deferral_weeks not in (None, "") else 0
        if weeks < 1 or weeks > MAX_DEFERRAL_WEEKS:
            raise ValidationError(f"Deferral weeks must be between 1 and {MAX_DEFERRAL_WEEKS}")

        eid = require_object_id(enrollment_id, "enrollmentId")
        enrollment = self._get(eid)
        if enrollment.deferral_weeks and enrollment.deferral_weeks > 0:
            raise ValidationError(
                "Student has already deferred this enrollment. Only one deferral is allowed per enrollment."
            )

        now = now or now_local()
        window_start = start_of_day(now)
        window_end = window_start + timedelta(weeks=weeks)

        ok = self._enrollments.update(
            eid,
            {
                "deferralWeeks": weeks,
                "endDate": enrollment.end_date + timedelta(weeks=weeks),
                "status": EnrollmentStatus.DEFERRED.value,
            },
        )
        if not ok:
            raise NotFoundError("Enrollment not found")

        created = 0
        for week in range(weeks):
            week_start = window_start + timedelta(weeks=week)
            for session in enrollment.schedule:
                if session.class_id is None:
                    continue
                offset = (session.day_of_week - day_of_week(week_start)) % 7
                day = week_start + timedelta(days=offset)
                if not (window_start <= day < window_end):
                    continue
                if self._requests.find_absence(enrollment.student_id, day, class_id=session.class_id):
                    continue
                self._requests.create_absence(
                    NewAbsenceRequest(
                        student_id=enrollment.student_id,
                        enrollment_id=eid,
                        class_id=session.class_id,
                        session_date=self._class_start(session.class_id, day),
                        reason=f"Bảo lưu {weeks} tuần",
                        requested_at=now,
                        status=RequestStatus.APPROVED,
                    )
                )
                created += 1

        logger.info("Deferred enrollment %s for %d weeks (%d absences)", eid, weeks, created)
        return self._get(eid)

    def renew_enrollment(self, enrollment_id: Any) -> Enrollment:
        """Kết thúc đăng ký hiện tại và tạo đăng ký mới bắt đầu ngay sau ngày kết thúc."""

        eid = require_object_id(enrollment_id, "enrollmentId")
        existing = self._get(eid)

        if self._enrollments.find_open_for_student(existing.student_id, exclude_id=eid):
            raise ValidationError("Student already has an active enrollment")

        self._enrollments.update(eid, {"status": EnrollmentStatus.COMPLETED.value})

        start = start_of_day(existing.end_date + timedelta(days=1))
        new_id = self._enrollments.create(
            NewEnrollment(
                student_id=existing.student_id,
                course_id=existing.course_id,
                frequency=existing.frequency,
                start_date=start,
                end_date=calculate_end_date(start, existing.frequency, existing.payment_mode, existing.custom_weeks),
                total_sessions=calculate_total_sessions(existing.frequency, existing.payment_mode, existing.custom_weeks),
                payment_mode=existing.payment_mode,
                custom_weeks=existing.custom_weeks,
                cycle=existing.cycle,
                schedule=existing.schedule,
            )
        )
        return self._get(new_id)

    def add_bonus(self, enrollment_id: Any, *, bonus_sessions: Any = None, bonus_weeks: Any = None) -> Enrollment:
        sessions = require_int(bonus_sessions, "bonusSessions") if bonus_sessions not in (None, "") else 0
        weeks = require_int(bonus_weeks, "bonusWeeks") if bonus_weeks not in (None, "") else 0
        if sessions < 0 or weeks < 0 or (sessions == 0 and weeks == 0):
            raise ValidationError("Bonus sessions or weeks must be provided and non-negative")

        eid = require_object_id(enrollment_id, "enrollmentId")
        enrollment = self._get(eid)

        changes: Dict[str, Any] = {"remainingSessions": enrollment.remaining_sessions + sessions}
        if weeks > 0:
            changes["endDate"] = enrollment.end_date + timedelta(weeks=weeks)
        if not self._enrollments.update(eid, changes):
            raise NotFoundError("Enrollment not found")
        return self._get(eid)

    @staticmethod
    def week_number(enrollment: Enrollment, on_date: datetime) -> int:
        """1-based week index since the start date; <= 0 before the start."""

        return (start_of_day(on_date) - start_of_day(enrollment.start_date)).days // 7 + 1

    def session_label(self, enrollment: Enrollment, on_date: datetime) -> str:
        return calculate_session_number(
            self.week_number(enrollment, on_date),
            enrollment.cycle,
            enrollment.total_sessions,
        )
