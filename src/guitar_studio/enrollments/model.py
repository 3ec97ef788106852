from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Tuple

from bson import ObjectId

from ..core.enums import EnrollmentStatus, PaymentMode


@dataclass(frozen=True)
class ScheduledSession:
    day_of_week: int
    time_slot: str
    class_id: Optional[ObjectId] = None


@dataclass(frozen=True)
class Enrollment:
    """Đăng ký khoá học của một học sinh.

    total_sessions = completed_sessions + remaining_sessions chỉ đúng khi chưa có buổi tặng (bonus).
    """

    id: ObjectId
    student_id: ObjectId
    course_id: ObjectId
    frequency: int
    start_date: datetime
    end_date: datetime
    status: EnrollmentStatus
    total_sessions: int
    completed_sessions: int = 0
    remaining_sessions: int = 0
    payment_mode: PaymentMode = PaymentMode.DEFAULT
    custom_weeks: Optional[int] = None
    deferral_weeks: Optional[int] = None
    cycle: Optional[int] = None
    schedule: Tuple[ScheduledSession, ...] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewEnrollment:
    student_id: ObjectId
    course_id: ObjectId
    frequency: int
    start_date: datetime
    end_date: datetime
    total_sessions: int
    status: EnrollmentStatus = EnrollmentStatus.PENDING
    payment_mode: PaymentMode = PaymentMode.DEFAULT
    custom_weeks: Optional[int] = None
    cycle: Optional[int] = None
    schedule: Tuple[ScheduledSession, ...] = ()


def schedule_doc(sessions: Iterable[ScheduledSession]) -> dict:
    """Stored shape of `schedule`: {"sessions": [{dayOfWeek, timeSlot, classId?}]}."""
    out = []
    for s in sessions:
        item: Dict[str, Any] = {"dayOfWeek": s.day_of_week, "timeSlot": s.time_slot}
        if s.class_id is not None:
            item["classId"] = s.class_id
        out.append(item)
    return {"sessions": out}
