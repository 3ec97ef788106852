from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple

from bson import ObjectId

from ..common.datetime_utils import at_time, day_of_week, start_of_day


@dataclass(frozen=True)
class ClassSession:
    """Buổi học lặp lại hằng tuần. day_of_week: 0 = Chủ nhật ... 6 = Thứ bảy."""

    day_of_week: int
    start_time: str
    end_time: str


@dataclass(frozen=True)
class StudioClass:
    id: ObjectId
    name: str
    grade: int
    sessions: Tuple[ClassSession, ...]
    enrolled_students: Tuple[ObjectId, ...] = ()
    is_active: bool = True
    cancelled_dates: Tuple[datetime, ...] = ()
    max_students: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def has_student(self, student_id: ObjectId) -> bool:
        return student_id in self.enrolled_students

    def is_full(self) -> bool:
        return self.max_students is not None and len(self.enrolled_students) >= self.max_students

    def is_cancelled_on(self, day: datetime) -> bool:
        return any(d.date() == day.date() for d in self.cancelled_dates)

    def next_session_after(self, moment: datetime) -> Optional[datetime]:
        """Earliest non-cancelled session start at or after `moment`."""

        first_day = start_of_day(moment)
        for offset in range(15):
            day = first_day + timedelta(days=offset)
            if self.is_cancelled_on(day):
                continue
            starts = [at_time(day, s.start_time) for s in self.sessions if s.day_of_week == day_of_week(day)]
            starts = [t for t in starts if t >= moment]
            if starts:
                return min(starts)
        return None


@dataclass(frozen=True)
class NewClass:
    name: str
    grade: int
    sessions: Tuple[ClassSession, ...]
    max_students: Optional[int] = None


def session_doc(session: ClassSession) -> dict:
    return {"dayOfWeek": session.day_of_week, "startTime": session.start_time, "endTime": session.end_time}
