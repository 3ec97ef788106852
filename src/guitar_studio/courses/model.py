from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from bson import ObjectId

from ..core.constants import DEFAULT_TOTAL_SESSIONS
from ..core.enums import CourseFormat, CourseType


@dataclass(frozen=True)
class Course:
    """Khoá học: loại lớp (1-1, 1-2, nhóm) x hình thức (online/offline)."""

    id: ObjectId
    name: str
    type: CourseType
    format: CourseFormat
    max_students: int
    total_sessions: int = DEFAULT_TOTAL_SESSIONS
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewCourse:
    name: str
    type: CourseType
    format: CourseFormat
    max_students: int
    total_sessions: int = DEFAULT_TOTAL_SESSIONS


STANDARD_COURSES = (
    NewCourse(name="Lớp 1-1 Online", type=CourseType.ONE_ON_ONE, format=CourseFormat.ONLINE, max_students=1),
    NewCourse(name="Lớp 1-1 Offline", type=CourseType.ONE_ON_ONE, format=CourseFormat.OFFLINE, max_students=1),
    NewCourse(name="Lớp 1-2 Online", type=CourseType.ONE_ON_TWO, format=CourseFormat.ONLINE, max_students=2),
    NewCourse(name="Lớp 1-2 Offline", type=CourseType.ONE_ON_TWO, format=CourseFormat.OFFLINE, max_students=2),
    NewCourse(name="Lớp nhóm Online", type=CourseType.GROUP, format=CourseFormat.ONLINE, max_students=7),
    NewCourse(name="Lớp nhóm Offline", type=CourseType.GROUP, format=CourseFormat.OFFLINE, max_students=7),
)
