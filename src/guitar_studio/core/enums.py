from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Vai trò người dùng dùng cho phân quyền."""

    TEACHER = "teacher"
    STUDENT = "student"


class CourseType(str, Enum):
    ONE_ON_ONE = "1-1"
    ONE_ON_TWO = "1-2"
    GROUP = "group"


class CourseFormat(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class AttendanceStatus(str, Enum):
    """Trạng thái điểm danh của một buổi học."""

    PRESENT = "present"
    ABSENT = "absent"
    EXCUSED = "excused"
    MAKEUP = "makeup"


class RequestStatus(str, Enum):
    """Trạng thái yêu cầu nghỉ học / học bù."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class EnrollmentStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    DEFERRED = "deferred"


class PaymentMode(str, Enum):
    """default: 12 buổi trong 9/18 tuần; custom: số tuần * tần suất."""

    DEFAULT = "default"
    CUSTOM = "custom"


class ProfileStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class DocumentCategory(str, Enum):
    HOMEWORK = "Bài tập"
    MIDTERM = "Đề giữa kỳ"
    FINAL = "Đề cuối kỳ"


class ToastType(str, Enum):
    ERROR = "error"
    SUCCESS = "success"
    INFO = "info"
