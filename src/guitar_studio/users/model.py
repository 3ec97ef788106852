from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from bson import ObjectId

from ..core.enums import ProfileStatus, Role


@dataclass(frozen=True)
class EmergencyContact:
    name: str
    phone: str
    relationship: str


@dataclass(frozen=True)
class User:
    """Thực thể miền (domain): User.

    Giáo viên và học sinh dùng chung collection `users`; `username` là khoá đăng nhập.
    """

    id: ObjectId
    username: str
    password_hash: str
    role: Role
    full_name: str
    phone: str = ""
    email: Optional[str] = None
    avatar: Optional[str] = None
    date_of_birth: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[EmergencyContact] = None
    student_number: Optional[int] = None
    facebook_name: Optional[str] = None
    note: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewUser:
    username: str
    password_hash: str
    role: Role
    full_name: str
    phone: str
    email: Optional[str] = None
    avatar: Optional[str] = None
    date_of_birth: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[EmergencyContact] = None
    student_number: Optional[int] = None
    facebook_name: Optional[str] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class StudentProfile:
    """Thông tin học tập của học sinh (collection `student_profiles`)."""

    user_id: ObjectId
    grade: Optional[int] = None
    group: Optional[str] = None
    status: ProfileStatus = ProfileStatus.PENDING
    notes: Optional[str] = None
    date_of_birth: Optional[datetime] = None
    competition_score: int = 0
