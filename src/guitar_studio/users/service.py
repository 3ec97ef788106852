from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import jwt
from bson import ObjectId
from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import parse_datetime
from ..common.serialization import dump
from ..common.validators import require_non_empty, require_object_id
from ..core.constants import AUTH_TOKEN_DAYS, DEFAULT_AVATAR
from ..core.enums import ProfileStatus, Role
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..enrollments.repository import EnrollmentRepository
from .model import EmergencyContact, NewUser, StudentProfile, User
from .repository import StudentProfileRepository, UserRepository

logger = logging.getLogger(__name__)

# API field -> stored field for profile edits
_EDITABLE_USER_FIELDS = (
    "username",
    "email",
    "avatar",
    "fullName",
    "phone",
    "dateOfBirth",
    "address",
    "emergencyContact",
    "facebookName",
    "note",
)


def public_view(user: User) -> dict:
    """User as JSON without the password hash."""
    data = dump(user)
    data.pop("passwordHash", None)
    return data


def _emergency_contact(value: Any) -> Optional[EmergencyContact]:
    if not value:
        return None
    if not isinstance(value, dict):
        raise ValidationError("Liên hệ khẩn cấp không hợp lệ")
    return EmergencyContact(
        name=str(value.get("name", "")),
        phone=str(value.get("phone", "")),
        relationship=str(value.get("relationship", "")),
    )


class AuthService:
    """Use case: login and the `auth-token` JWT."""

    def __init__(self, users: UserRepository, *, secret: str, token_days: int = AUTH_TOKEN_DAYS):
        self._users = users
        self._secret = secret
        self._token_days = int(token_days)

    @property
    def token_max_age(self) -> int:
        return self._token_days * 24 * 60 * 60

    def authenticate(self, username: str, password: str) -> User:
        if not username or not password:
            raise ValidationError("Tên tài khoản và mật khẩu là bắt buộc")

        user = self._users.get_by_username(username)
        if not user:
            raise AuthenticationError("Tên tài khoản hoặc mật khẩu không đúng")

        if not user.password_hash:
            logger.error("User %s found but has no password field (id=%s)", username, user.id)
            raise AuthenticationError("Tài khoản chưa được thiết lập mật khẩu. Vui lòng liên hệ quản trị viên.")

        try:
            ok = check_password_hash(user.password_hash, password)
        except (ValueError, TypeError):
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.info("Password mismatch for user: %s", username)
            raise AuthenticationError("Tên tài khoản hoặc mật khẩu không đúng")
        return user

    def issue_token(self, user: User, *, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {
            "userId": str(user.id),
            "username": user.username,
            "role": user.role.value,
            "fullName": user.full_name,
            "exp": now + timedelta(days=self._token_days),
        }
        return jwt.encode(payload, self._secret, algorithm="HS256")

    def decode_token(self, token: str) -> dict:
        try:
            return jwt.decode(token, self._secret, algorithms=["HS256"])
        except jwt.InvalidTokenError as e:
            # ExpiredSignatureError is a subclass
            raise AuthenticationError("Invalid or expired token") from e

    def current_user(self, token: Optional[str]) -> User:
        if not token:
            raise AuthenticationError("Not authenticated")

        payload = self.decode_token(token)
        user_id = payload.get("userId")
        if not user_id or not ObjectId.is_valid(str(user_id)):
            raise AuthenticationError("Invalid token")

        user = self._users.get_by_id(ObjectId(str(user_id)))
        if not user:
            raise AuthenticationError("User not found")
        return user


class UserService:
    """Use case: manage students (teacher) and the default teacher account."""

    def __init__(
        self,
        users: UserRepository,
        profiles: StudentProfileRepository,
        enrollments: EnrollmentRepository,
    ):
        self._users = users
        self._profiles = profiles
        self._enrollments = enrollments

    def _get_student(self, student_id: ObjectId) -> User:
        user = self._users.get_by_id(student_id)
        if not user or user.role != Role.STUDENT:
            raise NotFoundError("Student not found")
        return user

    def _with_profile(self, user: User) -> dict:
        view = public_view(user)
        profile = self._profiles.get_for_user(user.id)
        view["grade"] = profile.grade if profile else None
        view["group"] = profile.group if profile else None
        return view

    def list_students(self) -> List[dict]:
        out = []
        for user in self._users.list_by_role(Role.STUDENT):
            view = self._with_profile(user)
            view["enrollmentCount"] = self._enrollments.count_for_student(user.id)
            out.append(view)
        return out

    def get_student(self, student_id: Any) -> dict:
        return self._with_profile(self._get_student(require_object_id(student_id, "studentId")))

    def create_student(self, data: Dict[str, Any]) -> dict:
        if not data.get("username") or not data.get("password") or not data.get("fullName") or not data.get("phone"):
            raise ValidationError("Missing required fields")

        username = require_non_empty(data["username"], "Tên tài khoản")
        if self._users.get_by_username(username):
            raise ValidationError("Tên tài khoản đã được sử dụng")

        new_user = NewUser(
            username=username,
            password_hash=generate_password_hash(str(data["password"])),
            role=Role.STUDENT,
            full_name=str(data["fullName"]).strip(),
            phone=str(data["phone"]).strip(),
            email=data.get("email") or None,
            avatar=data.get("avatar") or DEFAULT_AVATAR,
            date_of_birth=data.get("dateOfBirth") or None,
            address=data.get("address") or None,
            emergency_contact=_emergency_contact(data.get("emergencyContact")),
            student_number=self._users.next_student_number(),
            facebook_name=data.get("facebookName") or None,
            note=data.get("note") or None,
        )
        user_id = self._users.create_user(new_user)

        self._profiles.create(
            StudentProfile(
                user_id=user_id,
                status=ProfileStatus.PENDING,
                date_of_birth=parse_datetime(new_user.date_of_birth, "dateOfBirth") if new_user.date_of_birth else None,
            )
        )

        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("Student not found")
        if not user.password_hash:
            logger.error("User created but password was not saved (id=%s, username=%s)", user_id, username)
        return public_view(user)

    def update_student(self, student_id: Any, data: Dict[str, Any]) -> dict:
        sid = require_object_id(student_id, "studentId")
        existing = self._get_student(sid)

        username = data.get("username")
        if username and username != existing.username and self._users.get_by_username(username):
            raise ValidationError("Tên tài khoản đã được sử dụng")

        changes = {k: data[k] for k in _EDITABLE_USER_FIELDS if k in data}
        if "emergencyContact" in changes:
            contact = _emergency_contact(changes["emergencyContact"])
            changes["emergencyContact"] = dump(contact) if contact else None
        if data.get("password"):
            changes["password"] = generate_password_hash(str(data["password"]))

        if not self._users.update_user(sid, changes):
            raise NotFoundError("Student not found")
        return public_view(self._get_student(sid))

    def update_profile(self, student_id: Any, *, grade: Any = None, group: Any = None, fields: Optional[set] = None) -> dict:
        """Patch grade/group; `fields` lists which of the two were provided."""

        sid = require_object_id(student_id, "studentId")
        self._get_student(sid)

        provided = fields if fields is not None else {"grade", "group"}
        changes: Dict[str, Any] = {}
        if "grade" in provided:
            changes["grade"] = grade
        if "group" in provided:
            changes["group"] = group
        self._profiles.upsert(sid, changes)

        profile = self._profiles.get_for_user(sid)
        return {
            "grade": profile.grade if profile else None,
            "group": profile.group if profile else None,
        }

    def batch_update(self, items: Any) -> int:
        """Cập nhật hàng loạt `studentNumber` / `note`; bỏ qua user không phải học sinh."""

        if not isinstance(items, list) or not items:
            raise ValidationError("Invalid data format")

        updated = 0
        for item in items:
            if not isinstance(item, dict):
                raise ValidationError("Invalid data format")
            sid = require_object_id(item.get("studentId"), "studentId")
            user = self._users.get_by_id(sid)
            if not user or user.role != Role.STUDENT:
                continue
            changes = {k: item[k] for k in ("studentNumber", "note") if k in item}
            if self._users.update_user(sid, changes):
                updated += 1
        logger.info("Batch updated %d/%d students", updated, len(items))
        return updated

    def delete_student(self, student_id: Any) -> None:
        if not self._users.delete_user(require_object_id(student_id, "studentId"), role=Role.STUDENT):
            raise NotFoundError("Student not found")

    def ensure_default_teacher(self, *, username: str, password: str, full_name: str, phone: str) -> Optional[ObjectId]:
        """Create the teacher account unless one already exists. Returns the new id or None."""

        if self._users.get_by_username(username) or self._users.exists_with_role(Role.TEACHER):
            return None
        return self._users.create_user(
            NewUser(
                username=username,
                password_hash=generate_password_hash(password),
                role=Role.TEACHER,
                full_name=full_name,
                phone=phone,
                avatar=DEFAULT_AVATAR,
            )
        )
