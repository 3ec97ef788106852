from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Sequence, Tuple

from bson import ObjectId

from ..core.enums import Role
from .model import NewUser, StudentProfile, User


class UserRepository(Protocol):
    """Giao diện repository cho User.

    Lưu ý (DIP): tầng service phụ thuộc vào interface này, không phụ thuộc trực tiếp DB cụ thể.
    """

    def get_by_id(self, user_id: ObjectId) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def list_by_role(self, role: Role) -> Sequence[User]:
        raise NotImplementedError

    def exists_with_role(self, role: Role) -> bool:
        raise NotImplementedError

    def next_student_number(self) -> int:
        raise NotImplementedError

    def create_user(self, new_user: NewUser) -> ObjectId:
        raise NotImplementedError

    def update_user(self, user_id: ObjectId, changes: Dict[str, Any]) -> bool:
        """changes uses stored (camelCase) field names."""

        raise NotImplementedError

    def delete_user(self, user_id: ObjectId, *, role: Optional[Role] = None) -> bool:
        raise NotImplementedError

    def backfill_avatar(self, avatar: str) -> Tuple[int, int]:
        """Set avatar on users lacking one; returns (matched, modified)."""

        raise NotImplementedError


class StudentProfileRepository(Protocol):
    def get_for_user(self, user_id: ObjectId) -> Optional[StudentProfile]:
        raise NotImplementedError

    def create(self, profile: StudentProfile) -> None:
        raise NotImplementedError

    def upsert(self, user_id: ObjectId, changes: Dict[str, Any]) -> None:
        raise NotImplementedError
