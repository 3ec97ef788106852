from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple

from bson import ObjectId
from pymongo import DESCENDING

from ..core.enums import ProfileStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mongo_base import prune_none, stamp_created, stamp_updated
from .model import EmergencyContact, NewUser, StudentProfile, User
from .repository import StudentProfileRepository, UserRepository


def _to_user(doc: dict) -> User:
    contact = doc.get("emergencyContact")
    return User(
        id=doc["_id"],
        username=doc.get("username", ""),
        password_hash=doc.get("password") or "",
        role=Role(doc.get("role", Role.STUDENT.value)),
        full_name=doc.get("fullName", ""),
        phone=doc.get("phone", ""),
        email=doc.get("email"),
        avatar=doc.get("avatar"),
        date_of_birth=doc.get("dateOfBirth"),
        address=doc.get("address"),
        emergency_contact=EmergencyContact(
            name=contact.get("name", ""),
            phone=contact.get("phone", ""),
            relationship=contact.get("relationship", ""),
        )
        if contact
        else None,
        student_number=doc.get("studentNumber"),
        facebook_name=doc.get("facebookName"),
        note=doc.get("note"),
        created_at=doc.get("createdAt"),
        updated_at=doc.get("updatedAt"),
    )


class MongoUserRepository(UserRepository):
    def __init__(self, conn: DatabaseConnection):
        self._conn = conn

    @property
    def _users(self):
        return self._conn.db()["users"]

    def get_by_id(self, user_id: ObjectId) -> Optional[User]:
        doc = self._users.find_one({"_id": user_id})
        return _to_user(doc) if doc else None

    def get_by_username(self, username: str) -> Optional[User]:
        doc = self._users.find_one({"username": username})
        return _to_user(doc) if doc else None

    def list_by_role(self, role: Role) -> Sequence[User]:
        return [_to_user(d) for d in self._users.find({"role": role.value})]

    def exists_with_role(self, role: Role) -> bool:
        return self._users.find_one({"role": role.value}) is not None

    def next_student_number(self) -> int:
        last = self._users.find_one(
            {"role": Role.STUDENT.value, "studentNumber": {"$exists": True}},
            sort=[("studentNumber", DESCENDING)],
        )
        return int(last["studentNumber"]) + 1 if last and last.get("studentNumber") else 1

    def create_user(self, new_user: NewUser) -> ObjectId:
        contact = new_user.emergency_contact
        doc = prune_none(
            {
                "username": new_user.username,
                "password": new_user.password_hash,
                "role": new_user.role.value,
                "fullName": new_user.full_name,
                "phone": new_user.phone,
                "email": new_user.email,
                "avatar": new_user.avatar,
                "dateOfBirth": new_user.date_of_birth,
                "address": new_user.address,
                "emergencyContact": {
                    "name": contact.name,
                    "phone": contact.phone,
                    "relationship": contact.relationship,
                }
                if contact
                else None,
                "studentNumber": new_user.student_number,
                "facebookName": new_user.facebook_name,
                "note": new_user.note,
            }
        )
        result = self._users.insert_one(stamp_created(doc))
        return result.inserted_id

    def update_user(self, user_id: ObjectId, changes: Dict[str, Any]) -> bool:
        result = self._users.update_one({"_id": user_id}, {"$set": stamp_updated(dict(changes))})
        return result.matched_count > 0

    def delete_user(self, user_id: ObjectId, *, role: Optional[Role] = None) -> bool:
        query: Dict[str, Any] = {"_id": user_id}
        if role is not None:
            query["role"] = role.value
        return self._users.delete_one(query).deleted_count > 0

    def backfill_avatar(self, avatar: str) -> Tuple[int, int]:
        result = self._users.update_many({"avatar": {"$exists": False}}, {"$set": {"avatar": avatar}})
        return result.matched_count, result.modified_count


def _to_profile(doc: dict) -> StudentProfile:
    return StudentProfile(
        user_id=doc["userId"],
        grade=doc.get("grade"),
        group=doc.get("group"),
        status=ProfileStatus(doc.get("status") or ProfileStatus.PENDING.value),
        notes=doc.get("notes"),
        date_of_birth=doc.get("dateOfBirth"),
        competition_score=int(doc.get("competitionScore") or 0),
    )


class MongoStudentProfileRepository(StudentProfileRepository):
    def __init__(self, conn: DatabaseConnection):
        self._conn = conn

    @property
    def _profiles(self):
        return self._conn.db()["student_profiles"]

    def get_for_user(self, user_id: ObjectId) -> Optional[StudentProfile]:
        doc = self._profiles.find_one({"userId": user_id})
        return _to_profile(doc) if doc else None

    def create(self, profile: StudentProfile) -> None:
        doc = {
            "userId": profile.user_id,
            "grade": profile.grade,
            "group": profile.group,
            "competitionScore": profile.competition_score,
            "status": profile.status.value,
            "notes": profile.notes,
            "dateOfBirth": profile.date_of_birth,
        }
        self._profiles.insert_one(stamp_created(doc))

    def upsert(self, user_id: ObjectId, changes: Dict[str, Any]) -> None:
        self._profiles.update_one({"userId": user_id}, {"$set": stamp_updated(dict(changes))}, upsert=True)
