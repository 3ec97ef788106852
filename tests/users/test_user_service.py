from __future__ import annotations

import pytest
from bson import ObjectId
from werkzeug.security import check_password_hash

from guitar_studio.core.constants import DEFAULT_AVATAR
from guitar_studio.core.enums import ProfileStatus, Role
from guitar_studio.core.exceptions import NotFoundError, ValidationError
from guitar_studio.users.service import UserService


@pytest.fixture
def service(users_repo, profiles_repo, enrollments_repo):
    return UserService(users_repo, profiles_repo, enrollments_repo)


def _new_student(service, username="hocsinh1"):
    return service.create_student(
        {"username": username, "password": "matkhau", "fullName": "Nguyễn Văn A", "phone": "0901234567"}
    )


def test_create_student_defaults(service, users_repo, profiles_repo):
    created = _new_student(service)

    assert "passwordHash" not in created
    assert created["avatar"] == DEFAULT_AVATAR
    assert created["studentNumber"] == 1
    assert created["role"] == "student"

    user = users_repo.get_by_username("hocsinh1")
    assert check_password_hash(user.password_hash, "matkhau")
    assert profiles_repo.get_for_user(user.id).status == ProfileStatus.PENDING


def test_student_numbers_increment(service):
    _new_student(service, "a")
    assert _new_student(service, "b")["studentNumber"] == 2


def test_duplicate_username(service):
    _new_student(service)
    with pytest.raises(ValidationError, match="đã được sử dụng"):
        _new_student(service)


def test_missing_fields(service):
    with pytest.raises(ValidationError, match="Missing required fields"):
        service.create_student({"username": "x", "password": "y"})


def test_update_student_rehashes_password(service, users_repo):
    created = _new_student(service)
    updated = service.update_student(created["_id"], {"fullName": "Nguyễn Văn B", "password": "moi", "role": "teacher"})

    assert updated["fullName"] == "Nguyễn Văn B"
    assert updated["role"] == "student"
    assert check_password_hash(users_repo.get_by_username("hocsinh1").password_hash, "moi")


def test_list_students_includes_profile_and_count(service, profiles_repo, enrollments_repo, enrollment_factory):
    created = _new_student(service)
    sid = ObjectId(created["_id"])
    profiles_repo.upsert(sid, {"grade": 8, "group": "Lớp 8A"})
    enrollments_repo.add(enrollment_factory(student_id=sid))

    [row] = service.list_students()
    assert (row["grade"], row["group"], row["enrollmentCount"]) == (8, "Lớp 8A", 1)


def test_update_profile_only_given_fields(service, profiles_repo):
    created = _new_student(service)
    sid = ObjectId(created["_id"])
    profiles_repo.upsert(sid, {"grade": 8, "group": "Lớp 8A"})

    assert service.update_profile(sid, grade=9, fields={"grade"}) == {"grade": 9, "group": "Lớp 8A"}


def test_delete_only_students(service, users_repo):
    teacher_id = service.ensure_default_teacher(username="giaovien", password="x", full_name="Thầy", phone="0")
    with pytest.raises(NotFoundError):
        service.delete_student(teacher_id)

    created = _new_student(service)
    service.delete_student(created["_id"])
    assert users_repo.get_by_username("hocsinh1") is None


def test_default_teacher_created_once(service, users_repo):
    first = service.ensure_default_teacher(username="giaovien", password="thaybien987", full_name="Thầy Biên", phone="0")
    second = service.ensure_default_teacher(username="giaovien2", password="x", full_name="Khác", phone="0")

    assert first is not None
    assert second is None
    assert users_repo.get_by_id(first).role == Role.TEACHER


def test_batch_update_sets_number_and_note_on_students_only(service, users_repo):
    first = ObjectId(_new_student(service, "a")["_id"])
    second = ObjectId(_new_student(service, "b")["_id"])
    teacher_id = service.ensure_default_teacher(username="giaovien", password="x", full_name="Thầy", phone="0")

    updated = service.batch_update(
        [
            {"studentId": str(first), "studentNumber": 10, "note": "Học tốt"},
            {"studentId": str(second), "note": "Cần luyện thêm"},
            {"studentId": str(teacher_id), "note": "bỏ qua"},
        ]
    )

    assert updated == 2
    assert (users_repo.get_by_id(first).student_number, users_repo.get_by_id(first).note) == (10, "Học tốt")
    assert users_repo.get_by_id(second).student_number == 2
    assert users_repo.get_by_id(second).note == "Cần luyện thêm"
    assert users_repo.get_by_id(teacher_id).note is None


@pytest.mark.parametrize("payload", [None, [], {"studentId": "x"}])
def test_batch_update_rejects_bad_payload(service, payload):
    with pytest.raises(ValidationError, match="Invalid data format"):
        service.batch_update(payload)
