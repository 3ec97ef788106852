from __future__ import annotations

import pytest
from bson import ObjectId
from werkzeug.security import generate_password_hash

from guitar_studio.container import wire_services
from guitar_studio.core.constants import AUTH_COOKIE_NAME
from guitar_studio.core.enums import Role
from guitar_studio.main import create_app
from guitar_studio.users.model import User


@pytest.fixture
def app(
    monkeypatch,
    users_repo,
    profiles_repo,
    courses_repo,
    classes_repo,
    enrollments_repo,
    attendance_repo,
    requests_repo,
    documents_repo,
    products_repo,
    documents_dir,
):
    monkeypatch.setenv("APP_ENV", "testing")
    for password, role, username in (("thaybien987", Role.TEACHER, "giaovien"), ("hocsinh", Role.STUDENT, "hocsinh")):
        users_repo.add(
            User(
                id=ObjectId(),
                username=username,
                password_hash=generate_password_hash(password),
                role=role,
                full_name=username.title(),
            )
        )

    container = wire_services(
        conn=None,
        users_repo=users_repo,
        profiles_repo=profiles_repo,
        courses_repo=courses_repo,
        classes_repo=classes_repo,
        enrollments_repo=enrollments_repo,
        attendance_repo=attendance_repo,
        requests_repo=requests_repo,
        documents_repo=documents_repo,
        products_repo=products_repo,
        jwt_secret="route-test-secret",
        documents_dir=documents_dir,
    )
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, username="giaovien", password="thaybien987"):
    return client.post("/api/auth/login", json={"username": username, "password": password})


def test_login_sets_cookie_and_me_works(client):
    resp = _login(client)

    assert resp.status_code == 200
    assert resp.get_json()["user"]["username"] == "giaovien"
    assert "passwordHash" not in resp.get_json()["user"]
    assert AUTH_COOKIE_NAME in resp.headers.get("Set-Cookie", "")

    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.get_json()["user"]["role"] == "teacher"


def test_bad_login(client):
    resp = _login(client, password="sai")
    assert resp.status_code == 401
    assert "error" in resp.get_json()


def test_me_without_cookie(client):
    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Not authenticated"}


def test_logout_clears_cookie(client):
    _login(client)
    resp = client.post("/api/auth/logout")

    assert resp.get_json() == {"message": "Logged out successfully"}
    assert client.get("/api/auth/me").status_code == 401


def test_courses_are_public_but_creation_is_for_teachers(client, courses_repo):
    assert client.get("/api/courses").get_json() == []

    _login(client, "hocsinh", "hocsinh")
    body = {"name": "Lớp nhóm", "type": "group", "format": "online", "maxStudents": 7}
    assert client.post("/api/courses", json=body).status_code == 403

    _login(client)
    created = client.post("/api/courses", json=body)
    assert created.status_code == 201
    assert created.get_json()["maxStudents"] == 7


def test_class_flow_and_toasts(client):
    _login(client)
    client.get("/api/toasts")

    created = client.post(
        "/api/classes",
        json={"name": "Lớp 8A", "grade": 8, "sessions": [{"dayOfWeek": 1, "startTime": "18:00", "endTime": "19:30"}]},
    )
    assert created.status_code == 201
    class_id = created.get_json()["_id"]

    bad = client.post("/api/classes", json={"name": "Lớp 8B", "grade": 8, "sessions": []})
    assert bad.status_code == 400

    cancelled = client.post(f"/api/classes/{class_id}/cancel", json={"date": "2026-03-09"})
    assert cancelled.status_code == 200
    assert cancelled.get_json()["cancelledDates"][0].startswith("2026-03-09")

    toasts = client.get("/api/toasts").get_json()
    assert {"message": "Đã huỷ lớp học", "type": "success"} in toasts
    assert client.get("/api/toasts").get_json() == []


def test_unknown_ids_are_404(client):
    _login(client)
    assert client.get(f"/api/classes/{ObjectId()}").status_code == 404
    assert client.get("/api/products/42").status_code == 404


def test_bare_domain_redirects_to_www(client):
    resp = client.get("/api/courses?page=2", base_url="http://phucnguyenguitar.com")
    assert resp.status_code == 301
    assert resp.headers["Location"] == "https://www.phucnguyenguitar.com/api/courses?page=2"

    assert client.get("/api/courses", base_url="http://www.phucnguyenguitar.com").status_code == 200


def test_batch_update_students_route(client, users_repo):
    student = users_repo.get_by_username("hocsinh")

    _login(client, "hocsinh", "hocsinh")
    assert client.post("/api/students/batch-update", json=[{"studentId": str(student.id)}]).status_code == 403

    _login(client)
    assert client.post("/api/students/batch-update", json=[]).get_json() == {"error": "Invalid data format"}
    assert client.post("/api/students/batch-update", json={"studentId": str(student.id)}).status_code == 400

    resp = client.post("/api/students/batch-update", json=[{"studentId": str(student.id), "studentNumber": 7, "note": "Giỏi"}])
    assert resp.get_json() == {"message": "Students updated successfully"}
    assert users_repo.get_by_id(student.id).student_number == 7


def test_token_of_deleted_user_is_unauthenticated(client, users_repo):
    _login(client, "hocsinh", "hocsinh")
    users_repo.delete_user(users_repo.get_by_username("hocsinh").id)

    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "User not found"}
