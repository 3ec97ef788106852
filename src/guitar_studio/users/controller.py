from __future__ import annotations

import logging

from flask import Flask, current_app, jsonify, make_response, request

from ..core.constants import AUTH_COOKIE_NAME
from ..notifications.toast import show_info, show_success
from ..web.auth import current_user, teacher_required
from ..web.responses import api_errors, json_body, json_ok
from .service import public_view

logger = logging.getLogger(__name__)


def register(app: Flask, container) -> None:
    # -------- Auth --------
    @app.route("/api/auth/login", methods=["POST"], endpoint="api_login")
    @api_errors("Login failed")
    def login():
        body = json_body()
        auth = container.auth_service
        user = auth.authenticate(body.get("username") or "", body.get("password") or "")
        token = auth.issue_token(user)

        show_success(f"Xin chào {user.full_name}")
        resp = make_response(jsonify({"user": public_view(user), "token": token}))
        resp.set_cookie(
            AUTH_COOKIE_NAME,
            token,
            max_age=auth.token_max_age,
            httponly=True,
            secure=bool(current_app.config.get("AUTH_COOKIE_SECURE", False)),
            samesite="Lax",
            path="/",
        )
        logger.info("User logged in: %s", user.username)
        return resp

    @app.route("/api/auth/logout", methods=["POST"], endpoint="api_logout")
    @api_errors("Failed to logout")
    def logout():
        resp = make_response(jsonify({"message": "Logged out successfully"}))
        resp.delete_cookie(AUTH_COOKIE_NAME, path="/")
        show_info("Đã đăng xuất")
        return resp

    @app.route("/api/auth/me", methods=["GET"], endpoint="api_me")
    @api_errors("Failed to get user")
    def me():
        return jsonify({"user": public_view(current_user())})

    # -------- Students (teacher) --------
    @app.route("/api/students", methods=["GET"], endpoint="api_students")
    @api_errors("Failed to fetch students")
    @teacher_required
    def list_students():
        return json_ok(container.user_service.list_students())

    @app.route("/api/students", methods=["POST"], endpoint="api_create_student")
    @api_errors("Failed to create student")
    @teacher_required
    def create_student():
        return json_ok(container.user_service.create_student(json_body()), 201)

    @app.route("/api/students/batch-update", methods=["POST"], endpoint="api_batch_update_students")
    @api_errors("Failed to update students")
    @teacher_required
    def batch_update_students():
        container.user_service.batch_update(request.get_json(silent=True))
        return jsonify({"message": "Students updated successfully"})

    @app.route("/api/students/<student_id>", methods=["GET"], endpoint="api_student")
    @api_errors("Failed to fetch student")
    @teacher_required
    def get_student(student_id: str):
        return json_ok(container.user_service.get_student(student_id))

    @app.route("/api/students/<student_id>", methods=["PUT"], endpoint="api_update_student")
    @api_errors("Failed to update student")
    @teacher_required
    def update_student(student_id: str):
        return json_ok(container.user_service.update_student(student_id, json_body()))

    @app.route("/api/students/<student_id>", methods=["PATCH"], endpoint="api_patch_student_profile")
    @api_errors("Failed to update student profile")
    @teacher_required
    def patch_student_profile(student_id: str):
        body = json_body()
        profile = container.user_service.update_profile(
            student_id,
            grade=body.get("grade"),
            group=body.get("group"),
            fields={k for k in ("grade", "group") if k in body},
        )
        return json_ok(profile)

    @app.route("/api/students/<student_id>", methods=["DELETE"], endpoint="api_delete_student")
    @api_errors("Failed to delete student")
    @teacher_required
    def delete_student(student_id: str):
        container.user_service.delete_student(student_id)
        return jsonify({"message": "Student deleted successfully"})
