from __future__ import annotations

from flask import Flask

from ..web.auth import teacher_required
from ..web.responses import api_errors, json_body, json_ok


def register(app: Flask, container) -> None:
    @app.route("/api/courses", methods=["GET"], endpoint="api_courses")
    @api_errors("Failed to fetch courses")
    def list_courses():
        return json_ok(container.course_service.list_courses())

    @app.route("/api/courses", methods=["POST"], endpoint="api_create_course")
    @api_errors("Failed to create course")
    @teacher_required
    def create_course():
        body = json_body()
        course = container.course_service.create_course(
            name=body.get("name") or "",
            type=body.get("type") or "",
            format=body.get("format") or "",
            max_students=body.get("maxStudents"),
            total_sessions=body.get("totalSessions"),
        )
        return json_ok(course, 201)
