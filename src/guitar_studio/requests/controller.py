from __future__ import annotations

from flask import Flask, request

from ..common.serialization import dump
from ..core.enums import Role
from ..web.auth import current_user, login_required, teacher_required
from ..web.responses import api_errors, json_body, json_ok


def register(app: Flask, container) -> None:
    service = container.request_service

    # -------- Absences --------
    @app.route("/api/absences", methods=["GET"], endpoint="api_absences")
    @api_errors("Failed to fetch absence requests")
    @login_required
    def list_absences():
        absences = service.list_absences(
            student_id=request.args.get("studentId"),
            enrollment_id=request.args.get("enrollmentId"),
            class_id=request.args.get("classId"),
            status=request.args.get("status"),
        )
        return json_ok(absences)

    @app.route("/api/absences", methods=["POST"], endpoint="api_create_absence")
    @api_errors("Failed to create absence request")
    @login_required
    def create_absence():
        body = json_body()
        user = current_user()
        absence = service.create_absence(
            student_id=body.get("studentId"),
            enrollment_id=body.get("enrollmentId"),
            session_date=body.get("sessionDate"),
            reason=body.get("reason") or "",
            class_id=body.get("classId"),
            marked_by_teacher=body.get("markedByTeacher") is True and user.role == Role.TEACHER,
        )
        return json_ok(absence, 201)

    @app.route("/api/absences/<request_id>/approve", methods=["POST"], endpoint="api_approve_absence")
    @api_errors("Failed to approve absence request")
    @teacher_required
    def approve_absence(request_id: str):
        user = current_user()
        return json_ok(service.approve_absence(current_role=user.role, teacher_id=user.id, request_id=request_id))

    @app.route("/api/absences/<request_id>/reject", methods=["POST"], endpoint="api_reject_absence")
    @api_errors("Failed to reject absence request")
    @teacher_required
    def reject_absence(request_id: str):
        user = current_user()
        return json_ok(service.reject_absence(current_role=user.role, teacher_id=user.id, request_id=request_id))

    # -------- Makeups --------
    @app.route("/api/makeups", methods=["GET"], endpoint="api_makeups")
    @api_errors("Failed to fetch makeup requests")
    @login_required
    def list_makeups():
        makeups = service.list_makeups(
            student_id=request.args.get("studentId"),
            enrollment_id=request.args.get("enrollmentId"),
            status=request.args.get("status"),
        )
        return json_ok(makeups)

    @app.route("/api/makeups", methods=["POST"], endpoint="api_create_makeup")
    @api_errors("Failed to create makeup request")
    @login_required
    def create_makeup():
        body = json_body()
        makeup = service.create_makeup(
            student_id=body.get("studentId"),
            enrollment_id=body.get("enrollmentId"),
            original_session_date=body.get("originalSessionDate"),
            new_session_date=body.get("newSessionDate"),
            reason=body.get("reason") or "",
            original_class_id=body.get("originalClassId"),
            new_class_id=body.get("newClassId"),
        )
        return json_ok(makeup, 201)

    @app.route("/api/makeups/available", methods=["GET"], endpoint="api_available_makeups")
    @api_errors("Failed to fetch available makeup classes")
    @login_required
    def available_makeups():
        rows = []
        for studio_class, next_at in service.available_makeup_classes(request.args.get("enrollmentId")):
            rows.append({**dump(studio_class), "nextSessionAt": dump(next_at)})
        return json_ok(rows)

    @app.route("/api/makeups/<request_id>/approve", methods=["POST"], endpoint="api_approve_makeup")
    @api_errors("Failed to approve makeup request")
    @teacher_required
    def approve_makeup(request_id: str):
        user = current_user()
        return json_ok(service.approve_makeup(current_role=user.role, teacher_id=user.id, request_id=request_id))

    @app.route("/api/makeups/<request_id>/reject", methods=["POST"], endpoint="api_reject_makeup")
    @api_errors("Failed to reject makeup request")
    @teacher_required
    def reject_makeup(request_id: str):
        user = current_user()
        return json_ok(service.reject_makeup(current_role=user.role, teacher_id=user.id, request_id=request_id))
