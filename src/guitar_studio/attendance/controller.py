from __future__ import annotations

from flask import Flask, jsonify, request

from ..web.auth import current_user, login_required, teacher_required
from ..web.responses import api_errors, json_body, json_ok


def register(app: Flask, container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance", methods=["GET"], endpoint="api_attendance")
    @api_errors("Failed to fetch attendance")
    @login_required
    def list_attendance():
        records = service.list_attendance(
            student_id=request.args.get("studentId"),
            enrollment_id=request.args.get("enrollmentId"),
            class_id=request.args.get("classId"),
            session_date=request.args.get("sessionDate"),
        )
        return json_ok(records)

    @app.route("/api/attendance", methods=["POST"], endpoint="api_mark_attendance")
    @api_errors("Failed to create attendance")
    @teacher_required
    def mark_attendance():
        body = json_body()
        record = service.mark_attendance(
            student_id=body.get("studentId"),
            session_date=body.get("sessionDate"),
            status=body.get("status"),
            marked_by=body.get("markedBy") or current_user().id,
            enrollment_id=body.get("enrollmentId"),
            class_id=body.get("classId"),
            notes=body.get("notes"),
        )
        return json_ok(record, 201)

    @app.route("/api/attendance/<attendance_id>", methods=["GET"], endpoint="api_attendance_record")
    @api_errors("Failed to fetch attendance")
    @login_required
    def get_attendance(attendance_id: str):
        return json_ok(service.get_attendance(attendance_id))

    @app.route("/api/attendance/<attendance_id>", methods=["PUT"], endpoint="api_update_attendance")
    @api_errors("Failed to update attendance")
    @teacher_required
    def update_attendance(attendance_id: str):
        return json_ok(service.update_attendance(attendance_id, json_body()))

    @app.route("/api/attendance/<attendance_id>", methods=["DELETE"], endpoint="api_delete_attendance")
    @api_errors("Failed to delete attendance")
    @teacher_required
    def delete_attendance(attendance_id: str):
        service.delete_attendance(attendance_id)
        return jsonify({"success": True, "message": "Attendance deleted"})
