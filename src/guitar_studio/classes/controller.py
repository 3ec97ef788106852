from __future__ import annotations

from flask import Flask, jsonify, request

from ..notifications.toast import show_success
from ..web.auth import current_user, login_required, teacher_required
from ..web.responses import api_errors, json_body, json_ok


def register(app: Flask, container) -> None:
    @app.route("/api/classes", methods=["GET"], endpoint="api_classes")
    @api_errors("Failed to fetch classes")
    @login_required
    def list_classes():
        classes = container.class_service.list_classes(
            grade=request.args.get("grade"),
            is_active=request.args.get("isActive"),
        )
        return json_ok(classes)

    @app.route("/api/classes", methods=["POST"], endpoint="api_create_class")
    @api_errors("Failed to create class")
    @teacher_required
    def create_class():
        body = json_body()
        created = container.class_service.create_class(
            name=body.get("name"),
            grade=body.get("grade"),
            sessions=body.get("sessions"),
            max_students=body.get("maxStudents"),
        )
        return json_ok(created, 201)

    @app.route("/api/classes/<class_id>", methods=["GET"], endpoint="api_class")
    @api_errors("Failed to fetch class")
    @login_required
    def get_class(class_id: str):
        return json_ok(container.class_service.get_class(class_id))

    @app.route("/api/classes/<class_id>", methods=["PUT"], endpoint="api_update_class")
    @api_errors("Failed to update class")
    @teacher_required
    def update_class(class_id: str):
        return json_ok(container.class_service.update_class(class_id, json_body()))

    @app.route("/api/classes/<class_id>", methods=["DELETE"], endpoint="api_delete_class")
    @api_errors("Failed to delete class")
    @teacher_required
    def delete_class(class_id: str):
        container.class_service.delete_class(class_id)
        return jsonify({"message": "Class deleted successfully"})

    @app.route("/api/classes/<class_id>/students", methods=["POST"], endpoint="api_class_add_student")
    @api_errors("Failed to add student to class")
    @teacher_required
    def add_student(class_id: str):
        return json_ok(container.class_service.add_student(class_id, json_body().get("studentId")))

    @app.route("/api/classes/<class_id>/students", methods=["DELETE"], endpoint="api_class_remove_student")
    @api_errors("Failed to remove student from class")
    @teacher_required
    def remove_student(class_id: str):
        return json_ok(container.class_service.remove_student(class_id, request.args.get("studentId")))

    @app.route("/api/classes/<class_id>/cancel", methods=["POST"], endpoint="api_cancel_class")
    @api_errors("Failed to cancel class")
    @teacher_required
    def cancel_class(class_id: str):
        updated = container.class_service.cancel_date(
            class_id,
            json_body().get("date"),
            teacher_id=current_user().id,
        )
        show_success("Đã huỷ lớp học")
        return json_ok(updated)
