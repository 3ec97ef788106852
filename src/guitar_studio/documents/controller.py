from __future__ import annotations

from flask import Flask, jsonify, request, send_file

from ..notifications.toast import show_success
from ..web.auth import current_user, login_required, teacher_required
from ..web.responses import api_errors, json_body, json_ok
from .service import PDF_MIMETYPE


def register(app: Flask, container) -> None:
    service = container.document_service

    @app.route("/api/documents", methods=["GET"], endpoint="api_documents")
    @api_errors("Failed to fetch documents")
    @login_required
    def list_documents():
        return json_ok(service.list_documents(current_user()))

    @app.route("/api/documents", methods=["POST"], endpoint="api_upload_document")
    @api_errors("Failed to create document")
    @teacher_required
    def upload_document():
        form = request.form
        document = service.upload_document(
            uploader_id=current_user().id,
            file=request.files.get("file"),
            name=form.get("name"),
            category=form.get("category"),
            classes=form.get("classes"),
            grade=form.get("grade"),
            note=form.get("note"),
        )
        show_success("Đã tải lên tài liệu")
        return json_ok(document, 201)

    @app.route("/api/documents/file", methods=["GET"], endpoint="api_document_file")
    @api_errors("Failed to serve document")
    @login_required
    def serve_document_file():
        path = service.resolve_file(current_user(), request.args.get("path"))
        resp = send_file(path, mimetype=PDF_MIMETYPE, max_age=0)
        resp.headers["Content-Disposition"] = "inline"
        resp.headers["Cache-Control"] = "private, no-cache, no-store, must-revalidate"
        resp.headers["Pragma"] = "no-cache"
        resp.headers["Expires"] = "0"
        resp.headers["X-Content-Type-Options"] = "nosniff"
        return resp

    @app.route("/api/documents/<document_id>", methods=["GET"], endpoint="api_document")
    @api_errors("Failed to fetch document")
    @login_required
    def get_document(document_id: str):
        return json_ok(service.get_document(document_id))

    @app.route("/api/documents/<document_id>", methods=["PUT"], endpoint="api_update_document")
    @api_errors("Failed to update document")
    @teacher_required
    def update_document(document_id: str):
        return json_ok(service.update_document(document_id, json_body()))

    @app.route("/api/documents/<document_id>", methods=["DELETE"], endpoint="api_delete_document")
    @api_errors("Failed to delete document")
    @teacher_required
    def delete_document(document_id: str):
        service.delete_document(document_id)
        return jsonify({"message": "Document deleted successfully"})
