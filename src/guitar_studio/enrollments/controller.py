from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import now_local, parse_datetime
from ..web.auth import login_required, teacher_required
from ..web.responses import api_errors, json_body, json_ok
from .service import enrollment_view


def register(app: Flask, container) -> None:
    service = container.enrollment_service

    @app.route("/api/enrollments", methods=["GET"], endpoint="api_enrollments")
    @api_errors("Failed to fetch enrollments")
    @login_required
    def list_enrollments():
        enrollments = service.list_enrollments(
            student_id=request.args.get("studentId"),
            course_id=request.args.get("courseId"),
            status=request.args.get("status"),
        )
        return json_ok([enrollment_view(e) for e in enrollments])

    @app.route("/api/enrollments", methods=["POST"], endpoint="api_create_enrollment")
    @api_errors("Failed to create enrollment")
    @teacher_required
    def create_enrollment():
        body = json_body()
        enrollment = service.create_enrollment(
            student_id=body.get("studentId"),
            course_id=body.get("courseId"),
            frequency=body.get("frequency"),
            start_date=body.get("startDate"),
            payment_mode=body.get("paymentMode"),
            custom_weeks=body.get("customWeeks"),
            cycle=body.get("cycle"),
            schedule=body.get("schedule"),
        )
        return json_ok(enrollment_view(enrollment), 201)

    @app.route("/api/enrollments/<enrollment_id>", methods=["GET"], endpoint="api_enrollment")
    @api_errors("Failed to fetch enrollment")
    @login_required
    def get_enrollment(enrollment_id: str):
        return json_ok(enrollment_view(service.get_enrollment(enrollment_id)))

    @app.route("/api/enrollments/<enrollment_id>", methods=["PUT"], endpoint="api_update_enrollment")
    @api_errors("Failed to update enrollment")
    @teacher_required
    def update_enrollment(enrollment_id: str):
        return json_ok(enrollment_view(service.update_enrollment(enrollment_id, json_body())))

    @app.route("/api/enrollments/<enrollment_id>", methods=["PATCH"], endpoint="api_defer_enrollment")
    @api_errors("Failed to defer enrollment")
    @login_required
    def defer_enrollment(enrollment_id: str):
        enrollment = service.defer_enrollment(enrollment_id, deferral_weeks=json_body().get("deferralWeeks"))
        return json_ok(enrollment_view(enrollment))

    @app.route("/api/enrollments/<enrollment_id>/renew", methods=["POST"], endpoint="api_renew_enrollment")
    @api_errors("Failed to renew enrollment")
    @teacher_required
    def renew_enrollment(enrollment_id: str):
        return json_ok(enrollment_view(service.renew_enrollment(enrollment_id)), 201)

    @app.route("/api/enrollments/<enrollment_id>/bonus", methods=["POST"], endpoint="api_enrollment_bonus")
    @api_errors("Failed to add bonus")
    @teacher_required
    def add_bonus(enrollment_id: str):
        body = json_body()
        enrollment = service.add_bonus(
            enrollment_id,
            bonus_sessions=body.get("bonusSessions"),
            bonus_weeks=body.get("bonusWeeks"),
        )
        return json_ok(enrollment_view(enrollment))

    @app.route("/api/enrollments/<enrollment_id>/summary", methods=["GET"], endpoint="api_enrollment_summary")
    @api_errors("Failed to fetch attendance summary")
    @login_required
    def enrollment_summary(enrollment_id: str):
        enrollment = service.get_enrollment(enrollment_id)
        on_date = request.args.get("date")
        on_date = parse_datetime(on_date, "date") if on_date else now_local()
        summary = container.attendance_service.summary_for_enrollment(enrollment_id)
        data = {"summary": summary, "sessionLabel": service.session_label(enrollment, on_date)}
        return json_ok(data)