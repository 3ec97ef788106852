from __future__ import annotations

from datetime import datetime

import pytest
from bson import ObjectId

from guitar_studio.classes.model import ClassSession
from guitar_studio.core.enums import AttendanceStatus, RequestStatus, Role
from guitar_studio.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from guitar_studio.requests.model import NewAbsenceRequest, NewMakeupRequest
from guitar_studio.requests.service import RequestService

NOW = datetime(2026, 3, 9, 8, 0)


@pytest.fixture
def service(requests_repo, attendance_repo, enrollments_repo, classes_repo):
    return RequestService(requests_repo, attendance_repo, enrollments_repo, classes_repo)


def _absence(service, **overrides):
    kw = dict(
        student_id=str(ObjectId()),
        enrollment_id=str(ObjectId()),
        session_date="2026-03-09T18:00:00",
        reason="Bận việc gia đình",
        now=NOW,
    )
    kw.update(overrides)
    return service.create_absence(**kw)


def test_absence_is_auto_approved_and_marks_excused(service, attendance_repo):
    absence = _absence(service)

    assert absence.status == RequestStatus.APPROVED
    record = attendance_repo.find_for_student_on(absence.student_id, datetime(2026, 3, 9))
    assert record is not None
    assert record.status == AttendanceStatus.EXCUSED
    assert record.marked_by == absence.student_id
    assert record.session_date == datetime(2026, 3, 9)


def test_absence_needs_six_hours_notice(service):
    with pytest.raises(ValidationError, match="at least 6 hours"):
        _absence(service, session_date="2026-03-09T13:59:00")

    assert _absence(service, session_date="2026-03-09T14:00:00").status == RequestStatus.APPROVED


def test_teacher_can_mark_absence_without_notice(service):
    absence = _absence(service, session_date="2026-03-09T08:30:00", marked_by_teacher=True)
    assert absence.status == RequestStatus.APPROVED


def test_absence_keeps_existing_attendance(service, attendance_repo):
    first = _absence(service)
    _absence(service, student_id=first.student_id, reason="Lý do khác")
    assert len(attendance_repo.list_filtered(student_id=first.student_id)) == 1


def test_absence_requires_reason(service):
    with pytest.raises(ValidationError, match="Missing required fields"):
        _absence(service, reason="")


def test_makeup_needs_one_day_notice(service):
    kw = dict(
        student_id=ObjectId(),
        enrollment_id=ObjectId(),
        original_session_date="2026-03-09T18:00:00",
        reason="Học bù",
        now=NOW,
    )
    with pytest.raises(ValidationError, match="at least 1 day"):
        service.create_makeup(new_session_date="2026-03-10T07:59:00", **kw)

    makeup = service.create_makeup(new_session_date="2026-03-10T08:00:00", **kw)
    assert makeup.status == RequestStatus.APPROVED


def test_makeup_into_full_or_missing_class(service, classes_repo, class_factory):
    full = classes_repo.add(class_factory(students=[ObjectId()], max_students=1))
    kw = dict(
        student_id=ObjectId(),
        enrollment_id=ObjectId(),
        original_session_date="2026-03-09T18:00:00",
        new_session_date="2026-03-16T18:00:00",
        reason="Học bù",
        now=NOW,
    )

    with pytest.raises(ValidationError, match="Class is full"):
        service.create_makeup(new_class_id=str(full.id), **kw)
    with pytest.raises(NotFoundError, match="New class not found"):
        service.create_makeup(new_class_id=str(ObjectId()), **kw)


def test_makeup_does_not_touch_roster(service, classes_repo, class_factory):
    target = classes_repo.add(class_factory(max_students=3))
    service.create_makeup(
        student_id=ObjectId(),
        enrollment_id=ObjectId(),
        original_session_date="2026-03-09T18:00:00",
        new_session_date="2026-03-16T18:00:00",
        new_class_id=target.id,
        reason="Học bù",
        now=NOW,
    )
    assert classes_repo.get_by_id(target.id).enrolled_students == ()


def test_available_makeup_classes_sorted_by_next_session(service, classes_repo, enrollments_repo, class_factory, enrollment_factory):
    e = enrollments_repo.add(enrollment_factory())
    wednesday = classes_repo.add(
        class_factory(name="Thứ 4", sessions=[ClassSession(day_of_week=3, start_time="18:00", end_time="19:00")])
    )
    tuesday = classes_repo.add(
        class_factory(name="Thứ 3", sessions=[ClassSession(day_of_week=2, start_time="17:00", end_time="18:00")])
    )
    # Monday sessions of today/tomorrow are too close: next one is a week later
    monday = classes_repo.add(
        class_factory(name="Thứ 2", sessions=[ClassSession(day_of_week=1, start_time="18:00", end_time="19:00")])
    )
    classes_repo.add(class_factory(name="Đầy", students=[ObjectId()], max_students=1))
    classes_repo.add(class_factory(name="Nghỉ", is_active=False))

    result = service.available_makeup_classes(str(e.id), now=NOW)

    assert [(c.id, at) for c, at in result] == [
        (tuesday.id, datetime(2026, 3, 10, 17, 0)),
        (wednesday.id, datetime(2026, 3, 11, 18, 0)),
        (monday.id, datetime(2026, 3, 16, 18, 0)),
    ]


def test_available_requires_enrollment(service):
    with pytest.raises(ValidationError, match="enrollmentId is required"):
        service.available_makeup_classes(None)
    with pytest.raises(NotFoundError):
        service.available_makeup_classes(str(ObjectId()))


def _pending_makeup(requests_repo):
    return requests_repo.create_makeup(
        NewMakeupRequest(
            student_id=ObjectId(),
            enrollment_id=ObjectId(),
            original_class_id=ObjectId(),
            original_session_date=datetime(2026, 3, 9, 18),
            new_session_date=datetime(2026, 3, 16, 18),
            reason="Lớp học bị hủy",
            requested_at=NOW,
            status=RequestStatus.PENDING,
        )
    )


def test_teacher_approves_pending_makeup(service, requests_repo):
    teacher = ObjectId()
    rid = _pending_makeup(requests_repo)

    decided = service.approve_makeup(current_role=Role.TEACHER, teacher_id=teacher, request_id=str(rid))

    assert decided.status == RequestStatus.APPROVED
    assert decided.decided_by == teacher
    with pytest.raises(ValidationError, match="đã được xử lý"):
        service.reject_makeup(current_role=Role.TEACHER, teacher_id=teacher, request_id=rid)


def test_student_cannot_decide(service, requests_repo):
    rid = _pending_makeup(requests_repo)
    with pytest.raises(AuthorizationError):
        service.approve_makeup(current_role=Role.STUDENT, teacher_id=ObjectId(), request_id=rid)


def test_reject_pending_absence(service, requests_repo):
    rid = requests_repo.create_absence(
        NewAbsenceRequest(
            student_id=ObjectId(),
            enrollment_id=ObjectId(),
            session_date=datetime(2026, 3, 9, 18),
            reason="Ốm",
            requested_at=NOW,
            status=RequestStatus.PENDING,
        )
    )
    decided = service.reject_absence(current_role=Role.TEACHER, teacher_id=ObjectId(), request_id=rid)
    assert decided.status == RequestStatus.REJECTED


def test_auto_approved_absence_cannot_be_decided_again(service):
    absence = _absence(service)
    with pytest.raises(ValidationError):
        service.reject_absence(current_role=Role.TEACHER, teacher_id=ObjectId(), request_id=absence.id)


def test_list_filters_by_status(service, requests_repo):
    _pending_makeup(requests_repo)
    assert len(service.list_makeups(status="pending")) == 1
    assert service.list_makeups(status="approved") == []
    # unknown status is ignored
    assert len(service.list_makeups(status="bogus")) == 1
