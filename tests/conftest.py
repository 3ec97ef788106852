from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from pathlib import Path

import pytest
from bson import ObjectId

from guitar_studio.attendance.model import AttendanceRecord
from guitar_studio.classes.model import ClassSession, StudioClass
from guitar_studio.core.enums import (
    AttendanceStatus,
    DocumentCategory,
    EnrollmentStatus,
    PaymentMode,
    ProfileStatus,
    RequestStatus,
)
from guitar_studio.courses.model import Course
from guitar_studio.documents.model import StudyDocument
from guitar_studio.enrollments.model import Enrollment, ScheduledSession
from guitar_studio.products.model import Product
from guitar_studio.requests.model import AbsenceRequest, MakeupRequest
from guitar_studio.users.model import StudentProfile, User

_OPEN = (EnrollmentStatus.PENDING, EnrollmentStatus.ACTIVE)


def _same_day(a: datetime, b: datetime) -> bool:
    return a.date() == b.date()


class FakeClassRepo:
    def __init__(self):
        self.items: dict[ObjectId, StudioClass] = {}

    def add(self, studio_class: StudioClass) -> StudioClass:
        self.items[studio_class.id] = studio_class
        return studio_class

    def list_filtered(self, *, grade=None, is_active=None):
        return [
            c
            for c in self.items.values()
            if (grade is None or c.grade == grade) and (is_active is None or c.is_active == is_active)
        ]

    def get_by_id(self, class_id):
        return self.items.get(class_id)

    def list_enrolling(self, student_id, *, exclude_id=None):
        return [c for c in self.items.values() if c.has_student(student_id) and c.id != exclude_id]

    def create(self, new_class):
        cid = ObjectId()
        self.items[cid] = StudioClass(
            id=cid,
            name=new_class.name,
            grade=new_class.grade,
            sessions=new_class.sessions,
            max_students=new_class.max_students,
        )
        return cid

    def update(self, class_id, changes):
        c = self.items.get(class_id)
        if not c:
            return False
        kw = {}
        if "name" in changes:
            kw["name"] = changes["name"]
        if "grade" in changes:
            kw["grade"] = changes["grade"]
        if "sessions" in changes:
            kw["sessions"] = tuple(
                ClassSession(day_of_week=s["dayOfWeek"], start_time=s["startTime"], end_time=s["endTime"])
                for s in changes["sessions"]
            )
        if "isActive" in changes:
            kw["is_active"] = changes["isActive"]
        if "maxStudents" in changes:
            kw["max_students"] = changes["maxStudents"]
        self.items[class_id] = replace(c, **kw)
        return True

    def delete(self, class_id):
        return self.items.pop(class_id, None) is not None

    def add_student(self, class_id, student_id):
        c = self.items.get(class_id)
        if not c:
            return False
        if student_id not in c.enrolled_students:
            self.items[class_id] = replace(c, enrolled_students=c.enrolled_students + (student_id,))
        return True

    def remove_student(self, class_id, student_id):
        c = self.items.get(class_id)
        if not c:
            return False
        self.items[class_id] = replace(c, enrolled_students=tuple(s for s in c.enrolled_students if s != student_id))
        return True

    def add_cancelled_date(self, class_id, day):
        c = self.items.get(class_id)
        if not c:
            return False
        self.items[class_id] = replace(c, cancelled_dates=c.cancelled_dates + (day,))
        return True


_ENROLLMENT_FIELDS = {
    "frequency": ("frequency", None),
    "startDate": ("start_date", None),
    "endDate": ("end_date", None),
    "paymentMode": ("payment_mode", PaymentMode),
    "customWeeks": ("custom_weeks", None),
    "cycle": ("cycle", None),
    "status": ("status", EnrollmentStatus),
    "totalSessions": ("total_sessions", None),
    "remainingSessions": ("remaining_sessions", None),
    "completedSessions": ("completed_sessions", None),
    "deferralWeeks": ("deferral_weeks", None),
}


class FakeEnrollmentRepo:
    def __init__(self):
        self.items: dict[ObjectId, Enrollment] = {}

    def add(self, enrollment: Enrollment) -> Enrollment:
        self.items[enrollment.id] = enrollment
        return enrollment

    def list_filtered(self, *, student_id=None, course_id=None, status=None):
        return [
            e
            for e in self.items.values()
            if (student_id is None or e.student_id == student_id)
            and (course_id is None or e.course_id == course_id)
            and (status is None or e.status == status)
        ]

    def get_by_id(self, enrollment_id):
        return self.items.get(enrollment_id)

    def find_open_for_student(self, student_id, *, exclude_id=None):
        for e in self.items.values():
            if e.student_id == student_id and e.status in _OPEN and e.id != exclude_id:
                return e
        return None

    def find_pending_for_student(self, student_id):
        for e in self.items.values():
            if e.student_id == student_id and e.status == EnrollmentStatus.PENDING:
                return e
        return None

    def list_open_for_students(self, student_ids):
        ids = set(student_ids)
        return [e for e in self.items.values() if e.student_id in ids and e.status in _OPEN]

    def count_for_student(self, student_id):
        return sum(1 for e in self.items.values() if e.student_id == student_id)

    def create(self, enrollment):
        eid = ObjectId()
        self.items[eid] = Enrollment(
            id=eid,
            student_id=enrollment.student_id,
            course_id=enrollment.course_id,
            frequency=enrollment.frequency,
            start_date=enrollment.start_date,
            end_date=enrollment.end_date,
            status=enrollment.status,
            total_sessions=enrollment.total_sessions,
            remaining_sessions=enrollment.total_sessions,
            payment_mode=enrollment.payment_mode,
            custom_weeks=enrollment.custom_weeks,
            cycle=enrollment.cycle,
            schedule=enrollment.schedule,
        )
        return eid

    def update(self, enrollment_id, changes):
        e = self.items.get(enrollment_id)
        if not e:
            return False
        kw = {}
        for key, value in changes.items():
            if key == "schedule":
                kw["schedule"] = tuple(
                    ScheduledSession(day_of_week=s["dayOfWeek"], time_slot=s["timeSlot"], class_id=s.get("classId"))
                    for s in value["sessions"]
                )
                continue
            attr, convert = _ENROLLMENT_FIELDS[key]
            kw[attr] = convert(value) if convert and value is not None else value
        self.items[enrollment_id] = replace(e, **kw)
        return True

    def record_completed_session(self, enrollment_id):
        e = self.items.get(enrollment_id)
        if not e:
            return False
        self.items[enrollment_id] = replace(
            e,
            completed_sessions=e.completed_sessions + 1,
            remaining_sessions=e.remaining_sessions - 1,
        )
        return True


class FakeAttendanceRepo:
    def __init__(self):
        self.items: dict[ObjectId, AttendanceRecord] = {}

    def list_filtered(self, *, student_id=None, enrollment_id=None, class_id=None, session_day=None):
        return [
            r
            for r in self.items.values()
            if (student_id is None or r.student_id == student_id)
            and (enrollment_id is None or r.enrollment_id == enrollment_id)
            and (class_id is None or r.class_id == class_id)
            and (session_day is None or _same_day(r.session_date, session_day))
        ]

    def get_by_id(self, attendance_id):
        return self.items.get(attendance_id)

    def find_for_student_on(self, student_id, day, *, class_id=None):
        for r in self.items.values():
            if r.student_id == student_id and _same_day(r.session_date, day):
                if class_id is None or r.class_id == class_id:
                    return r
        return None

    def create(self, record):
        aid = ObjectId()
        self.items[aid] = AttendanceRecord(
            id=aid,
            student_id=record.student_id,
            session_date=record.session_date,
            status=record.status,
            marked_by=record.marked_by,
            marked_at=record.marked_at,
            enrollment_id=record.enrollment_id,
            class_id=record.class_id,
            notes=record.notes,
        )
        return aid

    def update(self, attendance_id, changes):
        r = self.items.get(attendance_id)
        if not r:
            return False
        kw = {}
        if "status" in changes:
            kw["status"] = AttendanceStatus(changes["status"])
        if "notes" in changes:
            kw["notes"] = changes["notes"]
        self.items[attendance_id] = replace(r, **kw)
        return True

    def delete(self, attendance_id):
        return self.items.pop(attendance_id, None) is not None


class FakeRequestRepo:
    def __init__(self):
        self.absences: dict[ObjectId, AbsenceRequest] = {}
        self.makeups: dict[ObjectId, MakeupRequest] = {}

    def create_absence(self, request):
        rid = ObjectId()
        self.absences[rid] = AbsenceRequest(
            id=rid,
            student_id=request.student_id,
            enrollment_id=request.enrollment_id,
            class_id=request.class_id,
            session_date=request.session_date,
            reason=request.reason,
            requested_at=request.requested_at,
            status=request.status,
        )
        return rid

    def get_absence(self, request_id):
        return self.absences.get(request_id)

    def list_absences(self, *, student_id=None, enrollment_id=None, class_id=None, status=None):
        return [
            a
            for a in self.absences.values()
            if (student_id is None or a.student_id == student_id)
            and (enrollment_id is None or a.enrollment_id == enrollment_id)
            and (class_id is None or a.class_id == class_id)
            and (status is None or a.status == status)
        ]

    def find_absence(self, student_id, day, *, class_id=None):
        for a in self.absences.values():
            if a.student_id == student_id and _same_day(a.session_date, day):
                if class_id is None or a.class_id == class_id:
                    return a
        return None

    def decide_absence(self, *, request_id, status, decided_by):
        a = self.absences.get(request_id)
        if not a or a.status != RequestStatus.PENDING:
            return False
        self.absences[request_id] = replace(a, status=status, decided_by=decided_by, decided_at=datetime(2026, 3, 1))
        return True

    def create_makeup(self, request):
        rid = ObjectId()
        self.makeups[rid] = MakeupRequest(
            id=rid,
            student_id=request.student_id,
            enrollment_id=request.enrollment_id,
            original_class_id=request.original_class_id,
            original_session_date=request.original_session_date,
            new_class_id=request.new_class_id,
            new_session_date=request.new_session_date,
            reason=request.reason,
            requested_at=request.requested_at,
            status=request.status,
        )
        return rid

    def get_makeup(self, request_id):
        return self.makeups.get(request_id)

    def list_makeups(self, *, student_id=None, enrollment_id=None, status=None):
        return [
            m
            for m in self.makeups.values()
            if (student_id is None or m.student_id == student_id)
            and (enrollment_id is None or m.enrollment_id == enrollment_id)
            and (status is None or m.status == status)
        ]

    def find_makeup_for_original(self, student_id, original_class_id, day):
        for m in self.makeups.values():
            if (
                m.student_id == student_id
                and m.original_class_id == original_class_id
                and _same_day(m.original_session_date, day)
            ):
                return m
        return None

    def decide_makeup(self, *, request_id, status, decided_by):
        m = self.makeups.get(request_id)
        if not m or m.status != RequestStatus.PENDING:
            return False
        self.makeups[request_id] = replace(m, status=status, decided_by=decided_by, decided_at=datetime(2026, 3, 1))
        return True

    def delete_approved_makeups_into(self, class_id, day):
        doomed = [
            rid
            for rid, m in self.makeups.items()
            if m.new_class_id == class_id and _same_day(m.new_session_date, day) and m.status == RequestStatus.APPROVED
        ]
        for rid in doomed:
            del self.makeups[rid]
        return len(doomed)


_USER_FIELDS = {
    "username": "username",
    "email": "email",
    "avatar": "avatar",
    "fullName": "full_name",
    "phone": "phone",
    "dateOfBirth": "date_of_birth",
    "address": "address",
    "facebookName": "facebook_name",
    "note": "note",
    "studentNumber": "student_number",
    "password": "password_hash",
}


class FakeUserRepo:
    def __init__(self):
        self.items: dict[ObjectId, User] = {}

    def add(self, user: User) -> User:
        self.items[user.id] = user
        return user

    def get_by_id(self, user_id):
        return self.items.get(user_id)

    def get_by_username(self, username):
        return next((u for u in self.items.values() if u.username == username), None)

    def list_by_role(self, role):
        return [u for u in self.items.values() if u.role == role]

    def exists_with_role(self, role):
        return any(u.role == role for u in self.items.values())

    def next_student_number(self):
        numbers = [u.student_number for u in self.items.values() if u.student_number]
        return max(numbers, default=0) + 1

    def create_user(self, new_user):
        uid = ObjectId()
        self.items[uid] = User(
            id=uid,
            username=new_user.username,
            password_hash=new_user.password_hash,
            role=new_user.role,
            full_name=new_user.full_name,
            phone=new_user.phone,
            email=new_user.email,
            avatar=new_user.avatar,
            date_of_birth=new_user.date_of_birth,
            student_number=new_user.student_number,
        )
        return uid

    def update_user(self, user_id, changes):
        u = self.items.get(user_id)
        if not u:
            return False
        kw = {_USER_FIELDS[k]: v for k, v in changes.items() if k in _USER_FIELDS}
        self.items[user_id] = replace(u, **kw)
        return True

    def delete_user(self, user_id, *, role=None):
        u = self.items.get(user_id)
        if not u or (role is not None and u.role != role):
            return False
        del self.items[user_id]
        return True

    def backfill_avatar(self, avatar):
        missing = [uid for uid, u in self.items.items() if u.avatar is None]
        for uid in missing:
            self.items[uid] = replace(self.items[uid], avatar=avatar)
        return len(missing), len(missing)


class FakeProfileRepo:
    def __init__(self):
        self.items: dict[ObjectId, StudentProfile] = {}

    def get_for_user(self, user_id):
        return self.items.get(user_id)

    def create(self, profile):
        self.items[profile.user_id] = profile

    def upsert(self, user_id, changes):
        current = self.items.get(user_id) or StudentProfile(user_id=user_id, status=ProfileStatus.PENDING)
        self.items[user_id] = replace(current, **{k: v for k, v in changes.items() if k in ("grade", "group")})


class FakeCourseRepo:
    def __init__(self):
        self.items: dict[ObjectId, Course] = {}

    def list_all(self):
        return list(self.items.values())

    def get_by_id(self, course_id):
        return self.items.get(course_id)

    def count(self):
        return len(self.items)

    def create(self, course):
        cid = ObjectId()
        self.items[cid] = Course(
            id=cid,
            name=course.name,
            type=course.type,
            format=course.format,
            max_students=course.max_students,
            total_sessions=course.total_sessions,
        )
        return cid


_PRODUCT_FIELDS = {"originalPrice": "original_price", "inStock": "in_stock", "isNew": "is_new"}


class FakeProductRepo:
    def __init__(self):
        self.items: dict[ObjectId, Product] = {}

    def list_all(self):
        return sorted(self.items.values(), key=lambda p: p.number)

    def get_by_number(self, number):
        return next((p for p in self.items.values() if p.number == number), None)

    def get_by_id(self, product_id):
        return self.items.get(product_id)

    def max_number(self):
        return max((p.number for p in self.items.values()), default=0)

    def create(self, number, fields):
        pid = ObjectId()
        kw = {_PRODUCT_FIELDS.get(k, k): v for k, v in fields.items()}
        self.items[pid] = Product(id=pid, number=number, **kw)
        return pid

    def update(self, product_id, changes):
        p = self.items.get(product_id)
        if not p:
            return False
        self.items[product_id] = replace(p, **{_PRODUCT_FIELDS.get(k, k): v for k, v in changes.items()})
        return True

    def delete(self, product_id):
        return self.items.pop(product_id, None) is not None


class FakeDocumentRepo:
    def __init__(self):
        self.items: dict[ObjectId, StudyDocument] = {}

    def list_all(self):
        return list(self.items.values())

    def list_for_classes(self, class_ids):
        ids = set(class_ids)
        return [d for d in self.items.values() if ids.intersection(d.classes)]

    def get_by_id(self, document_id):
        return self.items.get(document_id)

    def get_by_file_path(self, file_path):
        return next((d for d in self.items.values() if d.file_path == file_path), None)

    def create(self, document):
        did = ObjectId()
        self.items[did] = StudyDocument(
            id=did,
            name=document.name,
            file_path=document.file_path,
            file_name=document.file_name,
            category=document.category,
            classes=document.classes,
            grade=document.grade,
            note=document.note,
            uploaded_by=document.uploaded_by,
        )
        return did

    def update(self, document_id, changes):
        d = self.items.get(document_id)
        if not d:
            return False
        kw = dict(changes)
        if "category" in kw:
            kw["category"] = DocumentCategory(kw["category"])
        if "classes" in kw:
            kw["classes"] = tuple(kw["classes"])
        self.items[document_id] = replace(d, **kw)
        return True

    def delete(self, document_id):
        return self.items.pop(document_id, None) is not None


def make_class(*, name="Lớp 8A", grade=8, sessions=None, students=(), max_students=None, is_active=True):
    return StudioClass(
        id=ObjectId(),
        name=name,
        grade=grade,
        sessions=tuple(sessions or (ClassSession(day_of_week=1, start_time="18:00", end_time="19:30"),)),
        enrolled_students=tuple(students),
        is_active=is_active,
        max_students=max_students,
    )


def make_enrollment(*, student_id=None, status=EnrollmentStatus.ACTIVE, start=datetime(2026, 1, 5), **kw):
    fields = dict(
        id=ObjectId(),
        student_id=student_id or ObjectId(),
        course_id=ObjectId(),
        frequency=1,
        start_date=start,
        end_date=datetime(2026, 5, 11),
        status=status,
        total_sessions=12,
        remaining_sessions=12,
    )
    fields.update(kw)
    return Enrollment(**fields)


@pytest.fixture
def classes_repo():
    return FakeClassRepo()


@pytest.fixture
def enrollments_repo():
    return FakeEnrollmentRepo()


@pytest.fixture
def attendance_repo():
    return FakeAttendanceRepo()


@pytest.fixture
def requests_repo():
    return FakeRequestRepo()


@pytest.fixture
def users_repo():
    return FakeUserRepo()


@pytest.fixture
def profiles_repo():
    return FakeProfileRepo()


@pytest.fixture
def documents_dir(tmp_path) -> Path:
    path = tmp_path / "documents"
    path.mkdir()
    return path


@pytest.fixture
def class_factory():
    return make_class


@pytest.fixture
def enrollment_factory():
    return make_enrollment


@pytest.fixture
def courses_repo():
    return FakeCourseRepo()


@pytest.fixture
def products_repo():
    return FakeProductRepo()


@pytest.fixture
def documents_repo():
    return FakeDocumentRepo()
