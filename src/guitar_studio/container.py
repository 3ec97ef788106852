from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .attendance.mongo_attendance_repository import MongoAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .classes.mongo_class_repository import MongoClassRepository
from .classes.repository import ClassRepository
from .classes.service import ClassService
from .core.constants import AUTH_TOKEN_DAYS
from .courses.mongo_course_repository import MongoCourseRepository
from .courses.repository import CourseRepository
from .courses.service import CourseService
from .database.connection import DatabaseConnection, MongoConfig
from .documents.mongo_document_repository import MongoDocumentRepository
from .documents.repository import DocumentRepository
from .documents.service import DocumentService
from .enrollments.mongo_enrollment_repository import MongoEnrollmentRepository
from .enrollments.repository import EnrollmentRepository
from .enrollments.service import EnrollmentService
from .products.mongo_product_repository import MongoProductRepository
from .products.repository import ProductRepository
from .products.service import ProductService
from .requests.mongo_request_repository import MongoRequestRepository
from .requests.repository import RequestRepository
from .requests.service import RequestService
from .users.mongo_user_repository import MongoStudentProfileRepository, MongoUserRepository
from .users.repository import StudentProfileRepository, UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    profiles_repo: StudentProfileRepository
    courses_repo: CourseRepository
    classes_repo: ClassRepository
    enrollments_repo: EnrollmentRepository
    attendance_repo: AttendanceRepository
    requests_repo: RequestRepository
    documents_repo: DocumentRepository
    products_repo: ProductRepository

    auth_service: AuthService
    user_service: UserService
    course_service: CourseService
    class_service: ClassService
    enrollment_service: EnrollmentService
    attendance_service: AttendanceService
    request_service: RequestService
    document_service: DocumentService
    product_service: ProductService


def wire_services(
    *,
    conn: Optional[DatabaseConnection],
    users_repo: UserRepository,
    profiles_repo: StudentProfileRepository,
    courses_repo: CourseRepository,
    classes_repo: ClassRepository,
    enrollments_repo: EnrollmentRepository,
    attendance_repo: AttendanceRepository,
    requests_repo: RequestRepository,
    documents_repo: DocumentRepository,
    products_repo: ProductRepository,
    jwt_secret: str,
    documents_dir: Path,
    token_days: int = AUTH_TOKEN_DAYS,
) -> Container:
    """Build every service on top of the given repositories (Mongo in production, fakes in tests)."""

    return Container(
        conn=conn,
        users_repo=users_repo,
        profiles_repo=profiles_repo,
        courses_repo=courses_repo,
        classes_repo=classes_repo,
        enrollments_repo=enrollments_repo,
        attendance_repo=attendance_repo,
        requests_repo=requests_repo,
        documents_repo=documents_repo,
        products_repo=products_repo,
        auth_service=AuthService(users_repo, secret=jwt_secret, token_days=token_days),
        user_service=UserService(users_repo, profiles_repo, enrollments_repo),
        course_service=CourseService(courses_repo),
        class_service=ClassService(classes_repo, enrollments_repo, profiles_repo, attendance_repo, requests_repo),
        enrollment_service=EnrollmentService(enrollments_repo, classes_repo, requests_repo),
        attendance_service=AttendanceService(attendance_repo, enrollments_repo),
        request_service=RequestService(requests_repo, attendance_repo, enrollments_repo, classes_repo),
        document_service=DocumentService(documents_repo, classes_repo, storage_dir=documents_dir),
        product_service=ProductService(products_repo),
    )


def build_container(
    *,
    mongo_uri: str,
    db_name: Optional[str],
    jwt_secret: str,
    documents_dir: Path,
    token_days: int = AUTH_TOKEN_DAYS,
) -> Container:
    conn = DatabaseConnection.get_instance(MongoConfig(uri=mongo_uri, db_name=db_name))

    return wire_services(
        conn=conn,
        users_repo=MongoUserRepository(conn),
        profiles_repo=MongoStudentProfileRepository(conn),
        courses_repo=MongoCourseRepository(conn),
        classes_repo=MongoClassRepository(conn),
        enrollments_repo=MongoEnrollmentRepository(conn),
        attendance_repo=MongoAttendanceRepository(conn),
        requests_repo=MongoRequestRepository(conn),
        documents_repo=MongoDocumentRepository(conn),
        products_repo=MongoProductRepository(conn),
        jwt_secret=jwt_secret,
        documents_dir=documents_dir,
        token_days=token_days,
    )
