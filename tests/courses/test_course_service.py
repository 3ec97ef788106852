import pytest
from bson import ObjectId

from guitar_studio.core.enums import CourseFormat, CourseType
from guitar_studio.core.exceptions import NotFoundError, ValidationError
from guitar_studio.courses.service import CourseService


@pytest.fixture
def service(courses_repo):
    return CourseService(courses_repo)


def test_seed_only_into_empty_collection(service):
    assert service.seed_standard_courses() == 6
    assert service.seed_standard_courses() == 0

    courses = service.list_courses()
    assert sorted(c.max_students for c in courses) == [1, 1, 2, 2, 7, 7]
    assert {c.format for c in courses} == {CourseFormat.ONLINE, CourseFormat.OFFLINE}


def test_create_course_defaults_to_twelve_sessions(service):
    course = service.create_course(name="Lớp nhóm cuối tuần", type="group", format="offline", max_students=7)
    assert course.type == CourseType.GROUP
    assert course.total_sessions == 12


def test_create_course_validation(service):
    with pytest.raises(ValidationError):
        service.create_course(name="X", type="trio", format="online", max_students=3)
    with pytest.raises(ValidationError):
        service.create_course(name="X", type="group", format="online", max_students=0)


def test_unknown_course(service):
    with pytest.raises(NotFoundError):
        service.get_course(ObjectId())
