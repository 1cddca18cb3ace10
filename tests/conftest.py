"""Shared fixtures for the CourseKeeper test suite."""
from datetime import datetime, timedelta, timezone

import pytest

from coursekeeper.core.entities import Assignment, Course, Semester
from coursekeeper.core.enums import Season
from coursekeeper.persistence.database import SQLiteDatabase
from coursekeeper.persistence.repositories import JsonCourseRepository, SqlCourseRepository
from coursekeeper.services import AssignmentService, CourseService, SearchService

FIXED_NOW = datetime(2024, 10, 1, 12, 0, tzinfo=timezone.utc)


def make_course(code="CS101", name="Intro to Programming", professor="Dr. Hopper",
                semester=Semester(Season.FALL, 2024), assignments=None):
    course = Course(name=name, code=code, professor=professor, semester=semester)
    for assignment in assignments or []:
        course.add_assignment(assignment)
    return course


def due_in(**kwargs):
    return FIXED_NOW + timedelta(**kwargs)


@pytest.fixture
def json_repo(tmp_path):
    return JsonCourseRepository(str(tmp_path / "data" / "scheduler-data.json"))


@pytest.fixture
def sqlite_repo(tmp_path):
    repo = SqlCourseRepository(SQLiteDatabase(str(tmp_path / "coursekeeper.db"), pool_size=3))
    yield repo
    repo.close()


@pytest.fixture(params=["json", "sqlite"])
def repository(request):
    """Every contract test runs once per backend."""
    return request.getfixturevalue(f"{request.param}_repo")


@pytest.fixture
def course_service(repository):
    return CourseService(repository)


@pytest.fixture
def assignment_service(repository):
    return AssignmentService(repository, clock=lambda: FIXED_NOW)


@pytest.fixture
def search_service(course_service, assignment_service):
    return SearchService(course_service, assignment_service)


@pytest.fixture
def populated(course_service):
    """Two courses with assignments spread around FIXED_NOW."""
    cs = make_course(assignments=[
        Assignment("Homework 1", due_in(hours=10), description="Loops and lists"),
        Assignment("Project Proposal", due_in(hours=50), notes="team of three"),
        Assignment("Final Project", due_in(hours=100)),
        Assignment("Reading Quiz", due_in(days=-1)),
    ])
    math = make_course(code="MATH220", name="Linear Algebra", professor="Dr. Noether",
                       semester=Semester(Season.SPRING, 2025))
    course_service.add_course(cs)
    course_service.add_course(math)
    return cs, math
