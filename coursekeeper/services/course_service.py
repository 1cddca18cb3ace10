"""
Course service for reading and maintaining course aggregates.
"""

from typing import List, Optional

from ..core.entities import Course, Semester
from ..core.interfaces import CourseRepository
from ..logging_config import get_logger

logger = get_logger(__name__)


class CourseService:
    """Service for course level operations over the repository port."""

    def __init__(self, repository: CourseRepository):
        self._repository = repository

    @property
    def repository(self) -> CourseRepository:
        return self._repository

    def get_all_courses(self) -> List[Course]:
        """Get every course with its assignments."""
        return self._repository.get_all_courses()

    def get_course_by_id(self, course_id: str) -> Optional[Course]:
        """Get a course by id, or None when it does not exist."""
        return self._repository.get_course_by_id(course_id)

    def get_courses_by_semester(self, semester: Semester) -> List[Course]:
        """Get courses taught in the given semester."""
        return [c for c in self._repository.get_all_courses() if c.semester == semester]

    def create_course(self, name: str, code: str, professor: Optional[str] = None,
                      semester: Optional[Semester] = None,
                      description: Optional[str] = None) -> Course:
        """Create and persist a new course without assignments."""
        course = Course(name=name, code=code, professor=professor, semester=semester,
                        description=description)
        self._repository.add_course(course)
        logger.info("Created course %s (%s)", course.display_name, course.id)
        return course

    def add_course(self, course: Course) -> Course:
        """Persist a course built by the caller, assignments included."""
        for assignment in course.assignments:
            assignment.course_id = course.id
        self._repository.add_course(course)
        logger.info("Added course %s with %d assignments", course.display_name,
                    len(course.assignments))
        return course

    def update_course(self, course: Course) -> None:
        """Persist new course fields and the full assignment list."""
        if self._repository.get_course_by_id(course.id) is None:
            logger.warning("Cannot update course %s: not found", course.id)
            return

        for assignment in course.assignments:
            assignment.course_id = course.id
        self._repository.update_course(course)

    def delete_course(self, course_id: str) -> None:
        """Delete a course and its assignments. Unknown ids are ignored."""
        self._repository.delete_course(course_id)
        logger.info("Deleted course %s", course_id)

    def search_courses(self, query: str) -> List[Course]:
        """Case-insensitive substring search over name, code and professor."""
        if not query or not query.strip():
            return []

        needle = query.lower()
        return [
            c for c in self._repository.get_all_courses()
            if any(needle in (field or "").lower() for field in (c.name, c.code, c.professor))
        ]
