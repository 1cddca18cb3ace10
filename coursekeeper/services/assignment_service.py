"""
Assignment service: derived views and mutations over course aggregates.

Assignments are never persisted on their own. Every mutation resolves the
owning course, edits its assignment list and writes the whole course back.
"""

from datetime import datetime, timedelta
from typing import Callable, List, Optional

from ..core.entities import Assignment, Course
from ..core.enums import AssignmentStatus
from ..core.exceptions import AssignmentNotFoundError, CourseNotFoundError
from ..core.interfaces import CourseRepository
from ..logging_config import get_logger
from ..util.dates import ensure_utc, utc_now

logger = get_logger(__name__)


def _by_due_date(assignments: List[Assignment]) -> List[Assignment]:
    return sorted(assignments, key=lambda a: a.due_date)


class AssignmentService:
    """Service for assignment queries and edits."""

    def __init__(self, repository: CourseRepository, clock: Callable[[], datetime] = utc_now):
        self._repository = repository
        self._clock = clock

    @property
    def repository(self) -> CourseRepository:
        return self._repository

    def _now(self, now: Optional[datetime]) -> datetime:
        return ensure_utc(now) if now else ensure_utc(self._clock())

    # Reads

    def get_all_assignments(self) -> List[Assignment]:
        """Flatten every course's assignment list."""
        return [a for c in self._repository.get_all_courses() for a in c.assignments]

    def get_assignments_by_course(self, course_id: str) -> List[Assignment]:
        course = self._repository.get_course_by_id(course_id)
        return list(course.assignments) if course else []

    def get_assignment_by_id(self, assignment_id: str) -> Optional[Assignment]:
        for assignment in self.get_all_assignments():
            if assignment.id == assignment_id:
                return assignment
        return None

    def get_assignments_by_status(self, status: AssignmentStatus) -> List[Assignment]:
        return [a for a in self.get_all_assignments() if a.status == status]

    def get_upcoming_assignments(self, days_ahead: int,
                                 now: Optional[datetime] = None) -> List[Assignment]:
        """Unsubmitted assignments due strictly between now and now + days_ahead."""
        now = self._now(now)
        horizon = now + timedelta(days=days_ahead)
        return _by_due_date([
            a for a in self.get_all_assignments()
            if now < a.due_date < horizon and a.status != AssignmentStatus.SUBMITTED
        ])

    def get_overdue_assignments(self, now: Optional[datetime] = None) -> List[Assignment]:
        now = self._now(now)
        return _by_due_date([a for a in self.get_all_assignments() if a.is_overdue(now)])

    def get_assignments_between_dates(self, start: datetime, end: datetime) -> List[Assignment]:
        """Assignments due within [start, end], both ends inclusive."""
        start, end = ensure_utc(start), ensure_utc(end)
        return _by_due_date([a for a in self.get_all_assignments() if start <= a.due_date <= end])

    def search_assignments(self, query: str) -> List[Assignment]:
        """Case-insensitive substring search over title, description and notes."""
        if not query or not query.strip():
            return []

        needle = query.lower()
        return [
            a for a in self.get_all_assignments()
            if any(needle in (field or "").lower() for field in (a.title, a.description, a.notes))
        ]

    # Mutations

    def _require_course(self, course_id: str) -> Course:
        course = self._repository.get_course_by_id(course_id)
        if course is None:
            raise CourseNotFoundError(course_id)
        return course

    def create_assignment(self, course_id: str, title: str, due_date: datetime,
                          description: Optional[str] = None, notes: Optional[str] = None,
                          status: AssignmentStatus = AssignmentStatus.NOT_STARTED) -> Assignment:
        """Create an assignment under an existing course."""
        course = self._require_course(course_id)

        assignment = Assignment(title=title, due_date=due_date, description=description,
                                notes=notes, status=status)
        course.add_assignment(assignment)
        self._repository.update_course(course)

        logger.info("Created assignment %s in course %s", assignment.title, course.display_name)
        return assignment

    def update_assignment(self, assignment: Assignment) -> None:
        """Write back an edited assignment into its owning course."""
        if not assignment.course_id:
            raise AssignmentNotFoundError(assignment.id)

        course = self._require_course(assignment.course_id)
        if not course.replace_assignment(assignment):
            raise AssignmentNotFoundError(assignment.id, course_id=course.id)
        self._repository.update_course(course)

    def update_status(self, course_id: str, assignment_id: str,
                      status: AssignmentStatus) -> Assignment:
        """Change the status of one assignment."""
        course = self._require_course(course_id)
        assignment = course.get_assignment(assignment_id)
        if assignment is None:
            raise AssignmentNotFoundError(assignment_id, course_id=course_id)

        assignment.status = status
        self.update_assignment(assignment)
        return assignment

    def delete_assignment(self, course_id: str, assignment_id: str) -> None:
        """Remove an assignment. Unknown course or assignment ids are ignored."""
        course = self._repository.get_course_by_id(course_id)
        if course is None:
            return
        if course.remove_assignment(assignment_id):
            self._repository.update_course(course)
            logger.info("Deleted assignment %s from course %s", assignment_id, course_id)
