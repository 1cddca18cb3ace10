"""
Search facade combining course and assignment hits.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Union

from ..core.entities import Assignment, Course
from ..core.enums import AssignmentStatus, SearchResultKind
from ..util.dates import ensure_utc, utc_now
from .assignment_service import AssignmentService
from .course_service import CourseService


@dataclass
class SearchResult:
    """One tagged search hit."""
    kind: SearchResultKind
    id: str
    title: str
    subtitle: str
    course: Optional[Course] = None


@dataclass
class FilterCriteria:
    """Fixed set of assignment filters; unset fields do not filter."""
    course_id: Optional[str] = None
    status: Optional[AssignmentStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    overdue_only: bool = False


class SearchService:
    """Search across courses and assignments."""

    def __init__(self, course_service: CourseService, assignment_service: AssignmentService):
        self._course_service = course_service
        self._assignment_service = assignment_service

    def search(self, query: str) -> List[SearchResult]:
        """Course hits first, then assignment hits, each in service order."""
        if not query or not query.strip():
            return []

        results: List[SearchResult] = []

        for course in self._course_service.search_courses(query):
            results.append(SearchResult(
                kind=SearchResultKind.COURSE,
                id=course.id,
                title=course.display_name,
                subtitle=f"Professor: {course.professor or 'N/A'}",
                course=course,
            ))

        courses = {c.id: c for c in self._course_service.get_all_courses()}
        for assignment in self._assignment_service.search_assignments(query):
            course = courses.get(assignment.course_id)
            course_name = course.display_name if course else "Unknown Course"
            results.append(SearchResult(
                kind=SearchResultKind.ASSIGNMENT,
                id=assignment.id,
                title=assignment.title,
                subtitle=f"{course_name} | Due: {assignment.due_date.date().isoformat()}",
                course=course,
            ))

        return results

    def resolve(self, result: SearchResult) -> Optional[Union[Course, Assignment]]:
        """Look up the entity a search result points at."""
        if result.kind == SearchResultKind.COURSE:
            return self._course_service.get_course_by_id(result.id)
        return self._assignment_service.get_assignment_by_id(result.id)

    def filter_assignments(self, criteria: FilterCriteria,
                           now: Optional[datetime] = None) -> List[Assignment]:
        """Apply every set criterion and sort by due date."""
        assignments = self._assignment_service.get_all_assignments()

        if criteria.course_id is not None:
            assignments = [a for a in assignments if a.course_id == criteria.course_id]
        if criteria.status is not None:
            assignments = [a for a in assignments if a.status == criteria.status]
        if criteria.start_date is not None:
            start = ensure_utc(criteria.start_date)
            assignments = [a for a in assignments if a.due_date >= start]
        if criteria.end_date is not None:
            end = ensure_utc(criteria.end_date)
            assignments = [a for a in assignments if a.due_date <= end]
        if criteria.overdue_only:
            now = ensure_utc(now) if now else utc_now()
            assignments = [a for a in assignments if a.is_overdue(now)]

        return sorted(assignments, key=lambda a: a.due_date)
