"""
Services module containing the query layer, search and deadline scanning.
"""

from .course_service import CourseService
from .assignment_service import AssignmentService
from .search_service import SearchService, SearchResult, FilterCriteria
from .scheduler_service import DeadlineScheduler, Notification, classify_assignment, log_notification

__all__ = [
    "CourseService",
    "AssignmentService",
    "SearchService",
    "SearchResult",
    "FilterCriteria",
    "DeadlineScheduler",
    "Notification",
    "classify_assignment",
    "log_notification",
]
