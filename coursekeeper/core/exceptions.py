"""
Custom exceptions for the CourseKeeper platform.
"""

from typing import Optional, Any, Dict


class CourseKeeperError(Exception):
    """Base exception for all CourseKeeper-related errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationError(CourseKeeperError):
    """Raised when data validation fails."""
    pass


class ResourceNotFoundError(CourseKeeperError):
    """Raised when a requested resource is not found."""
    pass


class CourseNotFoundError(ResourceNotFoundError):
    """Raised when an operation requires a course that does not exist."""

    def __init__(self, course_id: str):
        super().__init__(f"Course not found: {course_id}", error_code="course_not_found",
                         details={"course_id": course_id})
        self.course_id = course_id


class AssignmentNotFoundError(ResourceNotFoundError):
    """Raised when an operation requires an assignment that does not exist."""

    def __init__(self, assignment_id: str, course_id: Optional[str] = None):
        super().__init__(f"Assignment not found: {assignment_id}", error_code="assignment_not_found",
                         details={"assignment_id": assignment_id, "course_id": course_id})
        self.assignment_id = assignment_id
        self.course_id = course_id


class PersistenceError(CourseKeeperError):
    """Raised when persistence operations fail."""
    pass


class DuplicateEntityError(PersistenceError):
    """Raised when attempting to create a duplicate entity."""
    pass


class SchemaInitializationError(PersistenceError):
    """Raised when the relational schema cannot be created."""
    pass


class ConfigurationError(CourseKeeperError):
    """Raised when configuration is invalid."""
    pass


class SchedulingError(CourseKeeperError):
    """Raised when the deadline scheduler is misused."""
    pass


class MigrationError(CourseKeeperError):
    """Raised when a data migration cannot proceed."""
    pass
