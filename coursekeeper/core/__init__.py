"""
Core module containing the domain model, storage port and error taxonomy.
"""

from .entities import *
from .interfaces import *
from .exceptions import *
from .enums import *

__all__ = [
    # Entities
    "Course",
    "Assignment",
    "Semester",

    # Interfaces
    "CourseRepository",
    "Notifier",

    # Enums
    "Season",
    "AssignmentStatus",
    "BackendType",
    "UrgencyBand",
    "NotificationLevel",
    "SearchResultKind",

    # Exceptions
    "CourseKeeperError",
    "ValidationError",
    "ResourceNotFoundError",
    "CourseNotFoundError",
    "AssignmentNotFoundError",
    "PersistenceError",
    "DuplicateEntityError",
    "SchemaInitializationError",
    "ConfigurationError",
    "SchedulingError",
    "MigrationError",
]
