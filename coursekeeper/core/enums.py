"""
Enumerations and constants for the CourseKeeper platform.
"""

from enum import Enum


class Season(Enum):
    """Academic seasons a semester can fall in."""
    SPRING = "SPRING"
    SUMMER = "SUMMER"
    FALL = "FALL"
    WINTER = "WINTER"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class AssignmentStatus(Enum):
    """Progress states of an assignment."""
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    SUBMITTED = "SUBMITTED"
    LATE = "LATE"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()

    def __str__(self) -> str:
        return self.display_name


class BackendType(Enum):
    """Storage backends a repository can be built on."""
    JSON = "json"
    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"


class UrgencyBand(Enum):
    """Urgency classification for an upcoming deadline."""
    URGENT = "urgent"        # due within 24 hours
    HEADS_UP = "heads_up"    # due within 72 hours


class NotificationLevel(Enum):
    """Kinds of notifications the deadline scheduler emits."""
    URGENT = "urgent"
    HEADS_UP = "heads_up"
    OVERDUE = "overdue"


class SearchResultKind(Enum):
    """Kinds of entities a search result can point at."""
    COURSE = "Course"
    ASSIGNMENT = "Assignment"
