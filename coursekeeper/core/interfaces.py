"""
Core interfaces and abstract base classes for the CourseKeeper platform.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, TYPE_CHECKING

from .entities import Course

if TYPE_CHECKING:
    from ..services.scheduler_service import Notification


class CourseRepository(ABC):
    """Storage port for course aggregates.

    A course travels together with its assignment list: every write persists
    the whole aggregate and every read returns it fully populated. Exactly one
    implementation is active per process, chosen at startup.
    """

    @abstractmethod
    def get_all_courses(self) -> List[Course]:
        """Return every course with its assignments populated."""
        pass

    @abstractmethod
    def get_course_by_id(self, course_id: str) -> Optional[Course]:
        """Return the course, or None when it does not exist."""
        pass

    @abstractmethod
    def add_course(self, course: Course) -> None:
        """Persist a new course and all of its assignments as one unit."""
        pass

    @abstractmethod
    def update_course(self, course: Course) -> None:
        """Replace the stored course fields and resynchronize its assignment set."""
        pass

    @abstractmethod
    def delete_course(self, course_id: str) -> None:
        """Remove the course and its assignments. Unknown ids are a no-op."""
        pass

    @abstractmethod
    def load(self) -> None:
        """Materialize state from storage (no-op for durable backends)."""
        pass

    @abstractmethod
    def save(self) -> None:
        """Flush state to storage (no-op for durable backends)."""
        pass

    def close(self) -> None:
        """Release any held resources."""
        pass


Notifier = Callable[["Notification"], None]
