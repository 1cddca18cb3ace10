"""
Core entities for the CourseKeeper platform.

A Course owns an ordered list of Assignments; the two are persisted together
as one aggregate. Semester is a plain value object.
"""

import copy
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from .enums import AssignmentStatus, Season
from .exceptions import ValidationError
from ..util.dates import ensure_utc, parse_timestamp, to_iso, utc_now


@dataclass(frozen=True)
class Semester:
    """Season and year a course is taught in."""
    season: Season
    year: int

    def __str__(self) -> str:
        return f"{self.season.display_name} {self.year}"

    def to_dict(self) -> Dict[str, Any]:
        return {"season": self.season.name, "year": self.year}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Semester":
        return cls(season=Season[data["season"]], year=int(data["year"]))


class Assignment:
    """A piece of coursework with a deadline, owned by exactly one course."""

    def __init__(self, title: str, due_date: datetime, description: Optional[str] = None,
                 notes: Optional[str] = None, status: AssignmentStatus = AssignmentStatus.NOT_STARTED,
                 submission_deadline: Optional[datetime] = None, course_id: Optional[str] = None,
                 entity_id: Optional[str] = None, created_at: Optional[datetime] = None,
                 updated_at: Optional[datetime] = None):
        if due_date is None:
            raise ValidationError("Assignment due date is required")

        now = utc_now()
        self._id = entity_id or str(uuid.uuid4())
        self._course_id = course_id
        self._title = title
        self._description = description
        self._notes = notes
        self._status = status
        self._due_date = ensure_utc(due_date)
        self._submission_deadline = ensure_utc(submission_deadline) if submission_deadline else self._due_date
        self._created_at = ensure_utc(created_at) if created_at else now
        self._updated_at = ensure_utc(updated_at) if updated_at else self._created_at

    @property
    def id(self) -> str:
        return self._id

    @property
    def course_id(self) -> Optional[str]:
        return self._course_id

    @course_id.setter
    def course_id(self, value: Optional[str]) -> None:
        # Re-linking to a parent is not a field edit; updated_at stays put.
        self._course_id = value

    @property
    def title(self) -> str:
        return self._title

    @title.setter
    def title(self, value: str) -> None:
        if value is None:
            raise ValidationError("Assignment title is required")
        self._title = value
        self._touch()

    @property
    def description(self) -> Optional[str]:
        return self._description

    @description.setter
    def description(self, value: Optional[str]) -> None:
        self._description = value
        self._touch()

    @property
    def notes(self) -> Optional[str]:
        return self._notes

    @notes.setter
    def notes(self, value: Optional[str]) -> None:
        self._notes = value
        self._touch()

    @property
    def status(self) -> AssignmentStatus:
        return self._status

    @status.setter
    def status(self, value: AssignmentStatus) -> None:
        if not isinstance(value, AssignmentStatus):
            raise ValidationError(f"Invalid assignment status: {value!r}")
        self._status = value
        self._touch()

    @property
    def due_date(self) -> datetime:
        return self._due_date

    @due_date.setter
    def due_date(self, value: datetime) -> None:
        if value is None:
            raise ValidationError("Assignment due date is required")
        self._due_date = ensure_utc(value)
        self._touch()

    @property
    def submission_deadline(self) -> Optional[datetime]:
        return self._submission_deadline

    @submission_deadline.setter
    def submission_deadline(self, value: Optional[datetime]) -> None:
        self._submission_deadline = ensure_utc(value) if value else None
        self._touch()

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def _touch(self) -> None:
        self._updated_at = utc_now()

    def update(self, **kwargs) -> None:
        """Update several fields at once; unknown names are rejected."""
        for key, value in kwargs.items():
            if key not in ("title", "description", "notes", "status", "due_date", "submission_deadline"):
                raise ValidationError(f"Unknown assignment field: {key}")
            setattr(self, key, value)

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """Due date has passed and the work was not submitted."""
        now = ensure_utc(now) if now else utc_now()
        return self._due_date < now and self._status != AssignmentStatus.SUBMITTED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self._id,
            "course_id": self._course_id,
            "title": self._title,
            "description": self._description,
            "due_date": to_iso(self._due_date),
            "submission_deadline": to_iso(self._submission_deadline),
            "status": self._status.name,
            "notes": self._notes,
            "created_at": to_iso(self._created_at),
            "updated_at": to_iso(self._updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Assignment":
        assignment = cls(
            title=data["title"],
            due_date=parse_timestamp(data["due_date"]),
            description=data.get("description"),
            notes=data.get("notes"),
            status=AssignmentStatus[data.get("status") or AssignmentStatus.NOT_STARTED.name],
            course_id=data.get("course_id"),
            entity_id=data["id"],
            created_at=parse_timestamp(data.get("created_at")),
            updated_at=parse_timestamp(data.get("updated_at")),
        )
        # A stored null deadline must survive the round trip.
        assignment._submission_deadline = parse_timestamp(data.get("submission_deadline"))
        return assignment

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Assignment):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __str__(self) -> str:
        return self._title

    def __repr__(self) -> str:
        return f"Assignment(id={self._id}, title={self._title!r}, status={self._status.name})"


class Course:
    """A course and the assignments it owns."""

    def __init__(self, name: str, code: str, professor: Optional[str] = None,
                 semester: Optional[Semester] = None, description: Optional[str] = None,
                 entity_id: Optional[str] = None, assignments: Optional[List[Assignment]] = None):
        self._id = entity_id or str(uuid.uuid4())
        self.name = name
        self.code = code
        self.professor = professor
        self.semester = semester
        self.description = description
        self._assignments: List[Assignment] = []
        for assignment in assignments or []:
            self.add_assignment(assignment)

    @property
    def id(self) -> str:
        return self._id

    @property
    def assignments(self) -> List[Assignment]:
        return self._assignments

    @assignments.setter
    def assignments(self, value: List[Assignment]) -> None:
        self._assignments = []
        for assignment in value:
            self.add_assignment(assignment)

    @property
    def display_name(self) -> str:
        return f"{self.code} - {self.name}" if self.code else self.name

    def add_assignment(self, assignment: Assignment) -> None:
        """Attach an assignment to this course."""
        assignment.course_id = self._id
        self._assignments.append(assignment)

    def remove_assignment(self, assignment_id: str) -> bool:
        """Detach an assignment by id. Returns False when it was not present."""
        before = len(self._assignments)
        self._assignments = [a for a in self._assignments if a.id != assignment_id]
        return len(self._assignments) != before

    def get_assignment(self, assignment_id: str) -> Optional[Assignment]:
        for assignment in self._assignments:
            if assignment.id == assignment_id:
                return assignment
        return None

    def replace_assignment(self, assignment: Assignment) -> bool:
        """Swap in a new version of an existing assignment, keeping its position."""
        for index, existing in enumerate(self._assignments):
            if existing.id == assignment.id:
                assignment.course_id = self._id
                self._assignments[index] = assignment
                return True
        return False

    def copy(self) -> "Course":
        """Independent deep snapshot of the whole aggregate."""
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self._id,
            "name": self.name,
            "code": self.code,
            "description": self.description,
            "professor": self.professor,
            "semester": self.semester.to_dict() if self.semester else None,
            "assignments": [a.to_dict() for a in self._assignments],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Course":
        semester_data = data.get("semester")
        return cls(
            name=data["name"],
            code=data["code"],
            professor=data.get("professor"),
            semester=Semester.from_dict(semester_data) if semester_data else None,
            description=data.get("description"),
            entity_id=data["id"],
            assignments=[Assignment.from_dict(a) for a in data.get("assignments") or []],
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Course):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __str__(self) -> str:
        return self.display_name

    def __repr__(self) -> str:
        return f"Course(id={self._id}, code={self.code!r}, assignments={len(self._assignments)})"
