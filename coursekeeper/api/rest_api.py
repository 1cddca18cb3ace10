"""
REST API implementation for the CourseKeeper platform using FastAPI.
"""

import threading
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query, Response, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from ..core.entities import Assignment, Course, Semester
from ..core.enums import AssignmentStatus, Season
from ..core.exceptions import (
    CourseKeeperError, DuplicateEntityError, PersistenceError, ResourceNotFoundError, ValidationError,
)
from ..logging_config import get_logger
from ..services import AssignmentService, CourseService, DeadlineScheduler, SearchService
from ..util.dates import utc_now

logger = get_logger(__name__)

API_VERSION = "1.0.0"


# Pydantic models for API
class SemesterModel(BaseModel):
    season: Season
    year: int = Field(..., ge=1900, le=2200)


class AssignmentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    due_date: datetime
    description: Optional[str] = Field(None, max_length=5000)
    notes: Optional[str] = Field(None, max_length=5000)
    status: AssignmentStatus = AssignmentStatus.NOT_STARTED


class AssignmentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    due_date: Optional[datetime] = None
    submission_deadline: Optional[datetime] = None
    description: Optional[str] = Field(None, max_length=5000)
    notes: Optional[str] = Field(None, max_length=5000)
    status: Optional[AssignmentStatus] = None


class AssignmentResponse(BaseModel):
    id: str
    course_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    notes: Optional[str] = None
    due_date: datetime
    submission_deadline: Optional[datetime] = None
    status: AssignmentStatus
    is_overdue: bool
    created_at: datetime
    updated_at: datetime


class CourseCreate(BaseModel):
    id: Optional[str] = Field(None, min_length=1, max_length=36)
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=50)
    professor: Optional[str] = Field(None, max_length=255)
    semester: Optional[SemesterModel] = None
    description: Optional[str] = Field(None, max_length=5000)
    assignments: List[AssignmentCreate] = Field(default_factory=list)


class CourseUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=50)
    professor: Optional[str] = Field(None, max_length=255)
    semester: Optional[SemesterModel] = None
    description: Optional[str] = Field(None, max_length=5000)


class CourseResponse(BaseModel):
    id: str
    name: str
    code: str
    display_name: str
    professor: Optional[str] = None
    semester: Optional[SemesterModel] = None
    description: Optional[str] = None
    assignments: List[AssignmentResponse] = []


class SearchResultResponse(BaseModel):
    kind: str
    id: str
    title: str
    subtitle: str
    course_id: Optional[str] = None


class NotificationResponse(BaseModel):
    level: str
    title: str
    message: str
    assignment_id: Optional[str] = None
    count: Optional[int] = None
    created_at: datetime


class CourseKeeperRestAPI:
    """REST API implementation for the CourseKeeper platform."""

    def __init__(self, course_service: CourseService, assignment_service: AssignmentService,
                 search_service: SearchService, scheduler: Optional[DeadlineScheduler] = None):
        self._course_service = course_service
        self._assignment_service = assignment_service
        self._search_service = search_service
        self._scheduler = scheduler

        self._lock = threading.RLock()

        # Create FastAPI app
        self.app = FastAPI(
            title="CourseKeeper API",
            description="Course and assignment deadline tracking",
            version=API_VERSION,
            docs_url="/docs",
            redoc_url="/redoc"
        )

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self._setup_routes()

    def _setup_routes(self):
        """Setup API routes."""

        @self.app.get("/", response_model=Dict[str, str])
        async def root():
            """Root endpoint."""
            return {
                "message": "CourseKeeper API",
                "version": API_VERSION,
                "docs": "/docs"
            }

        @self.app.get("/health", response_model=Dict[str, Any])
        async def health_check():
            """Health check endpoint."""
            return {
                "status": "healthy",
                "timestamp": utc_now().isoformat(),
                "scheduler_running": bool(self._scheduler and self._scheduler.is_running),
            }

        # Course endpoints
        @self.app.get("/courses", response_model=List[CourseResponse])
        async def list_courses():
            """List all courses with their assignments."""
            with self._lock:
                courses = self._call(self._course_service.get_all_courses)
                return [self._course_to_response(c) for c in courses]

        @self.app.post("/courses", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
        async def create_course(course_data: CourseCreate):
            """Create a new course, optionally with assignments."""
            with self._lock:
                course = Course(
                    name=course_data.name,
                    code=course_data.code,
                    professor=course_data.professor,
                    semester=self._semester_from_model(course_data.semester),
                    description=course_data.description,
                    entity_id=course_data.id,
                )
                for item in course_data.assignments:
                    course.add_assignment(Assignment(
                        title=item.title,
                        due_date=item.due_date,
                        description=item.description,
                        notes=item.notes,
                        status=item.status,
                    ))
                self._call(self._course_service.add_course, course)
                return self._course_to_response(course)

        @self.app.get("/courses/{course_id}", response_model=CourseResponse)
        async def get_course(course_id: str):
            """Get a course by id."""
            with self._lock:
                return self._course_to_response(self._require_course(course_id))

        @self.app.put("/courses/{course_id}", response_model=CourseResponse)
        async def update_course(course_id: str, course_data: CourseUpdate):
            """Replace the scalar fields of a course; its assignments are kept."""
            with self._lock:
                course = self._require_course(course_id)
                course.name = course_data.name
                course.code = course_data.code
                course.professor = course_data.professor
                course.semester = self._semester_from_model(course_data.semester)
                course.description = course_data.description
                self._call(self._course_service.update_course, course)
                return self._course_to_response(course)

        @self.app.delete("/courses/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
        async def delete_course(course_id: str):
            """Delete a course and its assignments."""
            with self._lock:
                self._call(self._course_service.delete_course, course_id)
                return Response(status_code=status.HTTP_204_NO_CONTENT)

        # Assignment endpoints
        @self.app.get("/courses/{course_id}/assignments", response_model=List[AssignmentResponse])
        async def list_course_assignments(course_id: str):
            """List the assignments of one course."""
            with self._lock:
                self._require_course(course_id)
                assignments = self._call(self._assignment_service.get_assignments_by_course, course_id)
                return [self._assignment_to_response(a) for a in assignments]

        @self.app.post("/courses/{course_id}/assignments", response_model=AssignmentResponse,
                       status_code=status.HTTP_201_CREATED)
        async def create_assignment(course_id: str, assignment_data: AssignmentCreate):
            """Create an assignment under a course."""
            with self._lock:
                assignment = self._call(
                    self._assignment_service.create_assignment,
                    course_id,
                    assignment_data.title,
                    assignment_data.due_date,
                    description=assignment_data.description,
                    notes=assignment_data.notes,
                    status=assignment_data.status,
                )
                return self._assignment_to_response(assignment)

        @self.app.put("/courses/{course_id}/assignments/{assignment_id}", response_model=AssignmentResponse)
        async def update_assignment(course_id: str, assignment_id: str, assignment_data: AssignmentUpdate):
            """Update the supplied fields of an assignment."""
            with self._lock:
                course = self._require_course(course_id)
                assignment = course.get_assignment(assignment_id)
                if assignment is None:
                    raise HTTPException(status_code=404, detail=f"Assignment not found: {assignment_id}")

                changes = assignment_data.model_dump(exclude_unset=True)
                for required in ("title", "due_date", "status"):
                    if required in changes and changes[required] is None:
                        raise HTTPException(status_code=400, detail=f"Assignment {required.replace('_', ' ')} is required")
                self._call(assignment.update, **changes)
                self._call(self._assignment_service.update_assignment, assignment)
                return self._assignment_to_response(assignment)

        @self.app.delete("/courses/{course_id}/assignments/{assignment_id}",
                         status_code=status.HTTP_204_NO_CONTENT)
        async def delete_assignment(course_id: str, assignment_id: str):
            """Delete an assignment."""
            with self._lock:
                self._call(self._assignment_service.delete_assignment, course_id, assignment_id)
                return Response(status_code=status.HTTP_204_NO_CONTENT)

        @self.app.get("/assignments", response_model=List[AssignmentResponse])
        async def list_assignments(status_filter: Optional[AssignmentStatus] = Query(None, alias="status")):
            """List all assignments, optionally by status."""
            with self._lock:
                if status_filter is None:
                    assignments = self._call(self._assignment_service.get_all_assignments)
                else:
                    assignments = self._call(self._assignment_service.get_assignments_by_status, status_filter)
                return [self._assignment_to_response(a) for a in assignments]

        @self.app.get("/assignments/upcoming", response_model=List[AssignmentResponse])
        async def upcoming_assignments(days: int = Query(7, ge=1, le=365)):
            """Unsubmitted assignments due within the next days."""
            with self._lock:
                assignments = self._call(self._assignment_service.get_upcoming_assignments, days)
                return [self._assignment_to_response(a) for a in assignments]

        @self.app.get("/assignments/overdue", response_model=List[AssignmentResponse])
        async def overdue_assignments():
            """Assignments past their due date and not submitted."""
            with self._lock:
                assignments = self._call(self._assignment_service.get_overdue_assignments)
                return [self._assignment_to_response(a) for a in assignments]

        @self.app.get("/assignments/range", response_model=List[AssignmentResponse])
        async def assignments_in_range(start: datetime, end: datetime):
            """Assignments due within an inclusive date range."""
            if end < start:
                raise HTTPException(status_code=400, detail="Range end precedes range start")
            with self._lock:
                assignments = self._call(self._assignment_service.get_assignments_between_dates, start, end)
                return [self._assignment_to_response(a) for a in assignments]

        # Search
        @self.app.get("/search", response_model=List[SearchResultResponse])
        async def search(q: str = ""):
            """Search courses and assignments."""
            with self._lock:
                results = self._call(self._search_service.search, q)
                return [
                    SearchResultResponse(
                        kind=r.kind.value,
                        id=r.id,
                        title=r.title,
                        subtitle=r.subtitle,
                        course_id=r.course.id if r.course else None,
                    )
                    for r in results
                ]

        # Notifications
        @self.app.post("/notifications/check", response_model=List[NotificationResponse])
        async def check_notifications():
            """Run a deadline scan now."""
            if self._scheduler is None:
                raise HTTPException(status_code=503, detail="Deadline scheduler is not configured")
            notifications = self._call(self._scheduler.check_deadlines)
            return [NotificationResponse(**n.to_dict()) for n in notifications]

    def _call(self, func, *args, **kwargs):
        """Invoke a service call, mapping domain errors to HTTP errors."""
        try:
            return func(*args, **kwargs)
        except ResourceNotFoundError as e:
            raise HTTPException(status_code=404, detail=e.message)
        except DuplicateEntityError as e:
            raise HTTPException(status_code=409, detail=e.message)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=e.message)
        except PersistenceError as e:
            logger.error("Persistence failure: %s", e.message)
            raise HTTPException(status_code=500, detail=f"Persistence error: {e.message}")
        except CourseKeeperError as e:
            raise HTTPException(status_code=500, detail=f"Internal error: {e.message}")

    def _require_course(self, course_id: str) -> Course:
        course = self._call(self._course_service.get_course_by_id, course_id)
        if course is None:
            raise HTTPException(status_code=404, detail=f"Course not found: {course_id}")
        return course

    @staticmethod
    def _semester_from_model(model: Optional[SemesterModel]) -> Optional[Semester]:
        return Semester(model.season, model.year) if model else None

    def _course_to_response(self, course: Course) -> CourseResponse:
        """Convert course entity to response model."""
        return CourseResponse(
            id=course.id,
            name=course.name,
            code=course.code,
            display_name=course.display_name,
            professor=course.professor,
            semester=SemesterModel(season=course.semester.season, year=course.semester.year)
            if course.semester else None,
            description=course.description,
            assignments=[self._assignment_to_response(a) for a in course.assignments],
        )

    def _assignment_to_response(self, assignment: Assignment) -> AssignmentResponse:
        """Convert assignment entity to response model."""
        return AssignmentResponse(
            id=assignment.id,
            course_id=assignment.course_id,
            title=assignment.title,
            description=assignment.description,
            notes=assignment.notes,
            due_date=assignment.due_date,
            submission_deadline=assignment.submission_deadline,
            status=assignment.status,
            is_overdue=assignment.is_overdue(),
            created_at=assignment.created_at,
            updated_at=assignment.updated_at,
        )
