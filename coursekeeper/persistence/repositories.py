"""
Course repository implementations: a JSON document store and a relational store.
"""

import json
import os
import tempfile
import threading
from typing import Any, Dict, List, Optional

from ..config import AppConfig
from ..core.entities import Assignment, Course, Semester
from ..core.enums import AssignmentStatus, BackendType, Season
from ..core.exceptions import (
    ConfigurationError, DuplicateEntityError, PersistenceError, SchemaInitializationError,
)
from ..core.interfaces import CourseRepository
from ..logging_config import get_logger
from ..util.dates import parse_timestamp, to_iso, utc_now
from .database import DatabaseFactory, DatabaseManager

logger = get_logger(__name__)


class JsonCourseRepository(CourseRepository):
    """File-based repository keeping the whole course graph in memory.

    The document on disk is ``{"courses": [...]}`` and is rewritten in full
    after every mutation. Reads are served from memory and hand out copies,
    so callers never share objects with the store.
    """

    def __init__(self, file_path: str = os.path.join("data", "scheduler-data.json")):
        self._file_path = file_path
        self._courses: List[Course] = []
        self._lock = threading.RLock()
        self._ensure_directory_exists()
        self.load()

    @property
    def file_path(self) -> str:
        return self._file_path

    def _ensure_directory_exists(self) -> None:
        """Ensure the data directory exists."""
        directory = os.path.dirname(os.path.abspath(self._file_path))
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            logger.error("Failed to create data directory %s: %s", directory, e)

    def load(self) -> None:
        """Read the document from disk, starting empty when it is absent or unreadable."""
        with self._lock:
            if not os.path.exists(self._file_path):
                self._courses = []
                return

            try:
                with open(self._file_path, "r", encoding="utf-8") as f:
                    document = json.load(f)
                self._courses = [Course.from_dict(c) for c in document.get("courses") or []]
                logger.info("Loaded %d courses from %s", len(self._courses), self._file_path)
            except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
                logger.error("Failed to load data from %s: %s", self._file_path, e)
                self._courses = []

    def save(self) -> None:
        """Serialize every course and overwrite the document."""
        with self._lock:
            try:
                text = json.dumps({"courses": [c.to_dict() for c in self._courses]}, indent=2)
            except (TypeError, ValueError, AttributeError) as e:
                logger.error("Failed to serialize data for %s: %s", self._file_path, e)
                raise PersistenceError(f"Failed to serialize data: {str(e)}") from e

            directory = os.path.dirname(os.path.abspath(self._file_path))
            try:
                fd, tmp_path = tempfile.mkstemp(prefix=".scheduler-", suffix=".json", dir=directory)
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as f:
                        f.write(text)
                    os.replace(tmp_path, self._file_path)
                except BaseException:
                    if os.path.exists(tmp_path):
                        os.remove(tmp_path)
                    raise
            except OSError as e:
                logger.error("Failed to save data to %s: %s", self._file_path, e)
                raise PersistenceError(f"Failed to save data: {str(e)}") from e

    def get_all_courses(self) -> List[Course]:
        with self._lock:
            return [c.copy() for c in self._courses]

    def get_course_by_id(self, course_id: str) -> Optional[Course]:
        with self._lock:
            index = self._index_of(course_id)
            return self._courses[index].copy() if index is not None else None

    def add_course(self, course: Course) -> None:
        with self._lock:
            if self._index_of(course.id) is not None:
                raise DuplicateEntityError(f"Course already exists: {course.id}")
            self._courses.append(course.copy())
            self._save_or_revert(lambda: self._courses.pop())

    def update_course(self, course: Course) -> None:
        with self._lock:
            index = self._index_of(course.id)
            if index is None:
                logger.debug("Update ignored, course %s is not stored", course.id)
                return
            previous = self._courses[index]
            self._courses[index] = course.copy()
            self._save_or_revert(lambda: self._courses.__setitem__(index, previous))

    def delete_course(self, course_id: str) -> None:
        with self._lock:
            index = self._index_of(course_id)
            if index is None:
                return
            removed = self._courses.pop(index)
            self._save_or_revert(lambda: self._courses.insert(index, removed))

    def _save_or_revert(self, revert) -> None:
        # Memory must not run ahead of the document when a write fails.
        try:
            self.save()
        except PersistenceError:
            revert()
            raise

    def _index_of(self, course_id: str) -> Optional[int]:
        for index, course in enumerate(self._courses):
            if course.id == course_id:
                return index
        return None


class SqlCourseRepository(CourseRepository):
    """Relational repository storing courses and assignments in two tables.

    Every public operation runs in exactly one transaction on one pooled
    connection. Assignment sets are reconciled by deleting every row of the
    course and re-inserting the supplied list, keeping assignment ids.
    """

    _SCHEMAS = {
        BackendType.SQLITE: {
            "courses": """
                CREATE TABLE IF NOT EXISTS courses (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    code TEXT NOT NULL,
                    description TEXT,
                    professor TEXT,
                    semester_season TEXT,
                    semester_year INTEGER,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """,
            "assignments": """
                CREATE TABLE IF NOT EXISTS assignments (
                    id TEXT PRIMARY KEY,
                    course_id TEXT NOT NULL REFERENCES courses(id) ON DELETE CASCADE,
                    title TEXT NOT NULL,
                    description TEXT,
                    due_date TEXT NOT NULL,
                    submission_deadline TEXT,
                    status TEXT NOT NULL,
                    notes TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """,
        },
        BackendType.POSTGRESQL: {
            "courses": """
                CREATE TABLE IF NOT EXISTS courses (
                    id VARCHAR(36) PRIMARY KEY,
                    name VARCHAR(255) NOT NULL,
                    code VARCHAR(50) NOT NULL,
                    description TEXT,
                    professor VARCHAR(255),
                    semester_season VARCHAR(20),
                    semester_year INTEGER,
                    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
            """,
            "assignments": """
                CREATE TABLE IF NOT EXISTS assignments (
                    id VARCHAR(36) PRIMARY KEY,
                    course_id VARCHAR(36) NOT NULL REFERENCES courses(id) ON DELETE CASCADE,
                    title VARCHAR(255) NOT NULL,
                    description TEXT,
                    due_date TIMESTAMPTZ NOT NULL,
                    submission_deadline TIMESTAMPTZ,
                    status VARCHAR(20) NOT NULL,
                    notes TEXT,
                    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
            """,
        },
    }

    _INDEXES = {
        "idx_courses_semester": "CREATE INDEX IF NOT EXISTS idx_courses_semester ON courses (semester_season, semester_year)",
        "idx_courses_code": "CREATE INDEX IF NOT EXISTS idx_courses_code ON courses (code)",
        "idx_courses_name": "CREATE INDEX IF NOT EXISTS idx_courses_name ON courses (name)",
        "idx_assignments_course_id": "CREATE INDEX IF NOT EXISTS idx_assignments_course_id ON assignments (course_id)",
        "idx_assignments_due_date": "CREATE INDEX IF NOT EXISTS idx_assignments_due_date ON assignments (due_date)",
        "idx_assignments_status": "CREATE INDEX IF NOT EXISTS idx_assignments_status ON assignments (status)",
        "idx_assignments_course_status": "CREATE INDEX IF NOT EXISTS idx_assignments_course_status ON assignments (course_id, status)",
    }

    _SELECT_COURSES = """
        SELECT id, name, code, description, professor, semester_season, semester_year
        FROM courses
    """
    _ORDER_COURSES = " ORDER BY semester_year DESC NULLS LAST, semester_season, name, id"

    def __init__(self, database: DatabaseManager):
        self._database = database
        self._initialize_schema()

    @property
    def database(self) -> DatabaseManager:
        return self._database

    def _initialize_schema(self) -> None:
        """Create tables and indexes if they do not exist yet."""
        statements = dict(self._SCHEMAS[self._database.backend])
        statements.update(self._INDEXES)
        try:
            self._database.create_tables(statements)
        except PersistenceError as e:
            logger.error("Failed to initialize schema: %s", e)
            raise SchemaInitializationError(f"Database initialization failed: {str(e)}") from e
        logger.info("Database schema initialized successfully")

    def get_all_courses(self) -> List[Course]:
        with self._database.transaction() as tx:
            rows = tx.query(self._SELECT_COURSES + self._ORDER_COURSES)
            # One assignment query per course; fine at this scale.
            return [self._load_course(tx, row) for row in rows]

    def get_course_by_id(self, course_id: str) -> Optional[Course]:
        with self._database.transaction() as tx:
            rows = tx.query(self._SELECT_COURSES + " WHERE id = ?", (course_id,))
            if not rows:
                return None
            return self._load_course(tx, rows[0])

    def add_course(self, course: Course) -> None:
        now = to_iso(utc_now())
        season, year = self._semester_columns(course.semester)
        try:
            with self._database.transaction() as tx:
                if tx.query("SELECT id FROM courses WHERE id = ?", (course.id,)):
                    raise DuplicateEntityError(f"Course already exists: {course.id}")
                tx.execute(
                    """
                    INSERT INTO courses (id, name, code, description, professor,
                                         semester_season, semester_year, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (course.id, course.name, course.code, course.description, course.professor,
                     season, year, now, now),
                )
                for assignment in course.assignments:
                    self._insert_assignment(tx, course.id, assignment)
        except PersistenceError as e:
            logger.error("Failed to add course %s: %s", course.id, e)
            raise

    def update_course(self, course: Course) -> None:
        season, year = self._semester_columns(course.semester)
        try:
            with self._database.transaction() as tx:
                updated = tx.execute(
                    """
                    UPDATE courses
                    SET name = ?, code = ?, description = ?, professor = ?,
                        semester_season = ?, semester_year = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (course.name, course.code, course.description, course.professor,
                     season, year, to_iso(utc_now()), course.id),
                )
                if updated == 0:
                    logger.debug("Update ignored, course %s is not stored", course.id)
                    return

                # Sync assignments - delete all and re-insert
                tx.execute("DELETE FROM assignments WHERE course_id = ?", (course.id,))
                for assignment in course.assignments:
                    self._insert_assignment(tx, course.id, assignment)
        except PersistenceError as e:
            logger.error("Failed to update course %s: %s", course.id, e)
            raise

    def delete_course(self, course_id: str) -> None:
        try:
            with self._database.transaction() as tx:
                # Assignments go with the course via ON DELETE CASCADE
                tx.execute("DELETE FROM courses WHERE id = ?", (course_id,))
        except PersistenceError as e:
            logger.error("Failed to delete course %s: %s", course_id, e)
            raise

    def load(self) -> None:
        # Nothing to materialize; every call reads the database.
        pass

    def save(self) -> None:
        # Writes are committed per call.
        pass

    def close(self) -> None:
        self._database.close()

    def _load_course(self, tx, row: Dict[str, Any]) -> Course:
        course = self._row_to_course(row)
        assignment_rows = tx.query(
            """
            SELECT id, course_id, title, description, due_date, submission_deadline,
                   status, notes, created_at, updated_at
            FROM assignments
            WHERE course_id = ?
            ORDER BY due_date, id
            """,
            (course.id,),
        )
        course.assignments = [self._row_to_assignment(r) for r in assignment_rows]
        return course

    def _insert_assignment(self, tx, course_id: str, assignment: Assignment) -> None:
        assignment.course_id = course_id
        tx.execute(
            """
            INSERT INTO assignments
            (id, course_id, title, description, due_date, submission_deadline,
             status, notes, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                assignment.id,
                course_id,
                assignment.title,
                assignment.description,
                to_iso(assignment.due_date),
                to_iso(assignment.submission_deadline),
                assignment.status.name,
                assignment.notes,
                to_iso(assignment.created_at),
                to_iso(assignment.updated_at),
            ),
        )

    @staticmethod
    def _semester_columns(semester: Optional[Semester]):
        if semester is None:
            return None, None
        return semester.season.name, semester.year

    @staticmethod
    def _row_to_course(row: Dict[str, Any]) -> Course:
        semester = None
        if row.get("semester_season") and row.get("semester_year") is not None:
            semester = Semester(Season[row["semester_season"]], int(row["semester_year"]))
        return Course(
            name=row["name"],
            code=row["code"],
            professor=row.get("professor"),
            semester=semester,
            description=row.get("description"),
            entity_id=row["id"],
        )

    @staticmethod
    def _row_to_assignment(row: Dict[str, Any]) -> Assignment:
        assignment = Assignment(
            title=row["title"],
            due_date=parse_timestamp(row["due_date"]),
            description=row.get("description"),
            notes=row.get("notes"),
            status=AssignmentStatus[row["status"]],
            course_id=row["course_id"],
            entity_id=row["id"],
            created_at=parse_timestamp(row.get("created_at")),
            updated_at=parse_timestamp(row.get("updated_at")),
        )
        assignment._submission_deadline = parse_timestamp(row.get("submission_deadline"))
        return assignment


class RepositoryFactory:
    """Factory for creating the single repository a process runs on."""

    @staticmethod
    def create_repository(config: AppConfig) -> CourseRepository:
        """Create a repository instance based on the configured backend."""
        if config.backend == BackendType.JSON:
            return JsonCourseRepository(config.data_file)
        elif config.backend in (BackendType.SQLITE, BackendType.POSTGRESQL):
            database = DatabaseFactory.create_database(config.database_config())
            try:
                return SqlCourseRepository(database)
            except SchemaInitializationError:
                database.close()
                raise
        else:
            raise ConfigurationError(f"Unsupported repository backend: {config.backend}")
