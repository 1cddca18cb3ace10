"""
Main entry point for the CourseKeeper platform.
"""

import threading
import time
from datetime import timedelta
from typing import Optional

from .config import AppConfig, load_config
from .core.entities import Assignment, Course, Semester
from .core.enums import AssignmentStatus, BackendType, Season
from .core.exceptions import CourseKeeperError, MigrationError
from .core.interfaces import CourseRepository, Notifier
from .logging_config import setup_logging
from .persistence import DataMigrationTool, JsonCourseRepository, MigrationReport, RepositoryFactory
from .services import AssignmentService, CourseService, DeadlineScheduler, SearchService
from .api.rest_api import CourseKeeperRestAPI
from .util.dates import format_datetime, relative_time, utc_now


class CourseKeeperPlatform:
    """Main platform class that wires the repository, services and APIs."""

    def __init__(self, config: Optional[AppConfig] = None, notifier: Optional[Notifier] = None):
        self._config = config or AppConfig()
        self._notifier = notifier
        self._repository: Optional[CourseRepository] = None
        self._course_service = None
        self._assignment_service = None
        self._search_service = None
        self._scheduler = None
        self._rest_api = None
        self._rest_thread = None
        self._running = False

        self._initialize_platform()

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def repository(self) -> CourseRepository:
        return self._repository

    @property
    def course_service(self) -> CourseService:
        return self._course_service

    @property
    def assignment_service(self) -> AssignmentService:
        return self._assignment_service

    @property
    def search_service(self) -> SearchService:
        return self._search_service

    @property
    def scheduler(self) -> DeadlineScheduler:
        return self._scheduler

    @property
    def rest_api(self) -> CourseKeeperRestAPI:
        return self._rest_api

    def _initialize_platform(self):
        """Initialize the platform with all services."""
        print("Initializing CourseKeeper platform...")

        self._repository = RepositoryFactory.create_repository(self._config)
        print(f"✓ Repository initialized: {self._config.backend.value}")

        self._course_service = CourseService(self._repository)
        self._assignment_service = AssignmentService(self._repository)
        self._search_service = SearchService(self._course_service, self._assignment_service)
        self._scheduler = DeadlineScheduler(
            self._assignment_service,
            notifier=self._notifier,
            interval_seconds=self._config.scheduler.interval_seconds,
            upcoming_window_days=self._config.scheduler.upcoming_window_days,
        )
        print("✓ Services initialized")

        self._rest_api = CourseKeeperRestAPI(
            self._course_service,
            self._assignment_service,
            self._search_service,
            self._scheduler,
        )
        print("✓ APIs initialized")

        print("✓ CourseKeeper platform initialized successfully!")

    def start_rest_server(self, host: Optional[str] = None, port: Optional[int] = None):
        """Start the REST server."""
        import uvicorn

        host = host or self._config.rest_host
        port = port or self._config.rest_port

        def run_server():
            uvicorn.run(
                self._rest_api.app,
                host=host,
                port=port,
                log_level=self._config.log_level.lower()
            )

        # Start server in a separate thread
        self._rest_thread = threading.Thread(target=run_server, name="RestServer", daemon=True)
        self._rest_thread.start()

        print(f"✓ REST server started on {host}:{port}")

    def start_platform(self, host: Optional[str] = None, rest_port: Optional[int] = None):
        """Start the scheduler and the REST server."""
        if self._running:
            print("Platform already running")
            return

        print("Starting CourseKeeper platform...")

        if self._config.scheduler.enabled:
            self._scheduler.start()
            print("✓ Deadline scheduler started")

        self.start_rest_server(host, rest_port)

        self._running = True
        port = rest_port or self._config.rest_port
        print("✓ CourseKeeper platform started successfully!")
        print(f"  - REST API: http://localhost:{port}")
        print(f"  - API Docs: http://localhost:{port}/docs")

    def stop_platform(self):
        """Stop the platform."""
        if not self._running:
            print("Platform not running")
            return

        print("Stopping CourseKeeper platform...")

        self._scheduler.stop(wait=True, timeout=5.0)
        print("✓ Deadline scheduler stopped")

        self._repository.close()
        print("✓ Repository closed")

        self._running = False
        print("✓ CourseKeeper platform stopped")

    def create_sample_data(self):
        """Create sample data for demonstration."""
        print("Creating sample data...")

        now = utc_now()
        semester = Semester(Season.FALL, now.year)

        course = Course(
            name="Introduction to Computer Science",
            code="CS101",
            professor="Dr. Ada Lovelace",
            semester=semester,
            description="Basic concepts of computer science and programming",
        )
        course.add_assignment(Assignment("Problem Set 1", now + timedelta(hours=10),
                                         description="Variables and control flow"))
        course.add_assignment(Assignment("Lab Report", now + timedelta(hours=50),
                                         status=AssignmentStatus.IN_PROGRESS))
        course.add_assignment(Assignment("Reading Response", now - timedelta(days=2)))
        self._course_service.add_course(course)

        math = self._course_service.create_course(
            "Linear Algebra", "MATH220", professor="Dr. Emmy Noether", semester=semester,
        )
        self._assignment_service.create_assignment(math.id, "Eigenvalues Worksheet", now + timedelta(days=6))

        print("✓ Sample data created")

    def run_demo(self):
        """Run a demonstration of the platform."""
        print("Running CourseKeeper platform demonstration...")

        if not self._course_service.get_all_courses():
            self.create_sample_data()

        print("\n=== Courses ===")
        for course in self._course_service.get_all_courses():
            print(f"{course.display_name} ({course.semester or 'No semester'}): "
                  f"{len(course.assignments)} assignment(s)")

        print("\n=== Upcoming (7 days) ===")
        for assignment in self._assignment_service.get_upcoming_assignments(7):
            print(f"{assignment.title}: {format_datetime(assignment.due_date)} "
                  f"({relative_time(assignment.due_date)})")

        print("\n=== Deadline Scan ===")
        for notification in self._scheduler.check_deadlines():
            print(f"{notification.title} - {notification.message}")

        print("\n=== Search 'cs' ===")
        for result in self._search_service.search("cs"):
            print(f"[{result.kind.value}] {result.title} | {result.subtitle}")

        print("\n✓ Demo completed")


def run_migration(config: AppConfig, overwrite: bool = False) -> MigrationReport:
    """Copy the JSON document into the configured relational backend."""
    if config.backend == BackendType.JSON:
        raise MigrationError("Migration target must be a relational backend (sqlite or postgresql)")

    print("===========================================")
    print("  CourseKeeper Data Migration")
    print(f"  JSON -> {config.backend.value}")
    print("===========================================")

    source = JsonCourseRepository(config.data_file)
    target = RepositoryFactory.create_repository(config)
    try:
        report = DataMigrationTool(source, target).migrate(overwrite=overwrite)
    finally:
        target.close()

    print(f"Courses migrated:     {report.courses_migrated}/{report.courses_total}")
    print(f"Assignments migrated: {report.assignments_migrated}/{report.assignments_total}")
    if report.success:
        print("\n✓ SUCCESS: All data migrated successfully!")
    else:
        print("\n⚠ WARNING: Some data may not have migrated.")
        for error in report.errors:
            print(f"  ✗ {error}")
    return report


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="CourseKeeper course and deadline tracker")
    parser.add_argument("--config", type=str, help="Configuration file path")
    parser.add_argument("--backend", choices=[b.value for b in BackendType], help="Storage backend")
    parser.add_argument("--host", type=str, help="REST server host")
    parser.add_argument("--rest-port", type=int, help="REST server port")
    parser.add_argument("--demo", action="store_true", help="Run demo mode")
    parser.add_argument("--migrate", action="store_true",
                        help="Copy the JSON data file into the relational backend and exit")
    parser.add_argument("--overwrite", action="store_true",
                        help="With --migrate, delete existing relational data first")

    args = parser.parse_args()

    try:
        config = load_config(args.config, backend=args.backend, rest_host=args.host,
                             rest_port=args.rest_port)
    except CourseKeeperError as e:
        parser.error(e.message)

    setup_logging(config.log_level)

    if args.migrate:
        try:
            report = run_migration(config, overwrite=args.overwrite)
        except CourseKeeperError as e:
            print(f"\n✗ Migration failed: {e.message}")
            raise SystemExit(1)
        raise SystemExit(0 if report.success else 1)

    # Create and start platform
    platform = CourseKeeperPlatform(config)

    try:
        if args.demo:
            platform.run_demo()
            platform.repository.close()
        else:
            platform.start_platform(args.host, args.rest_port)

            # Keep running
            print("\nPlatform is running. Press Ctrl+C to stop.")
            while True:
                time.sleep(1)

    except KeyboardInterrupt:
        print("\nShutting down...")
        platform.stop_platform()


if __name__ == "__main__":
    main()
