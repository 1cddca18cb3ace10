#!/usr/bin/env python3
"""
Demo scenario for the CourseKeeper platform.
"""

import os
import sys
import tempfile
from datetime import timedelta

# Add the project root to the Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from coursekeeper.config import load_config
from coursekeeper.core.entities import Assignment, Course, Semester
from coursekeeper.core.enums import AssignmentStatus, BackendType, Season
from coursekeeper.logging_config import setup_logging
from coursekeeper.main import CourseKeeperPlatform
from coursekeeper.persistence import DataMigrationTool, RepositoryFactory
from coursekeeper.services import FilterCriteria
from coursekeeper.util.dates import format_datetime, relative_time, utc_now


def run_demo():
    """Run a walkthrough of the CourseKeeper platform against a temporary store."""
    print("=" * 60)
    print("COURSEKEEPER - DEMO")
    print("=" * 60)

    setup_logging("WARNING")
    workdir = tempfile.mkdtemp(prefix="coursekeeper-demo-")
    config = load_config(
        environ={},
        backend=BackendType.JSON,
        data_file=os.path.join(workdir, "scheduler-data.json"),
    )

    received = []
    platform = CourseKeeperPlatform(config, notifier=received.append)

    try:
        print("\n1. Creating sample data...")
        create_sample_data(platform)

        print("\n2. Querying assignments...")
        demonstrate_queries(platform)

        print("\n3. Editing an aggregate...")
        demonstrate_updates(platform)

        print("\n4. Searching...")
        demonstrate_search(platform)

        print("\n5. Scanning deadlines...")
        demonstrate_scheduler(platform, received)

        print("\n6. Migrating JSON data to SQLite...")
        demonstrate_migration(platform, workdir)

        print("\n" + "=" * 60)
        print("DEMO COMPLETED SUCCESSFULLY!")
        print("=" * 60)

    finally:
        platform.repository.close()
        print(f"\nDemo data kept in {workdir}")


def create_sample_data(platform):
    """Create two courses with assignments in every urgency band."""
    now = utc_now()
    semester = Semester(Season.FALL, now.year)

    systems = Course("Operating Systems", "CS350", professor="Dr. Andrew Tanenbaum", semester=semester)
    systems.add_assignment(Assignment("Scheduler Lab", now + timedelta(hours=10),
                                      description="Round robin with priorities"))
    systems.add_assignment(Assignment("Paging Quiz", now + timedelta(hours=50)))
    systems.add_assignment(Assignment("Filesystem Project", now + timedelta(hours=100)))
    systems.add_assignment(Assignment("Threads Homework", now - timedelta(days=1)))
    platform.course_service.add_course(systems)
    print(f"  Created {systems.display_name} with {len(systems.assignments)} assignments")

    history = platform.course_service.create_course(
        "Modern History", "HIST210", professor="Dr. Eric Hobsbawm", semester=Semester(Season.SPRING, now.year),
    )
    platform.assignment_service.create_assignment(
        history.id, "Essay on Industrialization", now + timedelta(days=2),
        status=AssignmentStatus.SUBMITTED,
    )
    print(f"  Created {history.display_name} with 1 assignment")


def demonstrate_queries(platform):
    """Show the derived views over all assignments."""
    service = platform.assignment_service

    print("  Upcoming within 7 days:")
    for assignment in service.get_upcoming_assignments(7):
        print(f"    - {assignment.title}: {format_datetime(assignment.due_date)} "
              f"({relative_time(assignment.due_date)})")

    print("  Overdue:")
    for assignment in service.get_overdue_assignments():
        print(f"    - {assignment.title} ({relative_time(assignment.due_date)})")

    submitted = service.get_assignments_by_status(AssignmentStatus.SUBMITTED)
    print(f"  Submitted: {', '.join(a.title for a in submitted) or 'none'}")


def demonstrate_updates(platform):
    """Mark work as submitted and remove an assignment."""
    course = platform.course_service.search_courses("CS350")[0]
    lab = next(a for a in course.assignments if a.title == "Scheduler Lab")

    platform.assignment_service.update_status(course.id, lab.id, AssignmentStatus.SUBMITTED)
    print(f"  Marked '{lab.title}' as {AssignmentStatus.SUBMITTED}")

    homework = next(a for a in course.assignments if a.title == "Threads Homework")
    platform.assignment_service.delete_assignment(course.id, homework.id)
    remaining = platform.assignment_service.get_assignments_by_course(course.id)
    print(f"  Deleted '{homework.title}', {len(remaining)} assignments remain")


def demonstrate_search(platform):
    """Run a combined search and a filtered listing."""
    for result in platform.search_service.search("s"):
        print(f"  [{result.kind.value}] {result.title} | {result.subtitle}")

    course = platform.course_service.search_courses("CS350")[0]
    pending = platform.search_service.filter_assignments(
        FilterCriteria(course_id=course.id, status=AssignmentStatus.NOT_STARTED)
    )
    print(f"  Not started in {course.code}: {', '.join(a.title for a in pending)}")


def demonstrate_scheduler(platform, received):
    """Run one deadline scan through the platform's scheduler."""
    platform.scheduler.check_deadlines()
    for notification in received:
        print(f"  {notification.title} - {notification.message}")
    if not received:
        print("  No deadlines need attention")


def demonstrate_migration(platform, workdir):
    """Copy the JSON store into a SQLite database twice to show idempotence."""
    target_config = load_config(
        environ={},
        backend=BackendType.SQLITE,
        database={"database_path": os.path.join(workdir, "coursekeeper.db")},
    )
    target = RepositoryFactory.create_repository(target_config)
    try:
        tool = DataMigrationTool(platform.repository, target)
        first = tool.migrate()
        second = tool.migrate()
        print(f"  First run:  {first.summary()}")
        print(f"  Second run: {second.summary()} ({second.courses_updated} reconciled)")
        print(f"  SQLite now holds {len(target.get_all_courses())} courses")
    finally:
        target.close()


if __name__ == "__main__":
    run_demo()
