"""
Bulk data migration between course repositories.
"""

from dataclasses import dataclass, field
from typing import List

from ..core.exceptions import CourseKeeperError, MigrationError
from ..core.interfaces import CourseRepository
from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class MigrationReport:
    """Per-run counts of a migration."""
    courses_total: int = 0
    courses_migrated: int = 0
    courses_updated: int = 0
    courses_deleted: int = 0
    assignments_total: int = 0
    assignments_migrated: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return (not self.errors
                and self.courses_migrated == self.courses_total
                and self.assignments_migrated == self.assignments_total)

    def summary(self) -> str:
        return (f"Courses migrated: {self.courses_migrated}/{self.courses_total}, "
                f"assignments migrated: {self.assignments_migrated}/{self.assignments_total}")


class DataMigrationTool:
    """Copies every course aggregate from a source repository into a target.

    Courses already present in the target are reconciled with
    ``update_course`` so that running the migration again leaves the target
    unchanged.
    """

    def __init__(self, source: CourseRepository, target: CourseRepository):
        if source is target:
            raise MigrationError("Source and target repositories must differ")
        self._source = source
        self._target = target

    def migrate(self, overwrite: bool = False) -> MigrationReport:
        """Run the migration. With ``overwrite`` the target is emptied first."""
        report = MigrationReport()

        courses = self._source.get_all_courses()
        report.courses_total = len(courses)
        report.assignments_total = sum(len(c.assignments) for c in courses)
        logger.info("Found %d courses and %d assignments to migrate",
                    report.courses_total, report.assignments_total)

        if not courses:
            logger.warning("No data to migrate")
            return report

        existing = self._target.get_all_courses()
        if existing and overwrite:
            for course in existing:
                self._target.delete_course(course.id)
            report.courses_deleted = len(existing)
            logger.info("Deleted %d existing courses from target", len(existing))
            existing_ids = set()
        else:
            existing_ids = {c.id for c in existing}

        for course in courses:
            try:
                if course.id in existing_ids:
                    self._target.update_course(course)
                    report.courses_updated += 1
                else:
                    self._target.add_course(course)
                report.courses_migrated += 1
                report.assignments_migrated += len(course.assignments)
                logger.info("Migrated %s (%d assignments)", course.display_name, len(course.assignments))
            except CourseKeeperError as e:
                message = f"Error migrating course {course.code}: {e.message}"
                report.errors.append(message)
                logger.error(message)

        logger.info(report.summary())
        return report
