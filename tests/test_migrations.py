"""Tests for JSON to relational data migration."""
import pytest

from coursekeeper.core.entities import Assignment
from coursekeeper.core.exceptions import MigrationError
from coursekeeper.persistence import DataMigrationTool

from conftest import due_in, make_course


def _snapshot(repo):
    return sorted((c.to_dict() for c in repo.get_all_courses()), key=lambda c: c["id"])


@pytest.fixture
def source(json_repo):
    json_repo.add_course(make_course(code="CS101", assignments=[
        Assignment("A", due_in(days=1)),
        Assignment("B", due_in(days=2)),
    ]))
    json_repo.add_course(make_course(code="CS102", semester=None, assignments=[
        Assignment("C", due_in(days=3)),
    ]))
    json_repo.add_course(make_course(code="CS103"))
    return json_repo


def test_migration_copies_every_aggregate(source, sqlite_repo):
    report = DataMigrationTool(source, sqlite_repo).migrate()

    assert report.success
    assert (report.courses_migrated, report.courses_total) == (3, 3)
    assert (report.assignments_migrated, report.assignments_total) == (3, 3)
    assert _snapshot(sqlite_repo) == _snapshot(source)


def test_migration_is_idempotent(source, sqlite_repo):
    tool = DataMigrationTool(source, sqlite_repo)
    first = tool.migrate()
    state = _snapshot(sqlite_repo)

    second = tool.migrate()

    assert _snapshot(sqlite_repo) == state
    assert second.courses_migrated == first.courses_migrated
    assert second.assignments_migrated == first.assignments_migrated
    assert second.courses_updated == 3


def test_overwrite_replaces_existing_target_data(source, sqlite_repo):
    stale = make_course(code="OLD100")
    sqlite_repo.add_course(stale)

    report = DataMigrationTool(source, sqlite_repo).migrate(overwrite=True)

    assert report.courses_deleted == 1
    assert sqlite_repo.get_course_by_id(stale.id) is None
    assert _snapshot(sqlite_repo) == _snapshot(source)


def test_without_overwrite_existing_target_data_is_kept(source, sqlite_repo):
    extra = make_course(code="KEEP100")
    sqlite_repo.add_course(extra)

    DataMigrationTool(source, sqlite_repo).migrate()

    assert sqlite_repo.get_course_by_id(extra.id) is not None
    assert len(sqlite_repo.get_all_courses()) == 4


def test_per_course_failures_are_counted(source, sqlite_repo):
    broken = make_course(code="BROKEN", assignments=[
        Assignment("X", due_in(days=1), entity_id="dup"),
        Assignment("Y", due_in(days=1), entity_id="dup"),
    ])
    source.add_course(broken)

    report = DataMigrationTool(source, sqlite_repo).migrate()

    assert not report.success
    assert report.courses_migrated == 3
    assert len(report.errors) == 1
    assert "BROKEN" in report.errors[0]
    assert sqlite_repo.get_course_by_id(broken.id) is None


def test_empty_source_reports_nothing(json_repo, sqlite_repo):
    report = DataMigrationTool(json_repo, sqlite_repo).migrate()
    assert report.courses_total == 0
    assert report.success


def test_source_and_target_must_differ(json_repo):
    with pytest.raises(MigrationError):
        DataMigrationTool(json_repo, json_repo)
