"""Tests for assignment queries and edits, on both backends."""
from datetime import timedelta

import pytest

from coursekeeper.core.entities import Assignment
from coursekeeper.core.enums import AssignmentStatus
from coursekeeper.core.exceptions import AssignmentNotFoundError, CourseNotFoundError

from conftest import FIXED_NOW, due_in, make_course


def test_all_assignments_are_flattened(assignment_service, populated):
    titles = {a.title for a in assignment_service.get_all_assignments()}
    assert titles == {"Homework 1", "Project Proposal", "Final Project", "Reading Quiz"}


def test_assignments_by_course(assignment_service, populated):
    cs, math = populated
    assert len(assignment_service.get_assignments_by_course(cs.id)) == 4
    assert assignment_service.get_assignments_by_course(math.id) == []
    assert assignment_service.get_assignments_by_course("unknown") == []


def test_deleted_course_has_no_assignments(course_service, assignment_service, populated):
    cs, _ = populated
    course_service.delete_course(cs.id)

    assert course_service.get_course_by_id(cs.id) is None
    assert assignment_service.get_assignments_by_course(cs.id) == []


def test_assignment_by_id_and_status(assignment_service, populated):
    cs, _ = populated
    homework = cs.assignments[0]
    assert assignment_service.get_assignment_by_id(homework.id).title == "Homework 1"
    assert assignment_service.get_assignment_by_id("missing") is None
    assert len(assignment_service.get_assignments_by_status(AssignmentStatus.NOT_STARTED)) == 4
    assert assignment_service.get_assignments_by_status(AssignmentStatus.LATE) == []


def test_upcoming_is_sorted_and_excludes_submitted(assignment_service, populated):
    cs, _ = populated
    assignment_service.update_status(cs.id, cs.assignments[1].id, AssignmentStatus.SUBMITTED)

    upcoming = assignment_service.get_upcoming_assignments(7)

    assert [a.title for a in upcoming] == ["Homework 1", "Final Project"]


def test_upcoming_window_is_exclusive(assignment_service, course_service):
    course_service.add_course(make_course(assignments=[
        Assignment("At now", FIXED_NOW),
        Assignment("At horizon", due_in(days=3)),
        Assignment("Inside", due_in(days=3) - timedelta(seconds=1)),
    ]))

    assert [a.title for a in assignment_service.get_upcoming_assignments(3)] == ["Inside"]


def test_overdue_is_sorted_and_ignores_submitted(assignment_service, course_service):
    course = make_course(assignments=[
        Assignment("Recent", due_in(hours=-2)),
        Assignment("Ancient", due_in(days=-10)),
        Assignment("Handed in", due_in(days=-5), status=AssignmentStatus.SUBMITTED),
        Assignment("Late but tracked", due_in(days=-3), status=AssignmentStatus.LATE),
    ])
    course_service.add_course(course)

    overdue = assignment_service.get_overdue_assignments()

    assert [a.title for a in overdue] == ["Ancient", "Late but tracked", "Recent"]


def test_overdue_accepts_explicit_now(assignment_service, populated):
    later = FIXED_NOW + timedelta(days=30)
    assert len(assignment_service.get_overdue_assignments(now=later)) == 4


def test_between_dates_scenario(course_service, assignment_service):
    course = course_service.create_course("Intro", "CS101")
    hw1 = assignment_service.create_assignment(course.id, "HW1", due_in(days=2))

    in_range = assignment_service.get_assignments_between_dates(FIXED_NOW, due_in(days=3))
    assert [a.id for a in in_range] == [hw1.id]
    assert assignment_service.get_assignments_between_dates(due_in(days=3), due_in(days=10)) == []


def test_between_dates_is_inclusive(assignment_service, course_service):
    course_service.add_course(make_course(assignments=[
        Assignment("Start", due_in(days=1)),
        Assignment("End", due_in(days=2)),
    ]))

    result = assignment_service.get_assignments_between_dates(due_in(days=1), due_in(days=2))
    assert [a.title for a in result] == ["Start", "End"]


def test_search_assignments(assignment_service, populated):
    assert [a.title for a in assignment_service.search_assignments("LOOPS")] == ["Homework 1"]
    assert [a.title for a in assignment_service.search_assignments("three")] == ["Project Proposal"]
    assert assignment_service.search_assignments(" ") == []
    assert assignment_service.search_assignments("lists ") == []


def test_create_assignment_under_unknown_course_fails(assignment_service):
    with pytest.raises(CourseNotFoundError) as excinfo:
        assignment_service.create_assignment("missing", "Orphan", due_in(days=1))
    assert excinfo.value.course_id == "missing"


def test_create_assignment_is_persisted(assignment_service, populated):
    _, math = populated
    created = assignment_service.create_assignment(
        math.id, "Worksheet", due_in(days=6), notes="Chapter 5", status=AssignmentStatus.IN_PROGRESS,
    )

    stored = assignment_service.get_assignments_by_course(math.id)
    assert [a.id for a in stored] == [created.id]
    assert stored[0].course_id == math.id
    assert stored[0].status == AssignmentStatus.IN_PROGRESS


def test_update_assignment_writes_back(assignment_service, populated):
    cs, _ = populated
    assignment = assignment_service.get_assignment_by_id(cs.assignments[0].id)
    assignment.title = "Homework 1 (extended)"
    assignment.due_date = due_in(days=4)

    assignment_service.update_assignment(assignment)

    stored = assignment_service.get_assignment_by_id(assignment.id)
    assert stored.title == "Homework 1 (extended)"
    assert stored.due_date == due_in(days=4)
    assert len(assignment_service.get_assignments_by_course(cs.id)) == 4


def test_update_assignment_failures(assignment_service, populated):
    cs, math = populated

    unknown = Assignment("Ghost", due_in(days=1), course_id=cs.id)
    with pytest.raises(AssignmentNotFoundError):
        assignment_service.update_assignment(unknown)

    orphan = Assignment("Orphan", due_in(days=1), course_id="missing")
    with pytest.raises(CourseNotFoundError):
        assignment_service.update_assignment(orphan)

    with pytest.raises(AssignmentNotFoundError):
        assignment_service.update_status(math.id, cs.assignments[0].id, AssignmentStatus.SUBMITTED)


def test_delete_assignment(assignment_service, populated):
    cs, _ = populated
    target = cs.assignments[0]

    assignment_service.delete_assignment(cs.id, target.id)

    remaining = assignment_service.get_assignments_by_course(cs.id)
    assert target.id not in {a.id for a in remaining}
    assert len(remaining) == 3


def test_delete_assignment_with_unknown_ids_is_silent(assignment_service, populated):
    cs, _ = populated
    assignment_service.delete_assignment("missing", cs.assignments[0].id)
    assignment_service.delete_assignment(cs.id, "missing")
    assert len(assignment_service.get_assignments_by_course(cs.id)) == 4
