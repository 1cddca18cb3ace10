"""Tests for deadline classification and the background scheduler."""
import threading
import time
from datetime import timedelta

import pytest

from coursekeeper.core.entities import Assignment
from coursekeeper.core.enums import AssignmentStatus, NotificationLevel, UrgencyBand
from coursekeeper.core.exceptions import SchedulingError
from coursekeeper.services import DeadlineScheduler, classify_assignment

from conftest import FIXED_NOW, due_in


def wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


class StubAssignments:
    """Assignment service stand-in with scripted results."""

    def __init__(self, upcoming=None, overdue=None, block=None, fail_first=False):
        self.upcoming = upcoming or []
        self.overdue = overdue or []
        self.block = block
        self.fail_first = fail_first
        self.calls = 0
        self.started = threading.Event()

    def get_upcoming_assignments(self, days_ahead, now=None):
        self.calls += 1
        self.started.set()
        if self.block is not None:
            self.block.wait(5)
        if self.fail_first and self.calls == 1:
            raise RuntimeError("database unavailable")
        return self.upcoming

    def get_overdue_assignments(self, now=None):
        return self.overdue


@pytest.mark.parametrize("hours, band", [
    (10, UrgencyBand.URGENT),
    (24, UrgencyBand.URGENT),
    (24.9, UrgencyBand.URGENT),
    (50, UrgencyBand.HEADS_UP),
    (72, UrgencyBand.HEADS_UP),
    (100, None),
])
def test_classify_assignment(hours, band):
    assignment = Assignment("Work", due_in(hours=hours))
    assert classify_assignment(assignment, FIXED_NOW) == band


def test_classify_ignores_submitted_and_past_work():
    assert classify_assignment(Assignment("Done", due_in(hours=5), status=AssignmentStatus.SUBMITTED),
                               FIXED_NOW) is None
    assert classify_assignment(Assignment("Past", due_in(hours=-5)), FIXED_NOW) is None


def test_check_deadlines_emits_expected_notifications(assignment_service, populated):
    received = []
    scheduler = DeadlineScheduler(assignment_service, notifier=received.append, clock=lambda: FIXED_NOW)

    notifications = scheduler.check_deadlines()

    assert notifications == received
    assert [(n.level, n.title, n.message) for n in notifications] == [
        (NotificationLevel.URGENT, "Assignment Due Soon!", "Homework 1 is due in 10 hours"),
        (NotificationLevel.HEADS_UP, "Upcoming Deadline", "Project Proposal is due in 2 days"),
        (NotificationLevel.OVERDUE, "Overdue Assignments", "You have 1 overdue assignment(s)"),
    ]
    assert notifications[2].count == 1
    assert scheduler.scan_count == 1
    assert scheduler.last_run_at == FIXED_NOW


def test_check_deadlines_with_nothing_due(assignment_service):
    scheduler = DeadlineScheduler(assignment_service, notifier=lambda n: None, clock=lambda: FIXED_NOW)
    assert scheduler.check_deadlines() == []


def test_notifier_failures_do_not_abort_the_scan(assignment_service, populated):
    delivered = []

    def flaky(notification):
        if notification.level == NotificationLevel.URGENT:
            raise RuntimeError("tray unavailable")
        delivered.append(notification)

    scheduler = DeadlineScheduler(assignment_service, notifier=flaky, clock=lambda: FIXED_NOW)

    assert len(scheduler.check_deadlines()) == 3
    assert [n.level for n in delivered] == [NotificationLevel.HEADS_UP, NotificationLevel.OVERDUE]


def test_worker_runs_immediately_and_repeats():
    service = StubAssignments(overdue=[Assignment("Late", due_in(days=-1))])
    received = []
    scheduler = DeadlineScheduler(service, notifier=received.append, interval_seconds=0.05)

    scheduler.start()
    scheduler.start()
    try:
        assert wait_for(lambda: scheduler.scan_count >= 3)
        assert scheduler.is_running
    finally:
        scheduler.stop(wait=True, timeout=2)

    assert all(n.level == NotificationLevel.OVERDUE for n in received)


def test_stop_prevents_further_scans():
    service = StubAssignments()
    scheduler = DeadlineScheduler(service, interval_seconds=0.05)
    scheduler.start()
    assert wait_for(lambda: scheduler.scan_count >= 1)

    scheduler.stop(wait=True, timeout=2)
    count = scheduler.scan_count
    time.sleep(0.2)

    assert scheduler.scan_count == count
    assert not scheduler.is_running


def test_scan_in_progress_completes_after_stop():
    release = threading.Event()
    service = StubAssignments(block=release)
    scheduler = DeadlineScheduler(service, interval_seconds=0.05)

    scheduler.start()
    assert service.started.wait(2)
    scheduler.stop()
    release.set()
    scheduler.stop(wait=True, timeout=2)

    assert scheduler.scan_count == 1
    assert service.calls == 1


def test_failed_scan_does_not_kill_worker(caplog):
    service = StubAssignments(fail_first=True)
    scheduler = DeadlineScheduler(service, interval_seconds=0.05)

    scheduler.start()
    try:
        assert wait_for(lambda: scheduler.scan_count >= 1)
    finally:
        scheduler.stop(wait=True, timeout=2)

    assert service.calls >= 2
    assert "Deadline scan failed" in caplog.text


def test_restart_after_stop_is_rejected():
    scheduler = DeadlineScheduler(StubAssignments(), interval_seconds=0.05)
    scheduler.start()
    scheduler.stop(wait=True, timeout=2)

    with pytest.raises(SchedulingError):
        scheduler.start()


def test_interval_must_be_positive():
    with pytest.raises(SchedulingError):
        DeadlineScheduler(StubAssignments(), interval_seconds=0)


def test_ad_hoc_notification():
    received = []
    scheduler = DeadlineScheduler(StubAssignments(), notifier=received.append)

    notification = scheduler.notify("Reminder", "Check the syllabus")

    assert received == [notification]
    assert notification.to_dict()["level"] == "heads_up"
