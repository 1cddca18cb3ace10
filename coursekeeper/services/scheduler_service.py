"""
Deadline scheduler that periodically scans assignments and emits notifications.
"""

import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from ..core.entities import Assignment
from ..core.enums import AssignmentStatus, NotificationLevel, UrgencyBand
from ..core.exceptions import SchedulingError
from ..core.interfaces import Notifier
from ..logging_config import get_logger
from ..util.dates import ensure_utc, to_iso, utc_now, whole_days_between, whole_hours_between
from .assignment_service import AssignmentService

logger = get_logger(__name__)

URGENT_HOURS = 24
HEADS_UP_HOURS = 72


@dataclass
class Notification:
    """A deadline notification handed to the notifier callback."""
    level: NotificationLevel
    title: str
    message: str
    assignment_id: Optional[str] = None
    count: Optional[int] = None
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level.value,
            "title": self.title,
            "message": self.message,
            "assignment_id": self.assignment_id,
            "count": self.count,
            "created_at": to_iso(self.created_at),
        }


def classify_assignment(assignment: Assignment, now: datetime) -> Optional[UrgencyBand]:
    """Urgency band of an upcoming assignment, or None when no notice is due."""
    now = ensure_utc(now)
    if assignment.status == AssignmentStatus.SUBMITTED or assignment.due_date <= now:
        return None

    hours = whole_hours_between(now, assignment.due_date)
    if hours <= URGENT_HOURS:
        return UrgencyBand.URGENT
    elif hours <= HEADS_UP_HOURS:
        return UrgencyBand.HEADS_UP
    return None


def log_notification(notification: Notification) -> None:
    """Default notifier: write the notification to the log."""
    logger.info("%s: %s", notification.title, notification.message)


class DeadlineScheduler:
    """Runs deadline scans on one background thread at a fixed rate.

    The first scan runs as soon as the worker starts. When a scan overruns
    the interval, missed ticks are dropped rather than run back to back.
    Stopping is final: a stopped scheduler cannot be started again.
    """

    def __init__(self, assignment_service: AssignmentService, notifier: Optional[Notifier] = None,
                 interval_seconds: float = 3600.0, upcoming_window_days: int = 3,
                 clock: Callable[[], datetime] = utc_now):
        if interval_seconds <= 0:
            raise SchedulingError("Scan interval must be positive")

        self._assignment_service = assignment_service
        self._notifier = notifier or log_notification
        self._interval = interval_seconds
        self._window_days = upcoming_window_days
        self._clock = clock

        self._stop_event = threading.Event()
        self._state_lock = threading.Lock()
        self._run_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._scan_count = 0
        self._last_run_at: Optional[datetime] = None

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return (self._thread is not None and self._thread.is_alive()
                and not self._stop_event.is_set())

    @property
    def scan_count(self) -> int:
        return self._scan_count

    @property
    def last_run_at(self) -> Optional[datetime]:
        return self._last_run_at

    def start(self) -> None:
        """Start the worker thread. A second call while running is ignored."""
        with self._state_lock:
            if self._stop_event.is_set():
                raise SchedulingError("Deadline scheduler cannot be restarted after stop")
            if self._thread is not None:
                return

            self._thread = threading.Thread(target=self._run, name="DeadlineScheduler", daemon=True)
            self._thread.start()
        logger.info("Deadline scheduler started (interval %.0fs)", self._interval)

    def stop(self, wait: bool = False, timeout: Optional[float] = None) -> None:
        """Prevent further scans. A scan already in progress runs to completion."""
        self._stop_event.set()
        thread = self._thread
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        logger.info("Deadline scheduler stopped")

    def _run(self) -> None:
        next_run = time.monotonic()
        while not self._stop_event.is_set():
            try:
                self.check_deadlines()
            except Exception:
                logger.exception("Deadline scan failed")

            next_run += self._interval
            now = time.monotonic()
            if next_run <= now:
                skipped = int((now - next_run) // self._interval) + 1
                logger.warning("Deadline scan overran, skipping %d tick(s)", skipped)
                next_run += skipped * self._interval

            if self._stop_event.wait(next_run - now):
                break

    def check_deadlines(self, now: Optional[datetime] = None) -> List[Notification]:
        """Run one scan and return the notifications it emitted."""
        with self._run_lock:
            now = ensure_utc(now) if now else ensure_utc(self._clock())
            notifications: List[Notification] = []

            for assignment in self._assignment_service.get_upcoming_assignments(self._window_days, now=now):
                band = classify_assignment(assignment, now)
                if band == UrgencyBand.URGENT:
                    hours = whole_hours_between(now, assignment.due_date)
                    notifications.append(Notification(
                        level=NotificationLevel.URGENT,
                        title="Assignment Due Soon!",
                        message=f"{assignment.title} is due in {hours} hours",
                        assignment_id=assignment.id,
                    ))
                elif band == UrgencyBand.HEADS_UP:
                    days = whole_days_between(now, assignment.due_date)
                    notifications.append(Notification(
                        level=NotificationLevel.HEADS_UP,
                        title="Upcoming Deadline",
                        message=f"{assignment.title} is due in {days} days",
                        assignment_id=assignment.id,
                    ))

            overdue = self._assignment_service.get_overdue_assignments(now=now)
            if overdue:
                notifications.append(Notification(
                    level=NotificationLevel.OVERDUE,
                    title="Overdue Assignments",
                    message=f"You have {len(overdue)} overdue assignment(s)",
                    count=len(overdue),
                ))

            for notification in notifications:
                self._emit(notification)

            self._scan_count += 1
            self._last_run_at = now
            logger.info("Deadline scan complete: %d notification(s)", len(notifications))
            return notifications

    def notify(self, title: str, message: str,
               level: NotificationLevel = NotificationLevel.HEADS_UP) -> Notification:
        """Send an ad hoc notification through the configured notifier."""
        notification = Notification(level=level, title=title, message=message)
        self._emit(notification)
        return notification

    def _emit(self, notification: Notification) -> None:
        try:
            self._notifier(notification)
        except Exception:
            logger.exception("Notifier failed for %r", notification.title)
