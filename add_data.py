"""
Script to add sample courses and assignments to CourseKeeper via the REST API.
Make sure the server is running before executing this script.

Usage:
    python add_data.py
"""

import os
import sys
from datetime import datetime, timedelta, timezone

import requests


def _console_supports_utf8() -> bool:
    enc = getattr(sys.stdout, "encoding", None)
    return enc is not None and "utf" in enc.lower()


_OK_CHAR = "✓" if _console_supports_utf8() else "[OK]"
_FAIL_CHAR = "✗" if _console_supports_utf8() else "[FAIL]"
_WARN_CHAR = "⚠" if _console_supports_utf8() else "[WARN]"


def _detect_base_url() -> str:
    """Determine a reachable BASE_URL.

    Priority: environment variable `COURSEKEEPER_BASE_URL`, then common local ports.
    If nothing responds, fall back to http://127.0.0.1:8000.
    """
    env = os.environ.get("COURSEKEEPER_BASE_URL")
    if env:
        return env

    candidates = [
        "http://127.0.0.1:8000",
        "http://localhost:8000",
    ]

    for c in candidates:
        try:
            resp = requests.get(f"{c}/health", timeout=0.5)
            if resp.status_code == 200:
                return c
        except requests.exceptions.RequestException:
            continue

    return candidates[0]


BASE_URL = _detect_base_url()


def check_server():
    """Check if the server is running."""
    try:
        response = requests.get(f"{BASE_URL}/health", timeout=2)
        if response.status_code == 200:
            print(f"{_OK_CHAR} Server is running")
            return True
    except requests.exceptions.RequestException:
        pass

    print(f"{_FAIL_CHAR} Server is not running!")
    print("\nPlease start the server first:")
    print("  python -m coursekeeper.main --rest-port 8000")
    return False


def create_course(code, name, professor, season, year, description=None):
    """Create a new course."""
    url = f"{BASE_URL}/courses"
    data = {
        "code": code,
        "name": name,
        "professor": professor,
        "semester": {"season": season, "year": year},
        "description": description,
    }
    try:
        response = requests.post(url, json=data, timeout=10)
        if response.status_code == 201:
            print(f"{_OK_CHAR} Created course: {code} - {name}")
            return response.json()
        else:
            print(f"{_FAIL_CHAR} Failed to create course: {response.text}")
            return None
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error creating course: {e}")
        return None


def create_assignment(course, title, due_in, description=None, status="NOT_STARTED"):
    """Create an assignment due ``due_in`` from now."""
    if not course:
        return None

    url = f"{BASE_URL}/courses/{course['id']}/assignments"
    data = {
        "title": title,
        "due_date": (datetime.now(timezone.utc) + due_in).isoformat(),
        "description": description,
        "status": status,
    }
    try:
        response = requests.post(url, json=data, timeout=10)
        if response.status_code == 201:
            print(f"{_OK_CHAR} Created assignment: {title} ({course['code']})")
            return response.json()
        else:
            print(f"{_FAIL_CHAR} Failed to create assignment: {response.text}")
            return None
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error creating assignment: {e}")
        return None


def list_courses():
    """List all courses."""
    url = f"{BASE_URL}/courses"
    try:
        response = requests.get(url, timeout=10)
        if response.status_code == 200:
            courses = response.json()
            print(f"\n{'='*60}")
            print(f"Courses ({len(courses)})")
            print(f"{'='*60}")
            for course in courses:
                semester = course.get("semester") or {}
                term = f"{semester.get('season', '')} {semester.get('year', '')}".strip() or "-"
                print(f"  {course['code']:10} | {course['name']:30} | {term:12} | "
                      f"{len(course['assignments'])} assignment(s)")
            return courses
        else:
            print(f"{_FAIL_CHAR} Failed to list courses: {response.text}")
            return []
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error listing courses: {e}")
        return []


def list_upcoming(days=7):
    """List assignments due in the next ``days`` days."""
    url = f"{BASE_URL}/assignments/upcoming"
    try:
        response = requests.get(url, params={"days": days}, timeout=10)
        if response.status_code == 200:
            assignments = response.json()
            print(f"\n{'='*60}")
            print(f"Upcoming assignments, next {days} days ({len(assignments)})")
            print(f"{'='*60}")
            for assignment in assignments:
                print(f"  {assignment['due_date'][:16]:16} | {assignment['title']:30} | {assignment['status']}")
            return assignments
        else:
            print(f"{_FAIL_CHAR} Failed to list upcoming assignments: {response.text}")
            return []
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error listing upcoming assignments: {e}")
        return []


def check_notifications():
    """Run a deadline scan on the server."""
    url = f"{BASE_URL}/notifications/check"
    try:
        response = requests.post(url, timeout=10)
        if response.status_code == 200:
            notifications = response.json()
            print(f"\n{'='*60}")
            print("Deadline notifications")
            print(f"{'='*60}")
            for notification in notifications:
                print(f"  {_WARN_CHAR} {notification['title']}: {notification['message']}")
            return notifications
        else:
            print(f"{_FAIL_CHAR} Failed to check notifications: {response.text}")
            return []
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error checking notifications: {e}")
        return []


def main():
    """Main execution."""
    print("="*60)
    print("CourseKeeper - Data Addition Script")
    print("="*60)
    print()

    if not check_server():
        sys.exit(1)

    print("\n" + "="*60)
    print("Adding Sample Data...")
    print("="*60 + "\n")

    year = datetime.now(timezone.utc).year

    print("Creating courses...")
    cs101 = create_course("CS101", "Introduction to Programming", "Dr. Grace Hopper", "FALL", year,
                          "Learn Python programming basics")
    cs301 = create_course("CS301", "Database Systems", "Dr. Edgar Codd", "FALL", year,
                          "Relational databases and SQL")
    math101 = create_course("MATH101", "Calculus I", "Dr. Leonhard Euler", "FALL", year)
    eng101 = create_course("ENG101", "English Composition", "Dr. Mary Shelley", "SPRING", year)

    print("\nCreating assignments...")
    create_assignment(cs101, "Hello World", timedelta(hours=12), "First program")
    create_assignment(cs101, "Loops Lab", timedelta(days=2, hours=6), status="IN_PROGRESS")
    create_assignment(cs301, "ER Diagram", timedelta(days=5), "Model the library schema")
    create_assignment(cs301, "SQL Quiz Prep", timedelta(days=-1))
    create_assignment(math101, "Limits Worksheet", timedelta(days=1, hours=20))
    create_assignment(eng101, "Personal Essay", timedelta(days=14), status="SUBMITTED")

    list_courses()
    list_upcoming()
    check_notifications()

    print("\n" + "="*60)
    print(f"{_OK_CHAR} Sample data added successfully!")
    print("="*60)
    print("\nYou can now:")
    print(f"  - View API docs: {BASE_URL}/docs")
    print(f"  - List courses: curl {BASE_URL}/courses")
    print(f"  - Overdue work: curl {BASE_URL}/assignments/overdue")
    print(f"  - Search: curl '{BASE_URL}/search?q=cs'")
    print()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print(f"\n\n{_FAIL_CHAR} Interrupted by user")
        sys.exit(1)
