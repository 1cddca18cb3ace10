"""Tests specific to the JSON document store."""
import json
import os

import pytest

from coursekeeper.core.entities import Assignment
from coursekeeper.core.exceptions import PersistenceError
from coursekeeper.persistence.repositories import JsonCourseRepository

from conftest import due_in, make_course


def test_missing_file_starts_empty_and_creates_directory(tmp_path):
    path = tmp_path / "nested" / "dir" / "scheduler-data.json"
    repo = JsonCourseRepository(str(path))

    assert repo.get_all_courses() == []
    assert path.parent.is_dir()
    assert not path.exists()


def test_document_layout(json_repo):
    course = make_course(assignments=[Assignment("A", due_in(days=1))])
    json_repo.add_course(course)

    with open(json_repo.file_path, encoding="utf-8") as f:
        document = json.load(f)

    assert list(document) == ["courses"]
    stored = document["courses"][0]
    assert stored["id"] == course.id
    assert stored["semester"] == {"season": "FALL", "year": 2024}
    assert stored["assignments"][0]["status"] == "NOT_STARTED"
    assert stored["assignments"][0]["due_date"] == "2024-10-02T12:00:00.000000+00:00"


def test_state_survives_reopening(json_repo):
    first = make_course(code="CS101")
    second = make_course(code="CS102", assignments=[Assignment("A", due_in(days=1))])
    json_repo.add_course(first)
    json_repo.add_course(second)

    reopened = JsonCourseRepository(json_repo.file_path)

    assert [c.code for c in reopened.get_all_courses()] == ["CS101", "CS102"]
    assert reopened.get_course_by_id(second.id).to_dict() == second.to_dict()


def test_update_keeps_list_order(json_repo):
    courses = [make_course(code=f"CS10{i}") for i in range(3)]
    for course in courses:
        json_repo.add_course(course)

    courses[1].name = "Renamed"
    json_repo.update_course(courses[1])

    assert [c.code for c in json_repo.get_all_courses()] == ["CS100", "CS101", "CS102"]
    assert json_repo.get_all_courses()[1].name == "Renamed"


def test_corrupt_document_starts_empty(tmp_path, caplog):
    path = tmp_path / "scheduler-data.json"
    path.write_text("{ this is not json", encoding="utf-8")

    repo = JsonCourseRepository(str(path))

    assert repo.get_all_courses() == []
    assert "Failed to load data" in caplog.text


def test_document_with_wrong_shape_starts_empty(tmp_path):
    path = tmp_path / "scheduler-data.json"
    path.write_text(json.dumps({"courses": [{"name": "missing id and code"}]}), encoding="utf-8")

    assert JsonCourseRepository(str(path)).get_all_courses() == []


def test_failed_save_raises_and_keeps_memory_consistent(json_repo, monkeypatch):
    existing = make_course(code="CS100")
    json_repo.add_course(existing)

    def fail(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", fail)

    with pytest.raises(PersistenceError):
        json_repo.add_course(make_course(code="CS200"))
    with pytest.raises(PersistenceError):
        json_repo.delete_course(existing.id)

    assert [c.code for c in json_repo.get_all_courses()] == ["CS100"]
    assert [f for f in os.listdir(os.path.dirname(json_repo.file_path)) if f.startswith(".scheduler-")] == []


def test_unserializable_update_is_reverted_and_store_stays_writable(json_repo):
    course = make_course(code="CS100", assignments=[Assignment("A1", due_in(days=1))])
    json_repo.add_course(course)

    broken = json_repo.get_course_by_id(course.id)
    broken.add_assignment(Assignment("B1", due_in(days=2), description=object()))
    with pytest.raises(PersistenceError):
        json_repo.update_course(broken)

    def titles_on_disk():
        with open(json_repo.file_path, encoding="utf-8") as f:
            return [a["title"] for c in json.load(f)["courses"] for a in c["assignments"]]

    in_memory = [a.title for c in json_repo.get_all_courses() for a in c.assignments]
    assert in_memory == titles_on_disk() == ["A1"]

    json_repo.add_course(make_course(code="CS200"))
    assert [c.code for c in JsonCourseRepository(json_repo.file_path).get_all_courses()] == ["CS100", "CS200"]
