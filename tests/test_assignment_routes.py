import logging
import uuid
from types import SimpleNamespace

import pytest
from flask import Flask
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from workservice.models import CreateStudentRequest, CreateWorkRequest
from workservice.repository.assignment_repository import AssignmentRepository
from workservice.repository.sql_repository import METADATA
from workservice.repository.student_repository import StudentRepository
from workservice.repository.work_repository import WorkRepository
from workservice.services.assignment_service import AssignmentService
from workservice.services.student_service import StudentService
from workservice.services.work_service import WorkService
from workservice.web.assignment_routes import create_assignment_blueprint

BASE = "/api/v1/assignments"


def _app(assignment_service, work_service, logger):
    app = Flask(__name__)
    app.register_blueprint(create_assignment_blueprint(assignment_service, work_service, logger))
    return app.test_client()


@pytest.fixture
def stack():
    engine = create_engine(
        "sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False}
    )
    METADATA.create_all(engine)
    logger = logging.getLogger("tests.assignment_routes")
    work_repo = WorkRepository(engine, logger)
    student_repo = StudentRepository(engine, logger)
    assignment_repo = AssignmentRepository(engine, logger)
    assignments = AssignmentService(assignment_repo, logger)
    students = StudentService(student_repo, logger)
    works = WorkService(work_repo, student_repo, assignment_repo, None, None, logger)
    return SimpleNamespace(
        client=_app(assignments, works, logger), students=students, works=works
    )


def _create(client, title, description=""):
    response = client.post(BASE, json={"title": title, "description": description})
    assert response.status_code == 200
    return response.get_json()["data"]


def _add_work(stack, assignment_id):
    student = stack.students.create_student(
        CreateStudentRequest(name="Ann", email=f"{uuid.uuid4().hex}@example.com")
    )
    stack.works.create_work(
        CreateWorkRequest(student_id=student.id, assignment_id=assignment_id)
    )
    return student


def test_create_then_get_round_trip(stack):
    created = _create(stack.client, "Essay", "Write an essay")
    assert uuid.UUID(created["id"])
    response = stack.client.get(f"{BASE}/{created['id']}")
    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["title"] == "Essay"
    assert data["description"] == "Write an essay"
    assert data["total_works"] == 0


def test_create_requires_title(stack):
    response = stack.client.post(BASE, json={"description": "no title"})
    assert response.status_code == 400
    assert response.get_json()["message"] == "title is required"


def test_create_rejects_malformed_body(stack):
    response = stack.client.post(BASE, data="{broken", content_type="application/json")
    assert response.status_code == 400
    assert response.get_json()["message"] == "Invalid request body"


def test_get_unknown_assignment_is_not_found(stack):
    response = stack.client.get(f"{BASE}/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.get_json()["message"] == "assignment not found"


def test_list_echoes_requested_paging(stack):
    titles = {"First", "Second", "Third"}
    for title in titles:
        _create(stack.client, title)
    response = stack.client.get(f"{BASE}?page=1&limit=500")
    data = response.get_json()["data"]
    assert data["total"] == len(titles)
    assert data["limit"] == 500
    assert data["page"] == 1
    assert {item["title"] for item in data["assignments"]} == titles


def test_list_defaults_when_params_malformed(stack):
    response = stack.client.get(f"{BASE}?page=abc&limit=x")
    data = response.get_json()["data"]
    assert data["page"] == 1
    assert data["limit"] == 20


def test_update_changes_title(stack):
    created = _create(stack.client, "Old")
    response = stack.client.put(f"{BASE}/{created['id']}", json={"title": "New"})
    assert response.get_json()["data"]["message"] == "Assignment updated successfully"
    fetched = stack.client.get(f"{BASE}/{created['id']}").get_json()["data"]
    assert fetched["title"] == "New"


def test_update_unknown_assignment_is_not_found(stack):
    response = stack.client.put(f"{BASE}/{uuid.uuid4()}", json={"title": "New"})
    assert response.status_code == 404


def test_update_requires_title(stack):
    created = _create(stack.client, "Old")
    response = stack.client.put(f"{BASE}/{created['id']}", json={"title": ""})
    assert response.status_code == 400
    assert response.get_json()["message"] == "title is required"


def test_delete_removes_assignment(stack):
    created = _create(stack.client, "Temp")
    response = stack.client.delete(f"{BASE}/{created['id']}")
    assert response.get_json()["data"]["message"] == "Assignment deleted successfully"
    assert stack.client.get(f"{BASE}/{created['id']}").status_code == 404


def test_delete_with_works_conflicts(stack):
    created = _create(stack.client, "Busy")
    _add_work(stack, created["id"])
    response = stack.client.delete(f"{BASE}/{created['id']}")
    assert response.status_code == 409
    assert response.get_json()["message"] == "cannot delete assignment with existing works"


def test_works_by_assignment_lists_details(stack):
    created = _create(stack.client, "Lab")
    student = _add_work(stack, created["id"])
    response = stack.client.get(f"{BASE}/{created['id']}/works")
    data = response.get_json()["data"]
    assert data["total"] == 1
    assert data["works"][0]["student_id"] == student.id
    assert data["works"][0]["assignment_title"] == "Lab"


class _FailingAssignments:
    def create_assignment(self, request):
        raise RuntimeError("database down")

    def get_all_assignments(self, page, limit):
        raise RuntimeError("database down")

    def get_assignment_by_id(self, assignment_id):
        raise RuntimeError("database down")


def test_create_failure_is_internal_error():
    client = _app(_FailingAssignments(), None, logging.getLogger("tests"))
    response = client.post(BASE, json={"title": "Essay"})
    assert response.status_code == 500
    assert response.get_json()["message"] == "Failed to create assignment"


def test_list_failure_is_internal_error():
    client = _app(_FailingAssignments(), None, logging.getLogger("tests"))
    response = client.get(BASE)
    assert response.status_code == 500
    assert response.get_json()["message"] == "Failed to get assignments"


def test_unexpected_lookup_failure_hides_details():
    client = _app(_FailingAssignments(), None, logging.getLogger("tests"))
    response = client.get(f"{BASE}/{uuid.uuid4()}")
    assert response.status_code == 500
    assert response.get_json()["message"] == "Internal server error"