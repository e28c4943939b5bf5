import logging
import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from workservice.models import CreateAssignmentRequest
from workservice.repository.assignment_repository import AssignmentRepository
from workservice.repository.sql_repository import METADATA, works
from workservice.services.assignment_service import AssignmentService
from workservice.services.errors import ConflictError, NotFoundError, ServiceError

LOGGER = logging.getLogger("test-assignment-service")


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False}
    )
    METADATA.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def repo(engine):
    return AssignmentRepository(engine, LOGGER)


@pytest.fixture
def service(repo):
    return AssignmentService(repo, LOGGER)


def add_work(engine, assignment_id, status="uploaded"):
    now = datetime.now(timezone.utc)
    with engine.begin() as conn:
        conn.execute(
            works.insert().values(
                id=str(uuid.uuid4()),
                student_id=str(uuid.uuid4()),
                assignment_id=assignment_id,
                file_id="pending",
                status=status,
                created_at=now,
                updated_at=now,
            )
        )


def test_create_then_get(service):
    created = service.create_assignment(CreateAssignmentRequest("Essay", "Write it"))
    fetched = service.get_assignment_by_id(created.id)
    assert fetched.title == "Essay"
    assert fetched.description == "Write it"
    assert fetched.total_works == 0
    assert str(uuid.UUID(created.id)) == created.id


def test_get_missing_raises_not_found(service):
    with pytest.raises(NotFoundError, match="assignment not found"):
        service.get_assignment_by_id(str(uuid.uuid4()))


def test_get_all_uses_default_limit_when_out_of_range(service):
    for n in range(25):
        service.create_assignment(CreateAssignmentRequest(f"Task {n}", ""))
    items, total = service.get_all_assignments(0, 500)
    assert total == 25
    assert len(items) == 20


def test_get_all_pages(service):
    for n in range(25):
        service.create_assignment(CreateAssignmentRequest(f"Task {n}", ""))
    first, _ = service.get_all_assignments(1, 10)
    last, total = service.get_all_assignments(3, 10)
    assert len(first) == 10
    assert len(last) == total - 20


def test_update_changes_fields(service):
    created = service.create_assignment(CreateAssignmentRequest("Old", "old"))
    service.update_assignment(created.id, CreateAssignmentRequest("New", "new"))
    fetched = service.get_assignment_by_id(created.id)
    assert (fetched.title, fetched.description) == ("New", "new")


def test_update_missing_raises(service):
    with pytest.raises(NotFoundError):
        service.update_assignment("missing", CreateAssignmentRequest("X", ""))


def test_delete_with_works_conflicts(service, engine):
    created = service.create_assignment(CreateAssignmentRequest("Lab", ""))
    add_work(engine, created.id)
    with pytest.raises(ConflictError, match="cannot delete assignment with existing works"):
        service.delete_assignment(created.id)
    assert service.get_assignment_by_id(created.id).total_works == 1


def test_delete_without_works(service):
    created = service.create_assignment(CreateAssignmentRequest("Lab", ""))
    service.delete_assignment(created.id)
    with pytest.raises(NotFoundError):
        service.get_assignment_by_id(created.id)


def test_repository_failure_is_wrapped(service, repo):
    repo.close()
    with pytest.raises(ServiceError, match="failed to get assignment") as info:
        service.get_assignment_by_id("any")
    assert not isinstance(info.value, NotFoundError)