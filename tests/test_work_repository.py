import logging
from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from workservice.models import Work, WorkWithDetails
from workservice.repository.sql_repository import METADATA, assignments, students
from workservice.repository.work_repository import WorkRepository

BASE = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    METADATA.create_all(eng)
    with eng.begin() as conn:
        for sid, name in (("s1", "Alice"), ("s2", "Bob")):
            conn.execute(
                students.insert().values(
                    id=sid,
                    name=name,
                    email=f"{sid}@example.com",
                    created_at=BASE,
                    updated_at=BASE,
                )
            )
        for aid, title in (("a1", "Essay"), ("a2", "Lab")):
            conn.execute(
                assignments.insert().values(
                    id=aid,
                    title=title,
                    description="",
                    created_at=BASE,
                    updated_at=BASE,
                )
            )
    yield eng
    eng.dispose()


@pytest.fixture
def repo(engine):
    return WorkRepository(engine, logging.getLogger("test"))


def _work(work_id, student_id, assignment_id, minutes=0, status="uploaded"):
    when = BASE + timedelta(minutes=minutes)
    return Work(
        id=work_id,
        student_id=student_id,
        assignment_id=assignment_id,
        file_id="pending",
        status=status,
        created_at=when,
        updated_at=when,
    )


def test_create_and_get_by_id_round_trip(repo):
    work = _work("w1", "s1", "a1")
    repo.create(work)
    assert repo.get_by_id("w1") == work


def test_get_by_id_missing_returns_none(repo):
    assert repo.get_by_id("nope") is None


def test_get_by_student_and_assignment(repo):
    repo.create(_work("w1", "s1", "a1"))
    repo.create(_work("w2", "s1", "a2", minutes=1))
    found = repo.get_by_student_and_assignment("s1", "a2")
    assert found.id == "w2"
    assert repo.get_by_student_and_assignment("s2", "a1") is None


def test_get_by_assignment_id_orders_newest_first_with_details(repo):
    repo.create(_work("w1", "s1", "a1", minutes=0))
    repo.create(_work("w2", "s2", "a1", minutes=5))
    repo.create(_work("w3", "s1", "a2", minutes=10))
    items, total = repo.get_by_assignment_id("a1", 10, 0)
    assert total == 2
    assert [w.id for w in items] == ["w2", "w1"]
    assert isinstance(items[0], WorkWithDetails)
    assert items[0].student_name == "Bob"
    assert items[0].student_email == "s2@example.com"
    assert items[0].assignment_title == "Essay"


def test_get_by_assignment_id_applies_limit_and_offset(repo):
    for index in range(4):
        repo.create(_work(f"w{index}", "s1", "a1", minutes=index))
    items, total = repo.get_by_assignment_id("a1", 2, 1)
    assert total == 4
    assert [w.id for w in items] == ["w2", "w1"]


def test_get_by_student_id(repo):
    repo.create(_work("w1", "s1", "a1", minutes=0))
    repo.create(_work("w2", "s1", "a2", minutes=1))
    repo.create(_work("w3", "s2", "a1", minutes=2))
    items, total = repo.get_by_student_id("s1", 10, 0)
    assert total == 2
    assert [w.id for w in items] == ["w2", "w1"]
    assert {w.assignment_title for w in items} == {"Essay", "Lab"}


def test_get_all_counts_everything(repo):
    repo.create(_work("w1", "s1", "a1", minutes=0))
    repo.create(_work("w2", "s2", "a2", minutes=1))
    items, total = repo.get_all(1, 0)
    assert total == 2
    assert [w.id for w in items] == ["w2"]


def test_get_all_empty(repo):
    assert repo.get_all(20, 0) == ([], 0)


def test_update_status_changes_status_and_timestamp(repo):
    repo.create(_work("w1", "s1", "a1"))
    repo.update_status("w1", "analyzing")
    stored = repo.get_by_id("w1")
    assert stored.status == "analyzing"
    assert stored.updated_at > BASE


def test_update_file_id(repo):
    repo.create(_work("w1", "s1", "a1"))
    repo.update_file_id("w1", "file-123")
    stored = repo.get_by_id("w1")
    assert stored.file_id == "file-123"
    assert stored.status == "uploaded"


def test_delete(repo):
    repo.create(_work("w1", "s1", "a1"))
    repo.delete("w1")
    assert repo.get_by_id("w1") is None


def test_get_previous_works_excludes_and_orders_oldest_first(repo):
    repo.create(_work("w1", "s1", "a1", minutes=5))
    repo.create(_work("w2", "s2", "a1", minutes=1))
    repo.create(_work("w3", "s1", "a2", minutes=0))
    repo.create(_work("w4", "s2", "a1", minutes=9))
    previous = repo.get_previous_works("a1", "w4")
    assert [w.id for w in previous] == ["w2", "w1"]


def test_closed_repository_raises(repo):
    repo.close()
    with pytest.raises(RuntimeError):
        repo.get_by_id("w1")