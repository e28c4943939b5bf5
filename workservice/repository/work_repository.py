"""Storage of submitted works."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select

from ..models import Work, WorkWithDetails
from .sql_repository import SqlRepository, assignments, students, works

_WORK_COLUMNS = (
    works.c.id,
    works.c.student_id,
    works.c.assignment_id,
    works.c.file_id,
    works.c.status,
    works.c.created_at,
    works.c.updated_at,
)


def _plain():
    return select(*_WORK_COLUMNS)


def _detailed():
    return select(
        *_WORK_COLUMNS,
        students.c.name.label("student_name"),
        students.c.email.label("student_email"),
        assignments.c.title.label("assignment_title"),
    ).select_from(
        works.join(students, works.c.student_id == students.c.id).join(
            assignments, works.c.assignment_id == assignments.c.id
        )
    )


class WorkRepository(SqlRepository):
    """Works, optionally joined with their student and assignment."""

    def create(self, work: Work) -> None:
        with self.begin() as conn:
            conn.execute(
                works.insert().values(
                    id=work.id,
                    student_id=work.student_id,
                    assignment_id=work.assignment_id,
                    file_id=work.file_id,
                    status=work.status,
                    created_at=work.created_at,
                    updated_at=work.updated_at,
                )
            )

    def get_by_id(self, work_id: str) -> Optional[Work]:
        return self._first(_plain().where(works.c.id == work_id))

    def get_by_student_and_assignment(
        self, student_id: str, assignment_id: str
    ) -> Optional[Work]:
        return self._first(
            _plain().where(
                works.c.student_id == student_id,
                works.c.assignment_id == assignment_id,
            )
        )

    def get_by_assignment_id(
        self, assignment_id: str, limit: int, offset: int
    ) -> tuple[list[WorkWithDetails], int]:
        return self._detailed_page(works.c.assignment_id == assignment_id, limit, offset)

    def get_by_student_id(
        self, student_id: str, limit: int, offset: int
    ) -> tuple[list[WorkWithDetails], int]:
        return self._detailed_page(works.c.student_id == student_id, limit, offset)

    def get_all(self, limit: int, offset: int) -> tuple[list[WorkWithDetails], int]:
        return self._detailed_page(None, limit, offset)

    def update_status(self, work_id: str, status: str) -> None:
        self._update(work_id, status=status)

    def update_file_id(self, work_id: str, file_id: str) -> None:
        self._update(work_id, file_id=file_id)

    def delete(self, work_id: str) -> None:
        with self.begin() as conn:
            conn.execute(works.delete().where(works.c.id == work_id))

    def get_previous_works(self, assignment_id: str, exclude_work_id: str) -> list[Work]:
        query = (
            _plain()
            .where(works.c.assignment_id == assignment_id, works.c.id != exclude_work_id)
            .order_by(works.c.created_at)
        )
        with self._connect() as conn:
            rows = conn.execute(query).all()
        return [Work(**dict(row._mapping)) for row in rows]

    def _first(self, query) -> Optional[Work]:
        with self._connect() as conn:
            row = conn.execute(query).first()
        return Work(**dict(row._mapping)) if row is not None else None

    def _update(self, work_id: str, **values) -> None:
        with self.begin() as conn:
            conn.execute(
                works.update()
                .where(works.c.id == work_id)
                .values(updated_at=datetime.now(timezone.utc), **values)
            )

    def _detailed_page(
        self, condition, limit: int, offset: int
    ) -> tuple[list[WorkWithDetails], int]:
        count_query = select(func.count()).select_from(works)
        query = _detailed()
        if condition is not None:
            count_query = count_query.where(condition)
            query = query.where(condition)
        query = query.order_by(works.c.created_at.desc()).limit(limit).offset(offset)
        with self._connect() as conn:
            total = conn.execute(count_query).scalar_one()
            rows = conn.execute(query).all()
        return [WorkWithDetails(**dict(row._mapping)) for row in rows], total